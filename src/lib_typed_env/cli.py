"""CLI adapter for ``lib_typed_env`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check which environment keys a structure reads and what a load
produces, without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_env_prefix` – exposes :func:`lib_typed_env.core.default_env_prefix`.
* :func:`cli_key` – derives the key for a dotted field path.
* :func:`cli_load` – imports ``module:Class``, populates it from the environment
  and prints the result as JSON.
* :func:`main` – entry point used by ``console_scripts`` registration.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from importlib import import_module, metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.keys import DEFAULT_SEPARATOR, KeyCodec
from .core import DEFAULT_DEPTH
from .core import default_env_prefix as _default_env_prefix
from .core import read_env

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is unavailable."""

    try:
        return metadata.version("lib_typed_env")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Bind environment variables onto typed dataclass structures",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_typed_env",
    message="lib_typed_env version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_typed_env")
    except metadata.PackageNotFoundError:
        click.echo("lib_typed_env (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_typed_env')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Compute the canonical environment prefix for *slug*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["env-prefix", "config-kit"])
    >>> result.output.strip()
    'CONFIG_KIT'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("key", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path")
@click.option("--prefix", default="", help="Key prefix (e.g. APP)")
@click.option("--separator", default=DEFAULT_SEPARATOR, show_default=True, help="Word separator")
def cli_key(path: str, prefix: str, separator: str) -> None:
    """Print the environment key read for the dotted field PATH.

    ``service.max_retries`` with ``--prefix APP`` prints ``APP_SERVICE_MAX_RETRIES``.
    """

    segments = tuple(segment for segment in path.split(".") if segment)
    if not segments:
        raise click.BadParameter("Path must name at least one field", param_hint="PATH")
    click.echo(KeyCodec(prefix, separator).derive_key(segments))


@cli.command("load", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("target")
@click.option("--prefix", default="", help="Key prefix (e.g. APP)")
@click.option("--separator", default=DEFAULT_SEPARATOR, show_default=True, help="Word separator")
@click.option("--max-depth", type=int, default=DEFAULT_DEPTH, show_default=True, help="Maximum structure depth")
@click.option("--dotenv/--no-dotenv", default=False, help="Also read the nearest .env file")
@click.option(
    "--start-dir",
    type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True, readable=True),
    default=None,
    help="Starting directory for .env upward search (defaults to CWD)",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_load(
    target: str,
    prefix: str,
    separator: str,
    max_depth: int,
    dotenv: bool,
    start_dir: Optional[Path],
    indent: Optional[int],
) -> None:
    """Populate TARGET (``package.module:Class``) from the environment and print it as JSON.

    Values are printed as loaded; do not run this where the output is shared if
    the environment holds secrets.
    """

    config_cls = _import_target(target)
    config = read_env(
        config_cls(),
        prefix=prefix,
        separator=separator,
        max_depth=max_depth,
        dotenv=dotenv,
        start_dir=str(start_dir) if start_dir is not None else None,
    )
    click.echo(json.dumps(dataclasses.asdict(config), indent=indent, default=str, ensure_ascii=False))


def _import_target(target: str) -> Any:
    """Resolve ``module:attribute`` to a dataclass type."""

    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter("Target must look like 'package.module:ClassName'", param_hint="TARGET")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"Cannot import module {module_name!r}: {exc}", param_hint="TARGET") from exc
    resolved: Any = module
    for part in attribute.split("."):
        try:
            resolved = getattr(resolved, part)
        except AttributeError as exc:
            raise click.BadParameter(f"{module_name!r} has no attribute {attribute!r}", param_hint="TARGET") from exc
    if not (isinstance(resolved, type) and dataclasses.is_dataclass(resolved)):
        raise click.BadParameter(f"{target!r} is not a dataclass", param_hint="TARGET")
    return resolved


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_typed_env",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
