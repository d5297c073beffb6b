"""`.env` key source.

Purpose
-------
Read a dotenv file into a flat snapshot implementing
:class:`lib_typed_env.application.ports.KeySource`, so local development
overrides can feed the same discovery pass as real environment variables.

Contents
--------
* :class:`DotEnvSource` – parsed snapshot of one file; :meth:`DotEnvSource.discover`
  searches upwards from a start directory.
* Helper functions (`_iter_candidates`, `_parse_dotenv`, `_strip_quotes`).
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error


class DotEnvSource:
    """Key source backed by a parsed ``.env`` file."""

    def __init__(self, path: str | Path | None = None) -> None:
        """Parse *path* when given; ``None`` yields an empty source.

        Raises
        ------
        InvalidFormat
            When a non-comment line lacks ``=``.
        """

        self.path: str | None = str(path) if path is not None else None
        self._values: dict[str, str] = _parse_dotenv(Path(path)) if path is not None else {}

    @classmethod
    def discover(cls, start_dir: str | None = None) -> DotEnvSource:
        """Return a source for the first ``.env`` found walking up from *start_dir*.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> _ = (Path(tmp.name) / '.env').write_text('APP_TOKEN=secret', encoding='utf-8')
        >>> DotEnvSource.discover(tmp.name).lookup('APP_TOKEN')
        'secret'
        >>> tmp.cleanup()
        """

        for candidate in _iter_candidates(start_dir):
            if candidate.is_file():
                source = cls(candidate)
                log_debug("dotenv_loaded", stage="source", key=None, path=source.path, keys=len(source._values))
                return source
        log_debug("dotenv_not_found", stage="source", key=None, path=None)
        return cls()

    def lookup(self, key: str) -> str | None:
        return self._values.get(key)

    def keys(self) -> Iterable[str]:
        return list(self._values)


def _iter_candidates(start_dir: str | None) -> Iterable[Path]:
    """Yield candidate dotenv paths walking from ``start_dir`` to filesystem root."""

    base = Path(start_dir) if start_dir else Path.cwd()
    for directory in [base, *base.parents]:
        yield directory / ".env"


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse ``path`` into a flat dictionary, raising ``InvalidFormat`` on malformed lines.

    An ``export`` keyword in front of a key is accepted and dropped.
    """

    result: dict[str, str] = {}
    with path.open("r", encoding="utf-8") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                log_error("dotenv_invalid_line", stage="source", key=None, path=str(path), line=line_number)
                raise InvalidFormat(f"Malformed line {line_number} in {path}")
            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            if not key:
                raise InvalidFormat(f"Missing key on line {line_number} in {path}")
            result[key] = _strip_quotes(value.strip())
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    """

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
