"""Composition root for ``lib_typed_env``.

Purpose
-------
Provide the entry points that wire a key source snapshot, the key codec, the
discovery walker and the assignment writer into one load operation.

Contents
--------
* :data:`DEFAULT_DEPTH` – default maximum path length.
* :class:`LoaderSettings` – immutable loader configuration.
* :class:`EnvLoader` – reusable loader; :meth:`EnvLoader.load` populates a
  dataclass instance in place.
* :func:`read_env` – one-shot convenience wrapper.

System Role
-----------
The only place that touches ambient process state (``os.environ``, the working
directory for ``.env`` discovery). Emits structured lifecycle events through
:mod:`lib_typed_env.observability`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Mapping, TypeVar

from .adapters.converters.basic import basic_converters
from .adapters.dotenv.default import DotEnvSource
from .adapters.env.default import ChainedSource, EnvironSource, default_env_prefix
from .adapters.naming.words import split_words
from .application.assignment import AssignmentWriter
from .application.discovery import DiscoveryWalker
from .application.keys import DEFAULT_SEPARATOR, KeyCodec
from .application.ports import Converter, KeySource, Tokenizer
from .domain.errors import UsageError
from .domain.path import DiscoveredValue
from .domain.types import is_frozen
from .observability import bind_trace_id, log_debug, log_info, make_event

DEFAULT_DEPTH: Final[int] = 10
"""Default maximum path length, enough for realistic nesting while stopping type loops early."""

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class LoaderSettings:
    """Immutable configuration of an :class:`EnvLoader`.

    Attributes
    ----------
    prefix:
        Leading key segment (``"APP"`` → ``APP_...``); empty means none.
    separator:
        Word joiner; empty falls back to ``"_"``.
    max_depth:
        Longest accepted path.
    converters:
        Read-only registry of leaf converters.
    tokenizer:
        Identifier to word splitter.
    """

    prefix: str = ""
    separator: str = DEFAULT_SEPARATOR
    max_depth: int = DEFAULT_DEPTH
    converters: Mapping[object, Converter] = field(default_factory=basic_converters)
    tokenizer: Tokenizer = split_words

    def __post_init__(self) -> None:
        object.__setattr__(self, "separator", self.separator or DEFAULT_SEPARATOR)
        object.__setattr__(self, "converters", MappingProxyType(dict(self.converters)))
        if self.max_depth < 1:
            raise UsageError(f"max_depth must be positive, got {self.max_depth}")


class EnvLoader:
    """Populate dataclass instances from environment variables.

    Keys are derived from field paths: ``UPPER([PREFIX SEP] WORDS(field) SEP ...)``.
    A loader is immutable and may serve any number of loads.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Settings:
    ...     name: str = ""
    ...     retries: int = 0
    >>> loader = EnvLoader("APP")
    >>> loader.load(Settings(), source=EnvironSource(environ={"APP_NAME": "svc", "APP_RETRIES": "3"}))
    Settings(name='svc', retries=3)
    """

    def __init__(
        self,
        prefix: str = "",
        separator: str = DEFAULT_SEPARATOR,
        *,
        converters: Mapping[object, Converter] | None = None,
        max_depth: int = DEFAULT_DEPTH,
        tokenizer: Tokenizer = split_words,
    ) -> None:
        self.settings = LoaderSettings(
            prefix=prefix,
            separator=separator,
            max_depth=max_depth,
            converters=basic_converters() if converters is None else converters,
            tokenizer=tokenizer,
        )
        self.codec = KeyCodec(self.settings.prefix, self.settings.separator, self.settings.tokenizer)

    def load(self, config: T, *, source: KeySource | None = None) -> T:
        """Populate *config* in place from *source* (default: an ``os.environ`` snapshot).

        Raises
        ------
        UsageError
            When *config* is not a mutable dataclass instance.
        ConfigError
            Any structural, key parsing, unsupported type or conversion error;
            custom converter exceptions propagate unchanged.

        Side Effects
            Calls :func:`bind_trace_id` with ``None`` to clear previous trace context.
        """

        bind_trace_id(None)
        _ensure_target(config)
        snapshot = source if source is not None else EnvironSource()
        try:
            values = self.discover(type(config), snapshot)
            log_debug("discovery_complete", **make_event("discovery", None, {"values": len(values)}))
            AssignmentWriter(self.settings.converters).assign(config, type(config), values)
        except Exception as exc:
            # Messages may quote the raw value; only the error type is logged.
            event = make_event("load", None, {"error": type(exc).__name__, "target": type(config).__name__})
            log_debug("load_failed", **event)
            raise
        log_info("assignment_complete", **make_event("assignment", None, {"values": len(values)}))
        return config

    def discover(self, annotation: Any, source: KeySource) -> list[DiscoveredValue]:
        """Run the discovery pass only; useful to preview which keys would apply."""

        return DiscoveryWalker(self.codec, source, self.settings.max_depth).discover(annotation)


def read_env(
    config: T,
    *,
    prefix: str = "",
    separator: str = DEFAULT_SEPARATOR,
    converters: Mapping[object, Converter] | None = None,
    max_depth: int = DEFAULT_DEPTH,
    environ: Mapping[str, str] | None = None,
    dotenv: bool = False,
    start_dir: str | None = None,
) -> T:
    """Populate *config* from the environment and return it.

    Parameters
    ----------
    config:
        Mutable dataclass instance; fields keep their values unless a key is set.
    prefix / separator / converters / max_depth:
        Forwarded to :class:`EnvLoader`.
    environ:
        Mapping used instead of :data:`os.environ`.
    dotenv:
        Also read the first ``.env`` found walking up from *start_dir* (or the
        working directory); environment values take precedence.

    Examples
    --------
    >>> from dataclasses import dataclass, field
    >>> @dataclass
    ... class Settings:
    ...     cache: dict[str, int] = field(default_factory=dict)
    >>> read_env(Settings(), environ={"CACHE_FOO": "1", "CACHE_BAR": "2"})
    Settings(cache={'foo': 1, 'bar': 2})
    """

    source: KeySource = EnvironSource(environ=environ)
    if dotenv:
        source = ChainedSource(source, DotEnvSource.discover(start_dir))
    loader = EnvLoader(prefix, separator, converters=converters, max_depth=max_depth)
    return loader.load(config, source=source)


def _ensure_target(config: Any) -> None:
    if isinstance(config, type) or not dataclasses.is_dataclass(config):
        raise UsageError(
            f"Expected a dataclass instance, got {config!r}; pass an instance such as Settings() to be populated in place"
        )
    if is_frozen(type(config)):
        raise UsageError(f"Cannot populate frozen dataclass {type(config).__name__} in place")


__all__ = [
    "DEFAULT_DEPTH",
    "EnvLoader",
    "LoaderSettings",
    "read_env",
    "default_env_prefix",
]
