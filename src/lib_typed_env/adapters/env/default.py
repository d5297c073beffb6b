"""Environment variable key source.

Purpose
-------
Implement :class:`lib_typed_env.application.ports.KeySource` over the process
environment (or any injected mapping) and provide the helpers that shape
environment namespaces.

Key behaviours
--------------
* Takes a snapshot on construction so one load sees a consistent view even if
  the environment changes meanwhile.
* :class:`ChainedSource` layers several sources; the first one defining a key
  wins (environment above ``.env``).
* :func:`default_env_prefix` converts a package slug into a key prefix.
"""

from __future__ import annotations

import os
from typing import Iterable, Mapping

from ...application.ports import KeySource


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-typed-env')
    'LIB_TYPED_ENV'
    """

    return slug.replace("-", "_").upper()


class EnvironSource:
    """Snapshot of environment variables exposed as a key source."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Copy ``environ`` (defaults to :data:`os.environ`) into a private snapshot.

        Examples
        --------
        >>> source = EnvironSource(environ={"APP_NAME": "svc"})
        >>> source.lookup("APP_NAME"), source.lookup("APP_PORT")
        ('svc', None)
        """

        self._snapshot: dict[str, str] = dict(os.environ if environ is None else environ)

    def lookup(self, key: str) -> str | None:
        return self._snapshot.get(key)

    def keys(self) -> Iterable[str]:
        return list(self._snapshot)

    def __len__(self) -> int:
        return len(self._snapshot)


class ChainedSource:
    """Combine sources; earlier sources take precedence.

    Examples
    --------
    >>> env = EnvironSource(environ={"A": "env"})
    >>> fallback = EnvironSource(environ={"A": "file", "B": "file"})
    >>> chained = ChainedSource(env, fallback)
    >>> chained.lookup("A"), chained.lookup("B"), list(chained.keys())
    ('env', 'file', ['A', 'B'])
    """

    def __init__(self, *sources: KeySource) -> None:
        self._sources = sources

    def lookup(self, key: str) -> str | None:
        for source in self._sources:
            value = source.lookup(key)
            if value is not None:
                return value
        return None

    def keys(self) -> Iterable[str]:
        seen: dict[str, None] = {}
        for source in self._sources:
            for key in source.keys():
                seen.setdefault(key, None)
        return list(seen)
