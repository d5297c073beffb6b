"""Application-layer ports describing the collaborators the loader depends on.

Purpose
-------
Define the structural contracts for everything the core injects rather than
owns, so the walker and the writer never reach for ambient process state.

Contents
--------
* :class:`KeySource` – point lookup plus key enumeration over a flat namespace.
* :data:`Converter` – ``raw string -> value`` parsing function.
* :data:`Tokenizer` – identifier to word list splitter.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Protocol, runtime_checkable

Converter = Callable[[str], Any]
"""Parse a raw string into a typed value, raising on malformed input."""

Tokenizer = Callable[[str], List[str]]
"""Split an identifier into its constituent words."""


@runtime_checkable
class KeySource(Protocol):
    """Read-only view over a flat key/value namespace.

    Why
    ----
    Collections are discovered by listing keys that share a prefix, scalars by
    point lookups. Implementations should be snapshots so one load sees a
    consistent view.
    """

    def lookup(self, key: str) -> str | None:
        """Return the value stored under *key* or ``None`` when absent."""

    def keys(self) -> Iterable[str]:
        """Yield every key currently defined, in any order."""
