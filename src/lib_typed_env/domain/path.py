"""Paths and discovered values exchanged between the two passes.

Purpose
-------
Hold the small immutable value objects the discovery walker produces and the
assignment writer consumes. Nothing here performs I/O.

Contents
--------
* :data:`FieldPath` – alias for the tuple of segments locating a slot.
* :class:`KeyToken` – marker ``str`` for segments lifted from collection keys.
* :class:`DiscoveredValue` – ``(raw, path)`` pair found in the key source.
* :func:`dotted` – human readable rendering used in logs and errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

FieldPath = Tuple[str, ...]


class KeyToken(str):
    """Path segment taken verbatim from a sequence index or map key.

    Why
    ----
    Field names are split into words when deriving keys; tokens read back from
    the key source already are a single word and must stay that way.

    Examples
    --------
    >>> token = KeyToken("foo")
    >>> token == "foo", isinstance(token, KeyToken)
    (True, True)
    """

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class DiscoveredValue:
    """A raw string found in the key source together with its path.

    Attributes
    ----------
    raw:
        Value exactly as the source returned it.
    path:
        Route from the target root to the slot receiving the value.
    """

    raw: str
    path: FieldPath

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


def dotted(path: FieldPath) -> str:
    """Render *path* with dots.

    Examples
    --------
    >>> dotted(("service", "0", "name"))
    'service.0.name'
    """

    return ".".join(path)
