"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the discovery walker, the assignment
writer, the adapters, and consuming applications. The hierarchy lives in the
domain layer so outer layers depend on it, never the other way round.

Contents
--------
* :class:`ConfigError` – umbrella base class for every library failure.
* :class:`UsageError` – the caller handed :func:`load` something it cannot
  populate (a class, a non-dataclass, a frozen instance).
* :class:`StructureError` – the target type graph cannot be walked safely;
  specialised by :class:`RecursiveTypeError` and :class:`MaxDepthExceeded`.
* :class:`KeyParseError` – a collection key found in the source cannot be used
  as an index; :class:`IndexOutOfBoundsError` narrows it to fixed sequences.
* :class:`UnsupportedTypeError` – no structural handling or converter exists.
* :class:`ConversionError` – a built-in converter rejected a raw value.
* :class:`PathError` – a discovered path does not match the target type.
* :class:`InvalidFormat` – a ``.env`` file could not be parsed.

System Role
-----------
Discovery errors abort a load before the target is touched. Assignment errors
abort immediately and leave already applied values in place. Callers catch
:class:`ConfigError` to handle all library failures uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_typed_env``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class UsageError(ConfigError):
    """Raised when the load target is not a mutable dataclass instance.

    Why
    ----
    Passing the class itself (or a frozen instance) can never be populated in
    place, so the loader fails fast without attempting any work.
    """


class StructureError(ConfigError):
    """Base class for type graphs that cannot be traversed safely."""


class RecursiveTypeError(StructureError):
    """Raised when a record references itself through optional wrappers or embedding."""


class MaxDepthExceeded(StructureError):
    """Raised when a path grows beyond the configured maximum depth.

    Why
    ----
    Mutual recursion (``A -> B -> A``) slips past the direct self-reference
    check; the depth limit is what stops it.
    """


class KeyParseError(ConfigError):
    """Raised when a collection key cannot be interpreted as the required index."""


class IndexOutOfBoundsError(KeyParseError):
    """Raised when a fixed-length sequence index is not below the declared length."""


class UnsupportedTypeError(ConfigError):
    """Raised for structural kinds or leaf types that have no registered handling.

    Typical Sources
    ---------------
    ``Any``, callables, protocols, non-optional unions, or scalar types without a
    converter in the registry.
    """


class ConversionError(ConfigError, ValueError):
    """Raised by the built-in converters when a raw string is malformed.

    Subclasses :class:`ValueError` as well so callers used to ``int("x")`` style
    failures keep working.
    """


class PathError(ConfigError):
    """Raised when a path segment names a field the record does not declare."""


class InvalidFormat(ConfigError):
    """Raised when a ``.env`` file cannot be parsed into key/value pairs."""
