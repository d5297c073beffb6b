"""Discovery pass: find every value the key source holds for a target type.

Purpose
-------
Walk a target type graph without touching any instance, derive the key of
every candidate slot, and collect the ``(raw, path)`` pairs the key source
actually defines. Collections are expanded by listing the keys that share the
collection's own key as a prefix.

Contents
--------
* :class:`DiscoveryWalker` – the recursive walker.

System Role
-----------
Runs first in :meth:`lib_typed_env.core.EnvLoader.load`. Any error raised here
aborts the load before the target is mutated.
"""

from __future__ import annotations

import re
from typing import Any, Final

from ..domain.errors import (
    IndexOutOfBoundsError,
    KeyParseError,
    MaxDepthExceeded,
    RecursiveTypeError,
    UnsupportedTypeError,
)
from ..domain.path import DiscoveredValue, FieldPath, KeyToken, dotted
from ..domain.types import Kind, TypeShape, inspect_type, is_capability, record_fields, type_name, unwrap_optional
from ..observability import log_debug
from .keys import KeyCodec
from .ports import KeySource

_INDEX: Final[re.Pattern[str]] = re.compile(r"[0-9]+")


class DiscoveryWalker:
    """Enumerate discovered values for a type.

    Parameters
    ----------
    codec:
        Derives keys from paths and splits collection key listings.
    source:
        Snapshot queried for values and key listings.
    max_depth:
        Longest path accepted before :class:`MaxDepthExceeded` is raised.
    """

    def __init__(self, codec: KeyCodec, source: KeySource, max_depth: int) -> None:
        self._codec = codec
        self._source = source
        self._max_depth = max_depth

    def discover(self, annotation: Any, path: FieldPath = ()) -> list[DiscoveredValue]:
        """Return the values present for *annotation* rooted at *path*.

        Examples
        --------
        >>> from dataclasses import dataclass
        >>> from lib_typed_env.adapters.env.default import EnvironSource
        >>> @dataclass
        ... class Service:
        ...     name: str = ""
        ...     retries: int = 0
        >>> walker = DiscoveryWalker(KeyCodec("APP"), EnvironSource(environ={"APP_NAME": "svc"}), 10)
        >>> walker.discover(Service)
        [DiscoveredValue(raw='svc', path=('name',))]
        """

        try:
            return self._discover_value(annotation, tuple(path))
        except RecursionError as exc:
            # A max_depth beyond the interpreter stack is cut short here.
            raise MaxDepthExceeded(
                f"Max depth {self._max_depth} is deeper than the interpreter allows, "
                "you might have a type loop in your structure"
            ) from exc

    def _discover_value(self, annotation: Any, path: FieldPath) -> list[DiscoveredValue]:
        if len(path) > self._max_depth:
            raise MaxDepthExceeded(
                f"Max depth {self._max_depth} exceeded at {dotted(path)}, you might have a type loop in your structure"
            )

        shape = inspect_type(annotation)
        if shape.kind is Kind.OPTIONAL:
            return self._discover_value(shape.args[0], path)
        if shape.kind is Kind.RECORD:
            return self._discover_record(shape.annotation, path, (shape.annotation,))
        if shape.kind in (Kind.SEQUENCE, Kind.ARRAY, Kind.MAP):
            return self._discover_indexed(shape, path)
        if shape.kind is Kind.SCALAR:
            return self._lookup(path)
        raise UnsupportedTypeError(f"Type {type_name(annotation)} is not supported (at {dotted(path) or '<root>'})")

    def _discover_record(self, cls: type, path: FieldPath, embedding: tuple[type, ...]) -> list[DiscoveredValue]:
        found: list[DiscoveredValue] = []
        for spec in record_fields(cls):
            resolved = unwrap_optional(spec.type)
            if resolved is cls:
                raise RecursiveTypeError(f"Recursive type detected {type_name(cls)} in field {spec.name}")

            if spec.embedded:
                if is_capability(resolved):
                    continue
                if inspect_type(resolved).kind is not Kind.RECORD:
                    raise UnsupportedTypeError(
                        f"Embedded field {spec.name} of {type_name(cls)} must be a dataclass, got {type_name(resolved)}"
                    )
                if resolved in embedding:
                    raise RecursiveTypeError(f"Recursive type detected {type_name(resolved)} in field {spec.name}")
                found.extend(self._discover_record(resolved, path, (*embedding, resolved)))
                continue

            field_path = (*path, spec.name)
            if spec.noexpand:
                found.extend(self._lookup(field_path))
                continue
            found.extend(self._discover_value(spec.type, field_path))
        return found

    def _discover_indexed(self, shape: TypeShape, path: FieldPath) -> list[DiscoveredValue]:
        container_key = self._codec.derive_key(path)
        next_keys = self._codec.partition_next_segment(container_key, self._source.keys())

        entries: list[tuple[str, Any]] = []
        for next_key in next_keys:
            token = self._codec.key_to_local_token(next_key, container_key)
            if shape.kind is Kind.MAP:
                entries.append((token, shape.args[1]))
                continue
            if not _INDEX.fullmatch(token):
                raise KeyParseError(f"Key [{token}] is not usable as an int index in [{next_key}]")
            index = int(token)
            if shape.kind is Kind.ARRAY:
                if index >= len(shape.args):
                    raise IndexOutOfBoundsError(
                        f"Detected key ({token}) from variable {next_key} is >= to array length {len(shape.args)}"
                    )
                entries.append((token, shape.args[index]))
            else:
                entries.append((token, shape.args[0]))

        if shape.kind is not Kind.MAP:
            entries.sort(key=lambda entry: int(entry[0]))

        found: list[DiscoveredValue] = []
        for token, element in entries:
            found.extend(self._discover_value(element, (*path, KeyToken(token))))
        return found

    def _lookup(self, path: FieldPath) -> list[DiscoveredValue]:
        key = self._codec.derive_key(path)
        value = self._source.lookup(key)
        if value is None:
            return []
        log_debug("value_discovered", stage="discovery", key=key, path=dotted(path))
        return [DiscoveredValue(value, path)]
