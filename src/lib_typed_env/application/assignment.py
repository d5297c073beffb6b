"""Assignment pass: write discovered values into a live instance.

Purpose
-------
Walk the target instance and its type in lock-step with each discovered path,
allocating empty optionals, records and containers on the way, and hand the
raw string to the converter registered for the leaf type.

Contents
--------
* :class:`AssignmentWriter` – applies discovered values in order.

System Role
-----------
Runs second in :meth:`lib_typed_env.core.EnvLoader.load`, after discovery has
succeeded. Every step returns the value the parent slot should hold, which
lets immutable holders (tuples, frozen dataclasses) be rebuilt and stored back
the same way mutable ones are updated in place. A failing converter stops the
pass; values applied before it stay in place.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping, MutableMapping
from typing import Any, Final, Iterable

from ..domain.errors import IndexOutOfBoundsError, KeyParseError, PathError, UnsupportedTypeError
from ..domain.path import DiscoveredValue, FieldPath, dotted
from ..domain.types import (
    FieldSpec,
    Kind,
    TypeShape,
    inspect_type,
    is_capability,
    is_frozen,
    new_record,
    record_fields,
    type_name,
    unwrap_optional,
    zero_value,
)
from .ports import Converter

_INDEX: Final[re.Pattern[str]] = re.compile(r"[0-9]+")


class AssignmentWriter:
    """Populate instances from discovered values.

    Parameters
    ----------
    converters:
        Registry mapping leaf types to converters; looked up by exact type.
    """

    def __init__(self, converters: Mapping[object, Converter]) -> None:
        self._converters = converters

    def assign(self, instance: Any, annotation: Any, values: Iterable[DiscoveredValue]) -> Any:
        """Apply *values* to *instance* in order and return the populated instance.

        Later values addressing the same slot overwrite earlier ones.

        Examples
        --------
        >>> from dataclasses import dataclass, field
        >>> from lib_typed_env.adapters.converters.basic import basic_converters
        >>> @dataclass
        ... class Demo:
        ...     ports: list[int] = field(default_factory=list)
        >>> writer = AssignmentWriter(basic_converters())
        >>> writer.assign(Demo(), Demo, [DiscoveredValue("80", ("ports", "0")), DiscoveredValue("443", ("ports", "1"))])
        Demo(ports=[80, 443])
        """

        target = instance
        for value in values:
            target = self.assign_value(target, annotation, value.path, value.raw)
        return target

    def assign_value(self, current: Any, annotation: Any, path: FieldPath, raw: str) -> Any:
        """Return *current* updated so the slot at *path* holds the converted *raw* value."""

        shape = inspect_type(annotation)
        if shape.kind is Kind.OPTIONAL:
            inner = shape.args[0]
            if current is None:
                current = zero_value(inner)
            return self.assign_value(current, inner, path, raw)
        if shape.kind is Kind.RECORD:
            if not path:
                raise PathError(f"Path ends on record {type_name(shape.annotation)} without naming a field")
            return self._assign_field(current, shape.annotation, path[0], path[1:], raw)
        if shape.kind is Kind.SEQUENCE:
            return self._assign_to_sequence(current, shape, path, raw)
        if shape.kind is Kind.ARRAY:
            return self._assign_to_array(current, shape, path, raw)
        if shape.kind is Kind.MAP:
            return self._assign_to_map(current, shape, path, raw)
        if shape.kind is Kind.SCALAR:
            if path:
                raise PathError(f"Scalar {type_name(shape.annotation)} has no member {dotted(path)}")
            return self.convert(shape.annotation, raw)
        raise UnsupportedTypeError(f"Type {type_name(annotation)} is not supported")

    def convert(self, annotation: Any, raw: str) -> Any:
        """Run the converter registered for *annotation*; its exceptions propagate unchanged."""

        converter = self._converters.get(annotation)
        if converter is None:
            raise UnsupportedTypeError(
                f"Unsupported type [{type_name(annotation)}], please consider adding a custom converter"
            )
        return converter(raw)

    def _assign_field(self, record: Any, cls: type, name: str, rest: FieldPath, raw: str) -> Any:
        if record is None:
            record = new_record(cls)

        for spec in record_fields(cls):
            if not spec.embedded and spec.name == name:
                return _store(record, name, self._field_value(record, spec, rest, raw))

        for spec in record_fields(cls):
            if not spec.embedded:
                continue
            member_type = unwrap_optional(spec.type)
            if not _declares(member_type, name):
                continue
            member = getattr(record, spec.name, None)
            updated = self._assign_field(member, member_type, name, rest, raw)
            return _store(record, spec.name, updated)

        raise PathError(f"Failed to get field [{name}] in config struct [{type_name(cls)}]")

    def _field_value(self, record: Any, spec: FieldSpec, rest: FieldPath, raw: str) -> Any:
        if spec.noexpand:
            return self.convert(unwrap_optional(spec.type), raw)
        return self.assign_value(getattr(record, spec.name, None), spec.type, rest, raw)

    def _assign_to_sequence(self, current: Any, shape: TypeShape, path: FieldPath, raw: str) -> Any:
        index = _parse_index(path)
        element = shape.args[0]
        if isinstance(current, list) and shape.container is list:
            items = current
        else:
            items = list(current or ())

        # Indices may arrive in any order; gaps are filled with zero values.
        while len(items) <= index:
            items.append(zero_value(element))
        items[index] = self.assign_value(items[index], element, path[1:], raw)
        return tuple(items) if shape.container is tuple else items

    def _assign_to_array(self, current: Any, shape: TypeShape, path: FieldPath, raw: str) -> Any:
        index = _parse_index(path)
        length = len(shape.args)
        if index >= length:
            raise IndexOutOfBoundsError(f"Index [{index}] is overflowing array of length [{length}]")

        items = list(current) if current is not None else []
        while len(items) < length:
            items.append(zero_value(shape.args[len(items)]))
        items[index] = self.assign_value(items[index], shape.args[index], path[1:], raw)
        return tuple(items)

    def _assign_to_map(self, current: Any, shape: TypeShape, path: FieldPath, raw: str) -> Any:
        if not path:
            raise PathError(f"Path ends on map {type_name(shape.annotation)} without naming a key")
        key_type, value_type = shape.args
        key = self.convert(key_type, path[0])

        mapping = current if isinstance(current, MutableMapping) else dict(current or {})
        element = mapping[key] if key in mapping else zero_value(value_type)
        mapping[key] = self.assign_value(element, value_type, path[1:], raw)
        return mapping


def _parse_index(path: FieldPath) -> int:
    if not path:
        raise PathError("Path ends on a sequence without naming an index")
    token = path[0]
    if not _INDEX.fullmatch(token):
        raise KeyParseError(f"Key [{token}] is not usable as an int index")
    return int(token)


def _declares(cls: Any, name: str) -> bool:
    """Tell whether record *cls* exposes field *name*, directly or through embedded members."""

    if inspect_type(cls).kind is not Kind.RECORD:
        return False
    for spec in record_fields(cls):
        if spec.embedded:
            member_type = unwrap_optional(spec.type)
            if not is_capability(member_type) and _declares(member_type, name):
                return True
        elif spec.name == name:
            return True
    return False


def _store(record: Any, name: str, value: Any) -> Any:
    """Set ``record.name``; frozen dataclasses are copied first and the copy is returned."""

    if is_frozen(type(record)):
        record = copy.copy(record)
        object.__setattr__(record, name, value)
        return record
    setattr(record, name, value)
    return record
