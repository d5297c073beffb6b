"""Type inspection for dataclass-based target structures.

Purpose
-------
Classify Python annotations into the structural kinds the walker and the
writer understand, and describe dataclass fields once per class so neither
pass has to re-read annotations while traversing.

Contents
--------
* :class:`Kind` / :class:`TypeShape` – classification result.
* :func:`inspect_type` – annotation → :class:`TypeShape`.
* :func:`unwrap_optional` – strip every ``Optional`` layer.
* :class:`FieldSpec` / :func:`record_fields` – cached field descriptors.
* :func:`noexpand` / :func:`embedded` – ``dataclasses.field`` helpers that
  attach the only declarative metadata the library reads.
* :func:`zero_value` / :func:`new_record` – allocate empty slots.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from collections import abc
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Final, Tuple

from .errors import UnsupportedTypeError

FIELD_MARKER: Final[str] = "lib_typed_env"
NOEXPAND: Final[str] = "noexpand"
EMBEDDED: Final[str] = "embedded"

_SEQUENCE_ORIGINS: Final = (list, abc.Sequence, abc.MutableSequence)
_MAPPING_ORIGINS: Final = (dict, abc.Mapping, abc.MutableMapping)
_NONE_TYPE: Final = type(None)


class Kind(Enum):
    """Structural kinds of a target type graph."""

    RECORD = "record"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    ARRAY = "array"
    MAP = "map"
    SCALAR = "scalar"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class TypeShape:
    """Classification of one annotation.

    Attributes
    ----------
    kind:
        Structural kind.
    annotation:
        The annotation with ``Annotated`` stripped.
    args:
        Element types: ``(inner,)`` for optionals and sequences, one entry per
        slot for fixed sequences, ``(key, value)`` for maps.
    container:
        Concrete Python container used when the writer builds a new value
        (``list``, ``tuple`` or ``dict``).
    """

    kind: Kind
    annotation: Any
    args: Tuple[Any, ...] = ()
    container: type | None = None


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Static description of a dataclass field."""

    name: str
    type: Any
    embedded: bool = False
    noexpand: bool = False
    required: bool = False
    init: bool = True


def noexpand(**kwargs: Any) -> Any:
    """Return a dataclass field read as one key instead of being expanded.

    The raw string is handed to the converter registered for the field's type,
    which lets structurally composite types (``list[str]`` from ``"a,b,c"``)
    come from a single variable.

    Examples
    --------
    >>> from dataclasses import dataclass, fields
    >>> @dataclass
    ... class Demo:
    ...     items: list = noexpand(default_factory=list)
    >>> fields(Demo)[0].metadata[FIELD_MARKER]
    'noexpand'
    """

    return _marked_field(NOEXPAND, kwargs)


def embedded(**kwargs: Any) -> Any:
    """Return a dataclass field whose own fields are promoted into the parent's namespace."""

    return _marked_field(EMBEDDED, kwargs)


def _marked_field(marker: str, kwargs: dict[str, Any]) -> Any:
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[FIELD_MARKER] = marker
    return dataclasses.field(metadata=metadata, **kwargs)


def inspect_type(annotation: Any) -> TypeShape:
    """Classify *annotation* into a :class:`TypeShape`.

    Examples
    --------
    >>> from typing import Optional
    >>> inspect_type(Optional[int]).kind
    <Kind.OPTIONAL: 'optional'>
    >>> inspect_type(dict[str, int]).args
    (<class 'str'>, <class 'int'>)
    >>> inspect_type(tuple[int, int]).kind
    <Kind.ARRAY: 'array'>
    >>> inspect_type(tuple[int, ...]).kind
    <Kind.SEQUENCE: 'sequence'>
    """

    annotation = _strip_annotated(annotation)
    if annotation is Any or annotation is object or annotation is None or annotation is _NONE_TYPE:
        return TypeShape(Kind.UNSUPPORTED, annotation)
    if isinstance(annotation, typing.TypeVar):
        return TypeShape(Kind.UNSUPPORTED, annotation)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Union or origin is types.UnionType:
        members = tuple(arg for arg in args if arg is not _NONE_TYPE)
        if len(members) == 1 and len(members) < len(args):
            return TypeShape(Kind.OPTIONAL, annotation, members)
        return TypeShape(Kind.UNSUPPORTED, annotation)
    if origin in _SEQUENCE_ORIGINS:
        return TypeShape(Kind.SEQUENCE, annotation, (args[0] if args else Any,), list)
    if origin is tuple:
        if not args:
            return TypeShape(Kind.SEQUENCE, annotation, (Any,), tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeShape(Kind.SEQUENCE, annotation, (args[0],), tuple)
        return TypeShape(Kind.ARRAY, annotation, tuple(args), tuple)
    if origin in _MAPPING_ORIGINS:
        key, value = args if args else (Any, Any)
        return TypeShape(Kind.MAP, annotation, (key, value), dict)
    if origin is abc.Callable:
        return TypeShape(Kind.UNSUPPORTED, annotation)
    if origin is not None:
        # Other parametrised generics (``set[str]``) only work through a converter.
        return TypeShape(Kind.SCALAR, annotation)

    if isinstance(annotation, type):
        if dataclasses.is_dataclass(annotation):
            return TypeShape(Kind.RECORD, annotation)
        if annotation is list:
            return TypeShape(Kind.SEQUENCE, annotation, (Any,), list)
        if annotation is tuple:
            return TypeShape(Kind.SEQUENCE, annotation, (Any,), tuple)
        if annotation is dict:
            return TypeShape(Kind.MAP, annotation, (Any, Any), dict)
        if is_capability(annotation):
            return TypeShape(Kind.UNSUPPORTED, annotation)
        return TypeShape(Kind.SCALAR, annotation)
    if hasattr(annotation, "__supertype__"):
        return TypeShape(Kind.SCALAR, annotation)
    return TypeShape(Kind.UNSUPPORTED, annotation)


def unwrap_optional(annotation: Any) -> Any:
    """Return *annotation* with every ``Optional`` layer removed.

    Examples
    --------
    >>> from typing import Optional
    >>> unwrap_optional(Optional[list[int]])
    list[int]
    """

    shape = inspect_type(annotation)
    while shape.kind is Kind.OPTIONAL:
        shape = inspect_type(shape.args[0])
    return shape.annotation


def is_capability(annotation: Any) -> bool:
    """Tell whether *annotation* is a protocol or abstract class (behaviour, no data)."""

    if not isinstance(annotation, type):
        return False
    return bool(getattr(annotation, "_is_protocol", False)) or inspect.isabstract(annotation)


def type_name(annotation: Any) -> str:
    """Readable name for error messages."""

    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        return annotation.__qualname__
    return getattr(annotation, "__name__", None) or repr(annotation)


@lru_cache(maxsize=None)
def record_fields(cls: type) -> tuple[FieldSpec, ...]:
    """Describe the dataclass fields of *cls* in declaration order.

    Annotations are resolved with :func:`typing.get_type_hints` so string
    annotations (``from __future__ import annotations``, forward references)
    become real types. Results are cached per class.
    """

    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except NameError as exc:
        raise UnsupportedTypeError(f"Cannot resolve annotations of {type_name(cls)}: {exc}") from exc

    specs: list[FieldSpec] = []
    for field in dataclasses.fields(cls):
        marker = field.metadata.get(FIELD_MARKER)
        required = field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING
        specs.append(
            FieldSpec(
                name=field.name,
                type=hints.get(field.name, field.type),
                embedded=marker == EMBEDDED,
                noexpand=marker == NOEXPAND,
                required=required,
                init=field.init,
            )
        )
    return tuple(specs)


def is_frozen(cls: type) -> bool:
    """Tell whether dataclass *cls* rejects attribute assignment."""

    params = getattr(cls, "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def zero_value(annotation: Any) -> Any:
    """Return the empty value for *annotation*.

    Examples
    --------
    >>> from typing import Optional
    >>> zero_value(int), zero_value(Optional[int]), zero_value(list[str]), zero_value(tuple[int, str])
    (0, None, [], (0, ''))
    """

    shape = inspect_type(annotation)
    if shape.kind is Kind.RECORD:
        return new_record(shape.annotation)
    if shape.kind is Kind.SEQUENCE:
        return shape.container()
    if shape.kind is Kind.ARRAY:
        return tuple(zero_value(arg) for arg in shape.args)
    if shape.kind is Kind.MAP:
        return {}
    if shape.kind is Kind.SCALAR:
        return _scalar_zero(shape.annotation)
    return None


def new_record(cls: type) -> Any:
    """Instantiate dataclass *cls*, filling fields without defaults with zero values."""

    kwargs = {spec.name: zero_value(spec.type) for spec in record_fields(cls) if spec.init and spec.required}
    return cls(**kwargs)


def _scalar_zero(annotation: Any) -> Any:
    while hasattr(annotation, "__supertype__"):
        annotation = annotation.__supertype__
    annotation = typing.get_origin(annotation) or annotation
    try:
        return annotation()
    except TypeError:
        return None


def _strip_annotated(annotation: Any) -> Any:
    while typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    return annotation
