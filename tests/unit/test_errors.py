from __future__ import annotations

import pytest

from lib_typed_env.domain.errors import (
    ConfigError,
    ConversionError,
    IndexOutOfBoundsError,
    InvalidFormat,
    KeyParseError,
    MaxDepthExceeded,
    PathError,
    RecursiveTypeError,
    StructureError,
    UnsupportedTypeError,
    UsageError,
)


def test_error_hierarchy() -> None:
    for error in (UsageError, StructureError, KeyParseError, UnsupportedTypeError, ConversionError, PathError, InvalidFormat):
        assert issubclass(error, ConfigError)
    assert issubclass(RecursiveTypeError, StructureError)
    assert issubclass(MaxDepthExceeded, StructureError)
    assert issubclass(IndexOutOfBoundsError, KeyParseError)


def test_conversion_error_is_value_error() -> None:
    """Callers catching ValueError for malformed input keep working."""

    with pytest.raises(ValueError):
        raise ConversionError("Invalid integer 'x'")
