"""Fixed-width numeric annotations.

Python's ``int`` and ``float`` are unbounded and double precision. These
``NewType`` aliases let a dataclass declare the width it expects; the default
converter registry range-checks (or rounds, for ``Float32``) accordingly while
the stored value stays a plain ``int`` or ``float``.
"""

from __future__ import annotations

from typing import NewType

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)

UInt = NewType("UInt", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)

Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)

__all__ = [
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
]
