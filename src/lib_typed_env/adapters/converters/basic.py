"""Default converter registry for scalar leaf types.

Purpose
-------
Provide the ``type -> converter`` entries the assignment writer uses when a
path reaches a scalar slot. Every converter takes the raw string and returns
the typed value; malformed input raises :class:`ConversionError`.

Contents
--------
* :func:`basic_converters` – fresh, caller-extensible registry.
* :func:`parse_int` / :func:`parse_bool` / :func:`parse_datetime` /
  :func:`parse_duration` – parsers reused by the registry entries.

Supported types: ``int`` and the fixed-width aliases from
:mod:`lib_typed_env.domain.scalars`, ``float`` / ``Float32`` / ``Float64``,
``bool``, ``str``, :class:`datetime.datetime` (RFC 3339) and
:class:`datetime.timedelta` (duration literals such as ``1h30m``).
"""

from __future__ import annotations

import re
import struct
from datetime import datetime, timedelta
from typing import Final

from ...application.ports import Converter
from ...domain.errors import ConversionError
from ...domain.scalars import Float32, Float64, Int8, Int16, Int32, Int64, UInt, UInt8, UInt16, UInt32, UInt64

_TRUE: Final[frozenset[str]] = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE: Final[frozenset[str]] = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_LEGACY_OCTAL: Final[re.Pattern[str]] = re.compile(r"([+-]?)0([0-7_]+)")
_FRACTION: Final[re.Pattern[str]] = re.compile(r"\.([0-9]+)")

_DURATION_PART: Final[re.Pattern[str]] = re.compile(r"([0-9]*(?:\.[0-9]*)?)(ns|us|µs|μs|ms|s|m|h)")
_MICROSECONDS_PER_UNIT: Final[dict[str, float]] = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}


def basic_converters() -> dict[object, Converter]:
    """Return a new registry covering the built-in scalar types.

    The result is a plain ``dict`` so callers can register additional
    converters before handing it to a loader.

    Examples
    --------
    >>> registry = basic_converters()
    >>> registry[int]("0x10"), registry[bool]("T"), registry[str]("raw")
    (16, True, 'raw')
    >>> registry[timedelta]("1h30m")
    datetime.timedelta(seconds=5400)
    """

    return {
        int: parse_int,
        Int8: _bounded_int("Int8", -(2**7), 2**7 - 1),
        Int16: _bounded_int("Int16", -(2**15), 2**15 - 1),
        Int32: _bounded_int("Int32", -(2**31), 2**31 - 1),
        Int64: _bounded_int("Int64", -(2**63), 2**63 - 1),
        UInt: _unsigned_int("UInt", 2**64 - 1),
        UInt8: _unsigned_int("UInt8", 2**8 - 1),
        UInt16: _unsigned_int("UInt16", 2**16 - 1),
        UInt32: _unsigned_int("UInt32", 2**32 - 1),
        UInt64: _unsigned_int("UInt64", 2**64 - 1),
        float: parse_float,
        Float64: parse_float,
        Float32: parse_float32,
        bool: parse_bool,
        str: str,
        datetime: parse_datetime,
        timedelta: parse_duration,
    }


def parse_int(raw: str) -> int:
    """Parse a signed integer, honouring ``0x``/``0o``/``0b`` prefixes.

    A bare leading zero also selects octal, so ``010`` is 8 and ``007`` is 7.

    Examples
    --------
    >>> parse_int("-42"), parse_int("0b101"), parse_int("010"), parse_int("01")
    (-42, 5, 8, 1)
    """

    if raw != raw.strip():
        raise ConversionError(f"Invalid integer {raw!r}")
    octal = _LEGACY_OCTAL.fullmatch(raw)
    text = f"{octal.group(1)}0o{octal.group(2)}" if octal else raw
    try:
        return int(text, 0)
    except ValueError as exc:
        raise ConversionError(f"Invalid integer {raw!r}") from exc


def _bounded_int(name: str, low: int, high: int) -> Converter:
    def convert(raw: str) -> int:
        value = parse_int(raw)
        if not low <= value <= high:
            raise ConversionError(f"Value {raw!r} is out of range for {name}")
        return value

    return convert


def _unsigned_int(name: str, high: int) -> Converter:
    def convert(raw: str) -> int:
        if raw.startswith(("-", "+")):
            raise ConversionError(f"Invalid unsigned integer {raw!r}")
        value = parse_int(raw)
        if value > high:
            raise ConversionError(f"Value {raw!r} is out of range for {name}")
        return value

    return convert


def parse_float(raw: str) -> float:
    """Parse a double precision float."""

    if raw != raw.strip():
        raise ConversionError(f"Invalid float {raw!r}")
    try:
        return float(raw)
    except ValueError as exc:
        raise ConversionError(f"Invalid float {raw!r}") from exc


def parse_float32(raw: str) -> float:
    """Parse a float rounded to single precision.

    Examples
    --------
    >>> parse_float32("0.1") == 0.1
    False
    >>> parse_float32("0.5")
    0.5
    """

    value = parse_float(raw)
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as exc:
        raise ConversionError(f"Value {raw!r} is out of range for Float32") from exc


def parse_bool(raw: str) -> bool:
    """Parse the boolean spellings ``1 t T TRUE true True`` and their negatives."""

    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConversionError(f"Invalid boolean {raw!r}")


def parse_datetime(raw: str) -> datetime:
    """Parse an RFC 3339 timestamp; the UTC offset is mandatory.

    Examples
    --------
    >>> parse_datetime("2024-03-01T12:30:00Z").isoformat()
    '2024-03-01T12:30:00+00:00'
    >>> parse_datetime("2024-03-01T12:30:00.5+02:00").microsecond
    500000
    """

    text = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    # fromisoformat only takes up to six fractional digits on older interpreters.
    text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text, count=1)
    if text[10:11] not in {"T", "t"}:
        raise ConversionError(f"Invalid RFC 3339 timestamp {raw!r}")
    try:
        value = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ConversionError(f"Invalid RFC 3339 timestamp {raw!r}: {exc}") from exc
    if value.tzinfo is None:
        raise ConversionError(f"RFC 3339 timestamp {raw!r} lacks a UTC offset")
    return value


def parse_duration(raw: str) -> timedelta:
    """Parse a duration literal such as ``300ms``, ``-1.5h`` or ``2h45m``.

    Examples
    --------
    >>> parse_duration("300ms")
    datetime.timedelta(microseconds=300000)
    >>> parse_duration("-1.5h")
    datetime.timedelta(days=-1, seconds=81000)
    >>> parse_duration("0")
    datetime.timedelta(0)
    """

    text = raw
    sign = 1
    if text[:1] in {"-", "+"}:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ConversionError(f"Invalid duration {raw!r}")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None or match.group(1) in {"", "."}:
            raise ConversionError(f"Invalid duration {raw!r}")
        total += float(match.group(1)) * _MICROSECONDS_PER_UNIT[match.group(2)]
        position = match.end()
    try:
        return timedelta(microseconds=sign * total)
    except OverflowError as exc:
        raise ConversionError(f"Duration {raw!r} is out of range") from exc
