"""Public package surface for ``lib_typed_env``.

Bind environment variables onto nested, typed dataclass structures. Keys are
derived from each field's position (``APP_SERVICE_MAX_RETRIES`` for
``settings.service.max_retries`` with prefix ``APP``); collections and maps are
expanded from whatever keys the environment defines.
"""

from __future__ import annotations

from .adapters.converters.basic import basic_converters
from .adapters.dotenv.default import DotEnvSource
from .adapters.env.default import ChainedSource, EnvironSource
from .adapters.naming.words import split_words
from .application.keys import DEFAULT_SEPARATOR, KeyCodec
from .application.ports import Converter, KeySource, Tokenizer
from .core import DEFAULT_DEPTH, EnvLoader, LoaderSettings, default_env_prefix, read_env
from .domain.errors import (
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
from .domain.path import DiscoveredValue, KeyToken
from .domain.scalars import Float32, Float64, Int8, Int16, Int32, Int64, UInt, UInt8, UInt16, UInt32, UInt64
from .domain.types import embedded, noexpand
from .observability import bind_trace_id, get_logger

__all__ = [
    "ChainedSource",
    "ConfigError",
    "ConversionError",
    "Converter",
    "DEFAULT_DEPTH",
    "DEFAULT_SEPARATOR",
    "DiscoveredValue",
    "DotEnvSource",
    "EnvLoader",
    "EnvironSource",
    "Float32",
    "Float64",
    "IndexOutOfBoundsError",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidFormat",
    "KeyCodec",
    "KeyParseError",
    "KeySource",
    "KeyToken",
    "LoaderSettings",
    "MaxDepthExceeded",
    "PathError",
    "RecursiveTypeError",
    "StructureError",
    "Tokenizer",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "UnsupportedTypeError",
    "UsageError",
    "basic_converters",
    "bind_trace_id",
    "default_env_prefix",
    "embedded",
    "get_logger",
    "noexpand",
    "read_env",
    "split_words",
]
