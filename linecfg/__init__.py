"""Top-level package for linecfg.

This package populates a caller-supplied dataclass from a line-oriented
`key = value` config file with comments, quoted values, and repeated keys
for list fields. The main entry point is `load`.
"""

from .errors import (
    ConfigError,
    ConfigResourceError,
    ConfigSchemaError,
    ConfigSyntaxError,
    ConfigValueError,
    DuplicateKeyError,
)
from .fields import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    ListMode,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .loader import load, load_lines
from .options import LoadOptions
from .parsing import ParsedLine, parse_line

__all__ = [
    "ConfigError",
    "ConfigResourceError",
    "ConfigSchemaError",
    "ConfigSyntaxError",
    "ConfigValueError",
    "DuplicateKeyError",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "ListMode",
    "LoadOptions",
    "ParsedLine",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "__version__",
    "load",
    "load_lines",
    "parse_line",
]

__version__ = "0.3.0"
