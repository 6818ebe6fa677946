"""
TOON (Token-Oriented Object Notation) codec.

A compact, indentation-based text format that maps one-to-one onto the JSON
data model, with a tabular layout for arrays of uniform records.

Usage:
    import toon_codec

    # Encode Python data to TOON
    data = {"name": "Alice", "age": 30}
    encoded = toon_codec.encode(data)

    # Decode TOON to Python data
    decoded = toon_codec.decode(encoded)

    # With options
    from toon_codec import EncodeOptions, DecodeOptions

    encoded = toon_codec.encode(data, EncodeOptions(indent=4, delimiter="|"))
    decoded = toon_codec.decode(encoded, DecodeOptions(indent=4))
"""

__version__ = "1.0.0"

from .decode import decode, decode_lines
from .encode import analyze_array_shape, encode, encode_lines
from .errors import (
    CircularReferenceError,
    DepthExceededError,
    DisallowedKeyError,
    InvalidKeyTokenError,
    InvalidLiteralError,
    MalformedStructureError,
    NonFiniteNumberError,
    ToonDecodeError,
    ToonEncodeError,
    ToonError,
    UnsupportedTypeError,
)
from .types import (
    ArrayShape,
    DecodeOptions,
    EncodeOptions,
    JsonValue,
    ListShape,
    TabularShape,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "encode_lines",
    "decode",
    "decode_lines",
    "analyze_array_shape",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    # Types
    "JsonValue",
    "ArrayShape",
    "TabularShape",
    "ListShape",
    # Errors
    "ToonError",
    "ToonEncodeError",
    "ToonDecodeError",
    "UnsupportedTypeError",
    "NonFiniteNumberError",
    "CircularReferenceError",
    "DepthExceededError",
    "DisallowedKeyError",
    "InvalidKeyTokenError",
    "MalformedStructureError",
    "InvalidLiteralError",
]
