"""Type definitions for TOON encoder/decoder."""

from dataclasses import dataclass, field
from typing import Literal

# JSON type aliases
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

# Delimiter options
Delimiter = Literal[",", "\t", "|"]

DELIMITERS: tuple[str, ...] = (",", "\t", "|")

DEFAULT_MAX_DEPTH = 64


def _validate_common(indent: int, delimiter: str, max_depth: int) -> None:
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 1:
        raise ValueError(f"indent must be a positive integer, got {indent!r}")
    if delimiter not in DELIMITERS:
        raise ValueError(f"delimiter must be one of {DELIMITERS!r}, got {delimiter!r}")
    if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 0:
        raise ValueError(f"max_depth must be a non-negative integer, got {max_depth!r}")


@dataclass
class EncodeOptions:
    """Options for TOON encoding."""

    indent: int = 2
    """Number of spaces per indentation level."""

    delimiter: Delimiter = ","
    """Delimiter for tabular rows and column headers."""

    max_depth: int = DEFAULT_MAX_DEPTH
    """Deepest container nesting accepted; the root container is depth 0."""

    detect_cycles: bool = False
    """Report self-referencing containers instead of running into max_depth."""

    def __post_init__(self) -> None:
        _validate_common(self.indent, self.delimiter, self.max_depth)


@dataclass
class DecodeOptions:
    """Options for TOON decoding.

    Must match the options used to encode when a non-default indent is
    used; the delimiter is also read from array headers when present.
    """

    indent: int = 2
    """Expected indentation size."""

    delimiter: Delimiter = ","
    """Delimiter assumed for array headers that do not declare one."""

    max_depth: int = DEFAULT_MAX_DEPTH
    """Deepest container nesting accepted; the root container is depth 0."""

    def __post_init__(self) -> None:
        _validate_common(self.indent, self.delimiter, self.max_depth)


@dataclass
class ParsedLine:
    """A parsed line with indentation info."""

    content: str
    """Content after stripping indentation."""

    indent: int
    """Number of leading spaces."""

    depth: int
    """Indentation level (indent / indent_size)."""

    line_number: int
    """1-based line number."""


@dataclass
class ArrayHeaderInfo:
    """Parsed array header information."""

    length: int
    """Declared array length."""

    delimiter: Delimiter = ","
    """Delimiter for this array's values."""

    fields: list[str] = field(default_factory=list)
    """Field names for tabular format (empty for non-tabular)."""


@dataclass(frozen=True)
class TabularShape:
    """Array of uniform, flat objects rendered as header plus rows."""

    fields: tuple[str, ...]


@dataclass(frozen=True)
class ListShape:
    """Array rendered as one dash-led item per element."""


ArrayShape = TabularShape | ListShape
