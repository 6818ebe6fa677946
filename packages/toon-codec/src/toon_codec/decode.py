"""TOON decoder implementation."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from contextlib import contextmanager
from typing import TYPE_CHECKING

from .errors import (
    DepthExceededError,
    DisallowedKeyError,
    InvalidKeyTokenError,
    MalformedStructureError,
)
from .primitives import parse_primitive, parse_string_literal
from .string_utils import (
    find_unquoted_colon,
    is_disallowed_key,
    is_valid_key_token,
    split_by_delimiter,
)
from .types import ArrayHeaderInfo, DecodeOptions, Delimiter, JsonValue, ParsedLine

if TYPE_CHECKING:
    from collections.abc import Generator, Iterator

logger = logging.getLogger(__name__)

_QUOTED = r"\"(?:[^\"\\]|\\.)*\""

# Pattern for array header: key[N<delim?>]{fields}:
ARRAY_HEADER_PATTERN = re.compile(
    rf"^(?P<key>(?:[^:\[\]{{}}\"]+|{_QUOTED})?)"  # Optional key (possibly quoted)
    r"\[(?P<length>\d+)(?P<delim>[,\t|])?\]"  # [N<delim?>]
    rf"(?:\{{(?P<fields>(?:[^}}\"]|{_QUOTED})*)\}})?"  # Optional {fields}
    r":(?P<rest>.*)$",  # Colon and rest
    re.ASCII,
)


def decode(text: str, options: DecodeOptions | None = None) -> JsonValue:
    """
    Decode TOON text to a Python value.

    Args:
        text: The TOON-formatted string.
        options: Decoding options.

    Returns:
        The decoded Python value. Empty input decodes to an empty dict.

    Raises:
        InvalidKeyTokenError: For unquoted keys that are not identifiers.
        DisallowedKeyError: For keys in the blocked set.
        MalformedStructureError: For bad indentation, count mismatches and
            unrecognized lines.
        InvalidLiteralError: For malformed value tokens.
        DepthExceededError: When nesting exceeds ``options.max_depth``.
    """
    opts = options or DecodeOptions()
    return decode_lines(text.split("\n"), opts)


def decode_lines(lines: Iterable[str], options: DecodeOptions | None = None) -> JsonValue:
    """
    Decode TOON from pre-split lines.

    Args:
        lines: Iterable of line strings.
        options: Decoding options.

    Returns:
        The decoded Python value.
    """
    opts = options or DecodeOptions()
    parsed_lines = list(_parse_lines(lines, opts.indent))
    logger.debug("Decoding %d non-blank lines", len(parsed_lines))

    cursor = _Cursor(parsed_lines, opts)
    result = _decode_root(cursor)

    leftover = cursor.peek()
    if leftover is not None:
        raise MalformedStructureError("Unexpected content after root value", leftover.line_number)

    return result


class _Cursor:
    """Cursor for iterating through parsed lines."""

    def __init__(self, lines: list[ParsedLine], options: DecodeOptions):
        self.lines = lines
        self.options = options
        self.pos = 0
        self.nesting = 0

    def peek(self) -> ParsedLine | None:
        """Look at current line without advancing."""
        if self.pos < len(self.lines):
            return self.lines[self.pos]
        return None

    def advance(self) -> ParsedLine | None:
        """Get current line and advance position."""
        line = self.peek()
        if line:
            self.pos += 1
        return line

    def peek_at_depth(self, depth: int) -> ParsedLine | None:
        """Peek at the next line if it belongs to a block at ``depth``.

        Returns None when the block has ended; a deeper line is an error.
        """
        line = self.peek()
        if line is None or line.depth < depth:
            return None
        if line.depth > depth:
            raise MalformedStructureError("Unexpected indentation", line.line_number)
        return line

    @contextmanager
    def nested(self, line_number: int) -> Iterator[None]:
        """Track entry into a container, enforcing ``max_depth``."""
        if self.nesting > self.options.max_depth:
            raise DepthExceededError(self.options.max_depth, line_number)
        self.nesting += 1
        try:
            yield
        finally:
            self.nesting -= 1


def _parse_lines(lines: Iterable[str], indent_size: int) -> Generator[ParsedLine, None, None]:
    """Parse raw lines into ParsedLine objects, dropping blank lines."""
    for i, raw in enumerate(lines, start=1):
        if not raw.strip():
            continue

        stripped = raw.lstrip(" ")
        indent = len(raw) - len(stripped)

        if stripped[0].isspace():
            raise MalformedStructureError("Indentation must use spaces only", i)

        if indent % indent_size != 0:
            raise MalformedStructureError(
                f"Indentation {indent} is not a multiple of {indent_size}", i
            )

        yield ParsedLine(
            content=stripped.rstrip(),
            indent=indent,
            depth=indent // indent_size,
            line_number=i,
        )


def _decode_root(cursor: _Cursor) -> JsonValue:
    """Decode the root value."""
    line = cursor.peek()
    if line is None:
        return {}

    if line.depth != 0:
        raise MalformedStructureError("Unexpected indentation", line.line_number)

    match = ARRAY_HEADER_PATTERN.match(line.content)
    if match and not match.group("key"):
        cursor.advance()
        return _decode_array(match, line, cursor, 1)

    if find_unquoted_colon(line.content) == -1:
        cursor.advance()
        return parse_primitive(line.content, line.line_number)

    return _decode_object(cursor, 0)


def _decode_object(cursor: _Cursor, depth: int) -> dict:
    """Decode an object whose fields sit at ``depth``."""
    line = cursor.peek()
    line_number = line.line_number if line else len(cursor.lines)
    with cursor.nested(line_number):
        return _decode_fields(cursor, depth, {})


def _decode_fields(cursor: _Cursor, depth: int, result: dict) -> dict:
    """Read key-value lines at ``depth`` into ``result``."""
    while True:
        line = cursor.peek_at_depth(depth)
        if not line:
            break

        if line.content == "-" or line.content.startswith("- "):
            raise MalformedStructureError("Unexpected list item", line.line_number)

        cursor.advance()
        key, value = _decode_field(line.content, line, cursor, depth)
        _bind(result, key, value, line)

    return result


def _bind(result: dict, key: str, value: JsonValue, line: ParsedLine) -> None:
    if key in result:
        raise MalformedStructureError(f"Duplicate key {key!r}", line.line_number)
    result[key] = value


def _decode_field(
    content: str, line: ParsedLine, cursor: _Cursor, depth: int
) -> tuple[str, JsonValue]:
    """Decode one field; its nested content sits at ``depth + 1``."""
    array_match = ARRAY_HEADER_PATTERN.match(content)
    if array_match and array_match.group("key"):
        key = _parse_key(array_match.group("key"), line.line_number)
        return key, _decode_array(array_match, line, cursor, depth + 1)

    colon_pos = find_unquoted_colon(content)
    if colon_pos == -1:
        raise MalformedStructureError("Expected key:value or array header", line.line_number)

    key = _parse_key(content[:colon_pos], line.line_number)
    value_part = content[colon_pos + 1 :].strip()

    if value_part:
        return key, parse_primitive(value_part, line.line_number)

    next_line = cursor.peek()
    if next_line and next_line.depth == depth + 1:
        # Keyless array header nested under the key
        nested_match = ARRAY_HEADER_PATTERN.match(next_line.content)
        if nested_match and not nested_match.group("key"):
            cursor.advance()
            return key, _decode_array(nested_match, next_line, cursor, depth + 2)

    return key, _decode_object(cursor, depth + 1)


def _decode_array(
    match: re.Match, line: ParsedLine, cursor: _Cursor, depth: int
) -> list:
    """Decode an array whose header was matched on ``line``; its body sits at ``depth``."""
    header = _parse_array_header_from_match(match, cursor.options.delimiter, line.line_number)
    rest = match.group("rest").strip()

    with cursor.nested(line.line_number):
        if header.fields:
            if rest:
                raise MalformedStructureError(
                    "Unexpected content after tabular header", line.line_number
                )
            return _decode_tabular_rows(cursor, header, depth, line)
        if rest:
            return _decode_inline_values(rest, header, line)
        return _decode_list_items(cursor, header, depth, line)


def _decode_list_items(
    cursor: _Cursor, header: ArrayHeaderInfo, depth: int, header_line: ParsedLine
) -> list:
    """Decode list items (lines starting with -)."""
    result = []

    while len(result) < header.length:
        line = cursor.peek_at_depth(depth)
        if not line:
            break

        if not line.content.startswith("- ") and line.content != "-":
            raise MalformedStructureError("Expected list item", line.line_number)

        cursor.advance()
        result.append(_decode_list_item(line, cursor, depth))

    if len(result) != header.length:
        raise MalformedStructureError(
            f"Expected {header.length} list items, got {len(result)}", header_line.line_number
        )

    return result


def _decode_list_item(line: ParsedLine, cursor: _Cursor, depth: int) -> JsonValue:
    """Decode a single list item."""
    if line.content == "-":
        # Bare hyphen is an object whose fields (if any) follow one level deeper
        return _decode_object(cursor, depth + 1)

    item_content = line.content[2:].strip()

    array_match = ARRAY_HEADER_PATTERN.match(item_content)
    if array_match and not array_match.group("key"):
        # Nested array: header on hyphen line, body one level deeper
        return _decode_array(array_match, line, cursor, depth + 1)

    if array_match or find_unquoted_colon(item_content) != -1:
        return _decode_list_item_object(item_content, line, cursor, depth)

    return parse_primitive(item_content, line.line_number)


def _decode_list_item_object(
    item_content: str, line: ParsedLine, cursor: _Cursor, depth: int
) -> dict:
    """Decode a list item that's an object with first field on hyphen line."""
    with cursor.nested(line.line_number):
        key, value = _decode_field(item_content, line, cursor, depth + 1)
        result = {key: value}
        return _decode_fields(cursor, depth + 1, result)


def _decode_tabular_rows(
    cursor: _Cursor, header: ArrayHeaderInfo, depth: int, header_line: ParsedLine
) -> list[dict]:
    """Decode tabular array rows."""
    result = []
    fields = header.fields

    while len(result) < header.length:
        line = cursor.peek_at_depth(depth)
        if not line:
            break

        cursor.advance()
        values = split_by_delimiter(line.content, header.delimiter)

        if len(values) != len(fields):
            raise MalformedStructureError(
                f"Expected {len(fields)} values, got {len(values)}", line.line_number
            )

        with cursor.nested(line.line_number):
            row = {}
            for field, value in zip(fields, values):
                row[field] = parse_primitive(value, line.line_number)
        result.append(row)

    if len(result) != header.length:
        raise MalformedStructureError(
            f"Expected {header.length} rows, got {len(result)}", header_line.line_number
        )

    return result


def _decode_inline_values(values_str: str, header: ArrayHeaderInfo, line: ParsedLine) -> list:
    """Decode inline primitive array values."""
    values = split_by_delimiter(values_str, header.delimiter)
    if len(values) != header.length:
        raise MalformedStructureError(
            f"Expected {header.length} inline values, got {len(values)}", line.line_number
        )
    return [parse_primitive(v, line.line_number) for v in values]


def _parse_array_header_from_match(
    match: re.Match, default_delimiter: Delimiter, line_number: int
) -> ArrayHeaderInfo:
    """Parse ArrayHeaderInfo from a regex match."""
    length = int(match.group("length"))
    delimiter = match.group("delim") or default_delimiter

    fields: list[str] = []
    fields_str = match.group("fields")
    if fields_str is not None:
        if not fields_str.strip():
            raise MalformedStructureError("Empty field list in array header", line_number)
        for token in split_by_delimiter(fields_str, delimiter):
            name = _parse_key(token, line_number)
            if name in fields:
                raise MalformedStructureError(f"Duplicate field {name!r}", line_number)
            fields.append(name)

    return ArrayHeaderInfo(length=length, delimiter=delimiter, fields=fields)


def _parse_key(token: str, line_number: int) -> str:
    """Parse a key, handling quoted keys and rejecting unsafe ones.

    Raises:
        InvalidKeyTokenError: If an unquoted key is not a plain identifier.
        DisallowedKeyError: If the key is in the blocked set.
    """
    token = token.strip()
    if token.startswith('"'):
        key = parse_string_literal(token, line_number)
    elif is_valid_key_token(token):
        key = token
    else:
        raise InvalidKeyTokenError(f"Invalid key token: {token!r}", line_number)

    if is_disallowed_key(key):
        raise DisallowedKeyError(key, line_number)
    return key
