"""Primitive value encoding and parsing for TOON."""

import math
from typing import TYPE_CHECKING

from .errors import InvalidLiteralError, NonFiniteNumberError
from .string_utils import (
    escape_string,
    find_closing_quote,
    is_safe_unquoted,
    is_valid_key_token,
    looks_like_number,
    unescape_string,
)

if TYPE_CHECKING:
    from .types import Delimiter, JsonPrimitive


def encode_primitive(value: "JsonPrimitive", delimiter: "Delimiter" = ",") -> str:
    """
    Encode a primitive value to TOON format.

    Args:
        value: The primitive value (str, int, float, bool, or None).
        delimiter: The active delimiter for quoting checks.

    Returns:
        The encoded string representation.

    Raises:
        NonFiniteNumberError: For NaN and infinities.
    """
    if value is None:
        return "null"

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return encode_number(value)

    if isinstance(value, str):
        return encode_string_literal(value, delimiter)

    raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def encode_number(value: int | float) -> str:
    """Encode a number using its shortest round-trippable form."""
    if isinstance(value, int):
        return str(value)

    if not math.isfinite(value):
        raise NonFiniteNumberError(value)
    if value == 0.0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    s = repr(value)
    # Whole floats drop the .0
    if s.endswith(".0"):
        return s[:-2]
    return s


def encode_string_literal(value: str, delimiter: "Delimiter" = ",") -> str:
    """
    Encode a string value, with or without quotes.

    Args:
        value: The string to encode.
        delimiter: The active delimiter for quoting checks.

    Returns:
        The encoded string (quoted if necessary).
    """
    if is_safe_unquoted(value, delimiter):
        return value
    return quote_string(value)


def quote_string(value: str) -> str:
    """Wrap a string in double quotes, escaping its content."""
    return f'"{escape_string(value)}"'


def encode_key(key: str) -> str:
    """
    Encode an object key for TOON format.

    Identifier-like keys are written bare, everything else is quoted.
    """
    if is_valid_key_token(key):
        return key
    return quote_string(key)


def parse_primitive(token: str, line_number: int | None = None) -> "JsonPrimitive":
    """
    Parse a primitive token to a Python value.

    Handles: null, true, false, numbers, quoted strings, unquoted strings.

    Args:
        token: The token string (trimmed).
        line_number: Line the token came from, for error messages.

    Returns:
        The parsed Python value.

    Raises:
        InvalidLiteralError: For empty tokens, malformed quoted strings and
            numbers outside the float range.
    """
    if not token:
        raise InvalidLiteralError("Empty value", line_number)

    if token.startswith('"'):
        return parse_string_literal(token, line_number)

    if token == "null":
        return None
    if token == "true":
        return True
    if token == "false":
        return False

    if looks_like_number(token):
        return _parse_number(token, line_number)

    # Unquoted string
    return token


def parse_string_literal(token: str, line_number: int | None = None) -> str:
    """
    Parse a quoted string literal.

    Args:
        token: The token starting with '"'.
        line_number: Line the token came from, for error messages.

    Returns:
        The unescaped string content.

    Raises:
        InvalidLiteralError: If the string is malformed.
    """
    if not token.startswith('"'):
        raise InvalidLiteralError(f"String literal must start with quote: {token}", line_number)

    end = find_closing_quote(token, 0)
    if end == -1:
        raise InvalidLiteralError(f"Unterminated string: {token}", line_number)
    if end != len(token) - 1:
        raise InvalidLiteralError(
            f"Unexpected characters after string literal: {token}", line_number
        )

    try:
        return unescape_string(token[1:end])
    except InvalidLiteralError as exc:
        raise InvalidLiteralError(str(exc), line_number) from exc


def _parse_number(token: str, line_number: int | None) -> int | float:
    """Parse a token already known to match the numeric grammar."""
    is_negative = token.startswith("-")
    try:
        if "." not in token and "e" not in token.lower():
            value: int | float = int(token)
        else:
            value = float(token)
    except ValueError as exc:
        raise InvalidLiteralError(f"Invalid number: {token}", line_number) from exc

    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidLiteralError(f"Number out of range: {token}", line_number)

    # -0 keeps its sign
    if value == 0 and is_negative:
        return -0.0

    return value


def format_array_header(
    length: int,
    key: str | None = None,
    fields: list[str] | tuple[str, ...] | None = None,
    delimiter: "Delimiter" = ",",
) -> str:
    """
    Format an array header line.

    Args:
        length: The array length.
        key: Optional key name (None for root arrays or list items).
        fields: Optional field names for tabular format.
        delimiter: The delimiter (included in bracket if not comma).

    Returns:
        The formatted header string.
    """
    if delimiter == ",":
        bracket = f"[{length}]"
    else:
        bracket = f"[{length}{delimiter}]"

    fields_part = ""
    if fields:
        encoded_fields = [encode_key(f) for f in fields]
        fields_part = "{" + delimiter.join(encoded_fields) + "}"

    if key is not None:
        return f"{encode_key(key)}{bracket}{fields_part}:"
    return f"{bracket}{fields_part}:"
