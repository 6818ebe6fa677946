"""Lexical rules shared by the TOON encoder and decoder."""

import re
from typing import TYPE_CHECKING

from .errors import InvalidLiteralError

if TYPE_CHECKING:
    from .types import Delimiter

ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

UNESCAPE_MAP = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Reserved literals that can't be unquoted strings
RESERVED_LITERALS = frozenset({"true", "false", "null"})

# Structural characters that require quoting
STRUCTURAL_CHARS = frozenset(':[]{}"\\')

# Keys that would corrupt shared object behaviour in prototype-based hosts
DISALLOWED_KEYS = frozenset({"__proto__", "constructor", "prototype"})

LIST_ITEM_MARKER = "-"

# Keys that may be written without quotes
KEY_TOKEN_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Anything matching this is read back as a number, so strings matching it must be quoted
NUMERIC_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_control_char(char: str) -> bool:
    """Return True for C0 control characters and DEL."""
    code = ord(char)
    return code < 0x20 or code == 0x7F


def escape_string(value: str) -> str:
    """
    Escape a string for use in TOON quoted strings.

    Backslash, double quote, newline, carriage return and tab get their
    two-character escapes; every other control character is written as
    ``\\uXXXX``. Everything else, including non-ASCII text, is kept as is.

    Args:
        value: The string to escape.

    Returns:
        The escaped string (without surrounding quotes).
    """
    result = []
    for char in value:
        if char in ESCAPE_MAP:
            result.append(ESCAPE_MAP[char])
        elif is_control_char(char):
            result.append(f"\\u{ord(char):04x}")
        else:
            result.append(char)
    return "".join(result)


def unescape_string(value: str) -> str:
    """
    Unescape the content of a TOON quoted string.

    Args:
        value: The string content (without surrounding quotes).

    Returns:
        The unescaped string.

    Raises:
        InvalidLiteralError: For an unknown escape or a trailing backslash.
    """
    result = []
    i = 0
    while i < len(value):
        char = value[i]
        if char != "\\":
            result.append(char)
            i += 1
            continue

        if i + 1 >= len(value):
            raise InvalidLiteralError("Backslash at end of string")
        next_char = value[i + 1]
        if next_char in UNESCAPE_MAP:
            result.append(UNESCAPE_MAP[next_char])
            i += 2
        elif next_char == "u":
            digits = value[i + 2 : i + 6]
            if len(digits) != 4 or not all(d in _HEX_DIGITS for d in digits):
                raise InvalidLiteralError(f"Invalid unicode escape: \\u{digits}")
            result.append(chr(int(digits, 16)))
            i += 6
        else:
            raise InvalidLiteralError(f"Invalid escape sequence: \\{next_char}")
    return "".join(result)


def looks_like_number(value: str) -> bool:
    """Check if a string would be read back as a number."""
    return bool(NUMERIC_PATTERN.fullmatch(value))


def is_safe_unquoted(value: str, delimiter: "Delimiter" = ",") -> bool:
    """
    Check if a string can be safely represented without quotes.

    A string can be unquoted if it is non-empty, has no leading or trailing
    whitespace, is not ``true``/``false``/``null`` or a number, contains no
    structural characters, quotes, backslashes, control characters or the
    active delimiter, and does not start with the list marker.

    Args:
        value: The string to check.
        delimiter: The active delimiter character.

    Returns:
        True if the string can be unquoted.
    """
    if not value:
        return False

    if value != value.strip():
        return False

    if value in RESERVED_LITERALS:
        return False

    if looks_like_number(value):
        return False

    if delimiter in value:
        return False

    if any(c in STRUCTURAL_CHARS or is_control_char(c) for c in value):
        return False

    if value.startswith(LIST_ITEM_MARKER):
        return False

    return True


def needs_quoting(value: str, delimiter: "Delimiter" = ",") -> bool:
    """Check if a string needs to be quoted."""
    return not is_safe_unquoted(value, delimiter)


def is_valid_key_token(key: str) -> bool:
    """
    Check if a key can be written without quotes.

    Valid bare keys start with an ASCII letter or underscore followed by
    letters, digits or underscores.
    """
    return bool(KEY_TOKEN_PATTERN.fullmatch(key))


def is_disallowed_key(key: str) -> bool:
    """Check if a key is in the blocked set."""
    return key in DISALLOWED_KEYS


def find_closing_quote(s: str, start: int) -> int:
    """
    Find the closing quote in a string.

    Args:
        s: The string to search.
        start: The position of the opening quote.

    Returns:
        Index of the closing quote, or -1 if not found.
    """
    i = start + 1
    while i < len(s):
        char = s[i]
        if char == "\\":
            i += 2
            continue
        if char == '"':
            return i
        i += 1
    return -1


def find_unquoted_colon(line: str) -> int:
    """
    Find the position of the first unquoted colon in a line.

    Args:
        line: The line to search.

    Returns:
        Index of the colon, or -1 if not found.
    """
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\" and in_quotes and i + 1 < len(line):
            i += 2
            continue
        elif char == '"':
            in_quotes = not in_quotes
        elif char == ":" and not in_quotes:
            return i
        i += 1
    return -1


def split_by_delimiter(value: str, delimiter: "Delimiter") -> list[str]:
    """
    Split a string by delimiter, respecting quoted sections.

    Args:
        value: The string to split.
        delimiter: The delimiter character.

    Returns:
        List of values (still containing quotes if originally quoted).
    """
    result = []
    current = []
    in_quotes = False
    i = 0

    while i < len(value):
        char = value[i]
        if char == "\\" and in_quotes and i + 1 < len(value):
            # Keep escape sequence intact
            current.append(char)
            current.append(value[i + 1])
            i += 2
            continue
        elif char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char == delimiter and not in_quotes:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    result.append("".join(current).strip())
    return result
