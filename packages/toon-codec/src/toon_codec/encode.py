"""TOON encoder implementation."""

import logging
from collections.abc import Generator, Iterator
from typing import Any

from .normalize import normalize_value
from .primitives import encode_key, encode_primitive, format_array_header
from .types import ArrayShape, EncodeOptions, JsonValue, ListShape, TabularShape

logger = logging.getLogger(__name__)


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """
    Encode a Python value to TOON format.

    Args:
        value: The value to encode (dict, list, or primitive).
        options: Encoding options.

    Returns:
        The TOON-formatted string.

    Raises:
        UnsupportedTypeError: For values outside the JSON data model.
        NonFiniteNumberError: For NaN and infinities.
        DisallowedKeyError: For keys in the blocked set.
        DepthExceededError: When nesting exceeds ``options.max_depth``.
        CircularReferenceError: For self-references when
            ``options.detect_cycles`` is enabled.
    """
    opts = options or EncodeOptions()
    return "\n".join(encode_lines(value, opts))


def encode_lines(value: Any, options: EncodeOptions | None = None) -> Iterator[str]:
    """
    Encode a Python value to TOON format, yielding lines.

    The whole value is validated before this returns, so iterating the
    result never fails halfway through.

    Args:
        value: The value to encode.
        options: Encoding options.

    Returns:
        An iterator over lines of TOON output.
    """
    opts = options or EncodeOptions()
    normalized = normalize_value(value, opts)
    return _encode_root(normalized, opts)


def _encode_root(value: JsonValue, opts: EncodeOptions) -> Generator[str, None, None]:
    if isinstance(value, dict):
        yield from _encode_object_lines(value, opts, 0)
    elif isinstance(value, list):
        yield from _encode_array_lines(None, value, opts, 0)
    else:
        yield encode_primitive(value, opts.delimiter)


def analyze_array_shape(arr: list) -> ArrayShape:
    """
    Decide how an array is rendered.

    An array is tabular when it is non-empty, every element is a non-empty
    object, all elements share the same key set and every value is a
    primitive. Columns follow the key order of the first element.
    """
    if not arr:
        return ListShape()

    first = arr[0]
    if not isinstance(first, dict) or not first:
        return ListShape()

    first_keys = set(first)
    for index, item in enumerate(arr):
        if not isinstance(item, dict):
            logger.debug("Array element %d is not an object; using list layout", index)
            return ListShape()
        if set(item) != first_keys:
            logger.debug("Array element %d has a different key set; using list layout", index)
            return ListShape()
        if not all(_is_primitive(v) for v in item.values()):
            logger.debug("Array element %d has a nested value; using list layout", index)
            return ListShape()

    return TabularShape(tuple(first))


def _encode_object_lines(obj: dict, opts: EncodeOptions, depth: int) -> Generator[str, None, None]:
    """Encode an object's key-value pairs."""
    for key, value in obj.items():
        yield from _encode_entry(key, value, opts, depth)


def _encode_entry(key: str, value: JsonValue, opts: EncodeOptions, depth: int) -> Generator[str, None, None]:
    """Encode one key-value pair; nested content goes one level deeper."""
    indent = " " * (opts.indent * depth)

    if isinstance(value, dict):
        yield f"{indent}{encode_key(key)}:"
        yield from _encode_object_lines(value, opts, depth + 1)
    elif isinstance(value, list):
        yield from _encode_array_lines(key, value, opts, depth)
    else:
        yield f"{indent}{encode_key(key)}: {encode_primitive(value, opts.delimiter)}"


def _encode_array_lines(
    key: str | None, arr: list, opts: EncodeOptions, depth: int
) -> Generator[str, None, None]:
    """Encode an array header at ``depth`` and its body one level deeper."""
    indent = " " * (opts.indent * depth)
    shape = analyze_array_shape(arr)

    if isinstance(shape, TabularShape):
        yield indent + format_array_header(len(arr), key, shape.fields, opts.delimiter)
        for row in arr:
            yield _encode_tabular_row(row, shape.fields, opts, depth + 1)
    else:
        yield indent + format_array_header(len(arr), key, None, opts.delimiter)
        for item in arr:
            yield from _encode_list_item(item, opts, depth + 1)


def _encode_list_item(item: JsonValue, opts: EncodeOptions, depth: int) -> Generator[str, None, None]:
    """Encode a list item starting with the - marker at ``depth``."""
    indent = " " * (opts.indent * depth)

    if isinstance(item, dict):
        if not item:
            yield f"{indent}-"
            return

        # First field shares the hyphen line, the rest sit one level deeper
        child_indent = " " * (opts.indent * (depth + 1))
        entries = iter(item.items())
        first_key, first_value = next(entries)
        lines = _encode_entry(first_key, first_value, opts, depth + 1)
        yield f"{indent}- {next(lines)[len(child_indent):]}"
        yield from lines
        for key, value in entries:
            yield from _encode_entry(key, value, opts, depth + 1)
    elif isinstance(item, list):
        lines = _encode_array_lines(None, item, opts, depth)
        yield f"{indent}- {next(lines)[len(indent):]}"
        yield from lines
    else:
        yield f"{indent}- {encode_primitive(item, opts.delimiter)}"


def _encode_tabular_row(row: dict, fields: tuple[str, ...], opts: EncodeOptions, depth: int) -> str:
    """Encode a single tabular row."""
    indent = " " * (opts.indent * depth)
    values = [encode_primitive(row[f], opts.delimiter) for f in fields]
    return indent + opts.delimiter.join(values)


def _is_primitive(value: JsonValue) -> bool:
    """Check if value is a primitive (not dict or list)."""
    return not isinstance(value, (dict, list))
