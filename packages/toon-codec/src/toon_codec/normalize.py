"""Validation and normalization of host values before encoding."""

import math
from datetime import date, datetime, time
from typing import Any

from .errors import (
    CircularReferenceError,
    DepthExceededError,
    DisallowedKeyError,
    NonFiniteNumberError,
    UnsupportedTypeError,
)
from .string_utils import is_disallowed_key
from .types import EncodeOptions, JsonValue


def normalize_value(value: Any, options: EncodeOptions) -> JsonValue:
    """
    Return a JSON-model copy of ``value``, validating it on the way.

    Converts:
    - datetime, date and time objects to ISO-8601 strings
    - tuples to lists

    Raises:
        UnsupportedTypeError: For values and keys outside the JSON model.
        NonFiniteNumberError: For NaN and infinities.
        DisallowedKeyError: For keys in the blocked set.
        DepthExceededError: When containers nest deeper than ``max_depth``.
        CircularReferenceError: For self-referencing containers when
            ``detect_cycles`` is enabled.
    """
    active = set() if options.detect_cycles else None
    return _normalize(value, options, 0, active)


def _normalize(value: Any, options: EncodeOptions, depth: int, active: set[int] | None) -> JsonValue:
    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, int):
        # Integers must fit the double range
        try:
            float(value)
        except OverflowError as exc:
            raise NonFiniteNumberError(math.copysign(math.inf, value)) from exc
        return int(value)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise NonFiniteNumberError(value)
        return float(value)

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, (dict, list, tuple)):
        if depth > options.max_depth:
            raise DepthExceededError(options.max_depth)

        if active is not None:
            marker = id(value)
            if marker in active:
                raise CircularReferenceError(type(value).__name__)
            active.add(marker)

        try:
            if isinstance(value, dict):
                return _normalize_dict(value, options, depth, active)
            return [_normalize(item, options, depth + 1, active) for item in value]
        finally:
            if active is not None:
                active.discard(id(value))

    raise UnsupportedTypeError(type(value).__name__)


def _normalize_dict(
    obj: dict, options: EncodeOptions, depth: int, active: set[int] | None
) -> dict[str, JsonValue]:
    result = {}
    for key, item in obj.items():
        if not isinstance(key, str):
            raise UnsupportedTypeError(type(key).__name__, what="key")
        if is_disallowed_key(key):
            raise DisallowedKeyError(key)
        result[key] = _normalize(item, options, depth + 1, active)
    return result
