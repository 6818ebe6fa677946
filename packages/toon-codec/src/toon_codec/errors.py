"""Exception types raised by the TOON encoder and decoder."""


class ToonError(Exception):
    """Base class for every error raised by the codec."""


class ToonEncodeError(ToonError):
    """A value could not be encoded."""


class ToonDecodeError(ToonError, ValueError):
    """TOON text could not be decoded."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class UnsupportedTypeError(ToonEncodeError, TypeError):
    """A value outside the JSON data model was passed to the encoder."""

    def __init__(self, type_name: str, what: str = "value"):
        self.type_name = type_name
        super().__init__(f"Unsupported {what} type: {type_name}")


class NonFiniteNumberError(ToonEncodeError, ValueError):
    """NaN or an infinity was passed to the encoder."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Numeric values must be finite, got {value!r}")


class CircularReferenceError(ToonEncodeError, ValueError):
    """A container contains itself (only raised with ``detect_cycles``)."""

    def __init__(self, type_name: str):
        super().__init__(f"Circular reference detected in {type_name}")


class DepthExceededError(ToonError, ValueError):
    """Nesting went deeper than the configured ``max_depth``."""

    def __init__(self, max_depth: int, line_number: int | None = None):
        self.max_depth = max_depth
        self.line_number = line_number
        message = f"Maximum depth {max_depth} exceeded"
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class DisallowedKeyError(ToonError, ValueError):
    """A key from the blocked set was encountered."""

    def __init__(self, key: str, line_number: int | None = None):
        self.key = key
        self.line_number = line_number
        message = f'Disallowed key "{key}"'
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class InvalidKeyTokenError(ToonDecodeError):
    """An unquoted key is not a safe identifier."""


class MalformedStructureError(ToonDecodeError):
    """Bad indentation, count mismatch or an unrecognized line."""


class InvalidLiteralError(ToonDecodeError):
    """A value token is not a valid literal, number or string."""
