"""Format errors raised while decoding NIfTI buffers."""

from __future__ import annotations


class FormatError(ValueError):
    """Base class for fatal decoding failures."""


class NotRecognizedError(FormatError):
    """Raised when the buffer does not carry a NIfTI signature."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Invalid NIfTI file format")


class HeaderTooShortError(FormatError):
    """Raised when the buffer is smaller than the header it declares."""

    def __init__(self, size: int, required: int) -> None:
        self.size = size
        self.required = required
        super().__init__(f"NIfTI header needs {required} bytes, buffer has {size}")


class DecompressionFailedError(FormatError):
    """Raised when a gzip envelope is truncated or corrupt."""


class InvalidDimensionsError(FormatError):
    """Raised when the header declares an unusable dimension vector."""


class SampleCountMismatchError(FormatError):
    """Raised when declared dimensions disagree with the sample buffer."""

    def __init__(self, expected: int, actual: int, message: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        base = message or f"Header declares {expected} samples, buffer holds {actual}"
        super().__init__(base)
