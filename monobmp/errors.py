from __future__ import annotations


class MonoBmpError(Exception):
    """Base class for conversion failures."""


class DecodeUnavailable(MonoBmpError):
    """The source image could not be read or decoded."""


class InvalidDimensions(MonoBmpError, ValueError):
    def __init__(self, width: int, height: int, message: str | None = None):
        super().__init__(message or f"Invalid dimensions {width}x{height}: width and height must be > 0")
        self.width = width
        self.height = height


class EncodingIOFailure(MonoBmpError):
    """The output buffer could not be built; no partial file is returned."""
