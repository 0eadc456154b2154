"""Exception types raised by capture, vision and session code."""

from __future__ import annotations


class SehatiError(Exception):
    """Base class for all errors raised by this package."""


class FileTooLargeError(SehatiError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"file is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit


class UnsupportedImageError(SehatiError):
    pass


class CameraUnavailableError(SehatiError):
    pass


class AnalysisError(SehatiError):
    """The inference service call failed or its reply could not be parsed."""


class SessionBusyError(SehatiError):
    """An analysis is already in flight, or there is nothing to analyze."""
