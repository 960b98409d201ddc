"""Exceptions raised by webclipper."""

from typing import Optional


class ClipperError(Exception):
    """Base class for webclipper errors."""


class NoSelectionError(ClipperError):
    """A selection-only clip was requested but nothing is selected."""

    def __init__(self, message: str = "No text selected"):
        super().__init__(message)


class FetchError(ClipperError):
    """A page could not be loaded from a URL or file."""

    def __init__(self, source: str, reason: str, status_code: Optional[int] = None):
        self.source = source
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Could not load {source}: {reason}")
