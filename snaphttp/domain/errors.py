"""Errors raised or delivered by the request helper itself."""
from __future__ import annotations


class SnapHttpError(Exception):
    """Base for request helper failures."""


class UsageError(SnapHttpError):
    """Raised when the call input is malformed."""


class ProtocolError(SnapHttpError):
    """Raised when the URL scheme is neither http nor https."""


class DecompressionError(SnapHttpError):
    """Raised when a compressed response body cannot be decoded."""
