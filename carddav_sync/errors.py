"""
Exception types raised by carddav_sync.

The hierarchy separates failures of the network layer from violations of
the CardDAV protocol contract so callers can tell a transient outage from
a server that answered with something unexpected.
"""

from __future__ import annotations


class CardDAVSyncError(Exception):
    """Base class for all carddav_sync errors."""

    pass


class TransportError(CardDAVSyncError):
    """Raised when the HTTP request itself fails (connection, timeout, TLS)."""

    pass


class ProtocolError(CardDAVSyncError):
    """
    Raised when the server answers with an unexpected status or document.

    Attributes:
        status: HTTP status code of the offending response, if any
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MissingSyncToken(ProtocolError):
    """Raised when a well-formed response carries no DAV:sync-token."""

    pass


class MalformedDocument(CardDAVSyncError):
    """Raised when a response body cannot be parsed as XML."""

    pass


class AllocationExhausted(CardDAVSyncError):
    """
    Raised when no free resource id was found within the retry cap.

    Attributes:
        attempts: Number of candidates probed before giving up
    """

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


__all__ = [
    "CardDAVSyncError",
    "TransportError",
    "ProtocolError",
    "MissingSyncToken",
    "MalformedDocument",
    "AllocationExhausted",
]
