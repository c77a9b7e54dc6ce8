"""Exceptions raised by tsdb_query.

Every error the library raises derives from TSDBError, so callers can catch
the whole family at once. Parsing errors also derive from ValueError.
"""

from __future__ import annotations

from enum import Enum


class TSDBError(Exception):
    """Base exception for tsdb_query."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CleanReason(str, Enum):
    """Why an identifier could not be sanitized."""

    EMPTY_INPUT = "empty_input"
    EMPTY_RESULT = "empty_result"


class CleanError(TSDBError, ValueError):
    """Metric/tag identifier sanitization failed."""

    def __init__(
        self,
        message: str,
        reason: CleanReason,
        original: str = "",
        cleaned: str = "",
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.original = original
        self.cleaned = cleaned

    def annotate(self, original: str, cleaned: str) -> CleanError:
        """Return a copy of this error carrying the offending values."""
        return CleanError(
            f"{self.message}. Original: [{original}] Cleaned: [{cleaned}]",
            self.reason,
            original=original,
            cleaned=cleaned,
        )


class QueryFormatError(TSDBError, ValueError):
    """Query or tag text does not follow the query grammar."""


class RequestFormatError(TSDBError, ValueError):
    """Request text or JSON is missing required parts."""


class TimeParseError(TSDBError, ValueError):
    """A time or duration expression could not be resolved."""


class MarshalError(TSDBError):
    """A request could not be encoded to its JSON wire form."""


class TransportError(TSDBError):
    """The HTTP round trip failed without a structured remote error."""


class RemoteError(TSDBError):
    """The database answered with a structured error body."""

    def __init__(
        self,
        request: str,
        code: int,
        message: str,
        details: str = "",
    ) -> None:
        self.request = request
        self.code = code
        self.details = details
        super().__init__(f"tsdb: {request}: {message}")
        self.message = message


__all__ = [
    "CleanError",
    "CleanReason",
    "MarshalError",
    "QueryFormatError",
    "RemoteError",
    "RequestFormatError",
    "TSDBError",
    "TimeParseError",
    "TransportError",
]
