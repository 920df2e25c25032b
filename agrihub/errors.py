"""Error hierarchy for the aggregation core.

``AuthError``, ``QueryError`` and ``ValidationError`` propagate to the HTTP
layer.  ``FetchError`` and ``CacheError`` are contained by the layer that
raised them.
"""

from __future__ import annotations


class AgrihubError(Exception):
    """Base exception for all service errors."""


class AuthError(AgrihubError):
    """Token invalid, expired, malformed, or its subject is unknown."""


class QueryError(AgrihubError):
    """A backing-store read or write failed."""


class ChainError(QueryError):
    """The chain engine answered outside 2xx or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AgrihubError):
    """The requested collection exists but holds nothing to return."""


class FetchError(AgrihubError):
    """An image could not be fetched (empty URL, bad status, empty body)."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{message} ({url or '<empty url>'})")
        self.url = url
        self.status_code = status_code


class CacheError(AgrihubError):
    """Any cache-store operation failure."""


class ValidationError(AgrihubError):
    """Caller-supplied parameter is malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
