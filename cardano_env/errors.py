"""Exceptions raised by the indexer client."""

from typing import Optional


class IndexerError(Exception):
    """Base exception for indexer errors."""


class TransportError(IndexerError):
    """Network, TLS or timeout failure - the indexer was not reached."""


class TransportTimeout(TransportError):
    """Request exceeded its timeout."""


class DecodeError(IndexerError):
    """Indexer was reached but the response body could not be parsed."""


class ApiError(IndexerError):
    """Indexer answered with an error status."""

    def __init__(self, status_code: int, message: str, structured: bool = False):
        super().__init__(f"Indexer error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        # True when the body carried a machine-readable message
        self.structured = structured


class FormatError(IndexerError, ValueError):
    """Malformed domain data, e.g. a short asset unit or a non-numeric quantity."""


class NotFoundError(IndexerError):
    """Expected result absent after filtering."""


class PageLimitExceeded(IndexerError):
    """Pagination hit its page cap before a short page was returned."""

    def __init__(self, endpoint: str, max_pages: int):
        super().__init__(f"Stopped after {max_pages} full pages from {endpoint}")
        self.endpoint = endpoint
        self.max_pages = max_pages


class SnapshotUnavailable(IndexerError):
    """Chain snapshot requested before the first successful refresh."""


def error_message(error: Optional[BaseException]) -> str:
    """Best human-readable message for an error (indexer message when present)."""
    if error is None:
        return ""
    if isinstance(error, ApiError):
        return error.message
    return str(error) or type(error).__name__
