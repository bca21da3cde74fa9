"""Custom exceptions for the pool stats collector.

All collector exceptions live here to avoid circular imports between
the chain, indexer, storage and scheduling layers.
"""


class CollectorError(Exception):
    """Base exception for all collector errors."""


class ConfigError(CollectorError):
    """Raised before any tick runs when configuration is unusable."""


class ReadFailure(CollectorError):
    """Raised when on-chain pool state cannot be read or decoded."""


class QueryFailure(CollectorError):
    """Raised when the graph indexer query fails at transport or query level."""

    def __init__(
        self, message: str, status: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class WriteFailure(CollectorError):
    """Raised when a row cannot be appended to a CSV log."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path
