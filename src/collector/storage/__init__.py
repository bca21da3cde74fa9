"""Append-only CSV persistence for collected records."""

from collector.storage.csv_appender import CSVAppender

__all__ = ["CSVAppender"]
