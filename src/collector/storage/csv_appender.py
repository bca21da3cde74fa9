"""Append-only, header-once CSV log writer.

Each appender owns exactly one file. The header is written only when the
file is missing or empty; existing rows are never truncated, reordered or
rewritten. A crash mid-append can leave a partial trailing line, which
readers of the log must tolerate.
"""

import csv
from collections.abc import Sequence
from pathlib import Path

from collector.exceptions import WriteFailure
from collector.logging import get_logger

logger = get_logger(__name__)


class CSVAppender:
    """Appends rows to one CSV file with a fixed header.

    The column set is fixed for the file's lifetime; a schema change
    needs a new file.

    Usage:
        appender = CSVAppender("data/ethusdc_stats.csv", PoolStatsRecord.HEADER)
        appender.append(record.to_row())
    """

    def __init__(self, path: str | Path, header: Sequence[str]) -> None:
        self._path = Path(path)
        self._header = list(header)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def header(self) -> list[str]:
        return list(self._header)

    def append(self, row: Sequence) -> None:
        """Append one row, writing the header first if the file is new.

        Raises:
            WriteFailure: On any file-system error, or a row whose width
                does not match the header.
        """
        if len(row) != len(self._header):
            raise WriteFailure(
                f"Row has {len(row)} columns, header has {len(self._header)}",
                path=str(self._path),
            )

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            needs_header = not self._path.exists() or self._path.stat().st_size == 0
            with self._path.open("a", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                if needs_header:
                    writer.writerow(self._header)
                    logger.info("csv_created", path=str(self._path))
                writer.writerow(row)
        except OSError as e:
            raise WriteFailure(
                f"Failed to append to {self._path}: {e}", path=str(self._path)
            ) from e
