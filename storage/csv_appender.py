"""
Storage - CSV Appender.

============================================================
RESPONSIBILITY
============================================================
Durable, append-only persistence of one row per call.

- Opens (or creates) the target file in append mode
- Writes exactly one CSV row
- Flushes and syncs before returning

============================================================
CONSTRAINTS
============================================================
- The containing directory must already exist
- No locking: callers keep at most one writer per file
- Rows are never rewritten or deleted

============================================================
"""

import csv
import logging
import os
from pathlib import Path
from typing import Sequence, Union

from core.exceptions import PersistError


PathLike = Union[str, Path]


class CsvAppender:
    """Appends rows to CSV files under a data directory."""

    def __init__(self, data_dir: PathLike = "data", source: str = "csv") -> None:
        self._data_dir = Path(data_dir)
        self._source = source
        self._logger = logging.getLogger("storage.csv")

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, name: str) -> Path:
        """Resolve the file for a series name, e.g. ``bitcoin`` -> ``data/bitcoin.csv``."""
        return self._data_dir / f"{name}.csv"

    def append_row(self, path: PathLike, fields: Sequence[str]) -> None:
        """
        Append one row to ``path``.

        Args:
            path: Target CSV file
            fields: Ordered field values

        Raises:
            PersistError: If the file cannot be opened or written
        """
        start = None
        try:
            with open(path, "a", newline="", encoding="utf-8") as handle:
                start = handle.tell()
                writer = csv.writer(handle, lineterminator="\n")
                writer.writerow(fields)
                handle.flush()
                os.fsync(handle.fileno())
        except (OSError, csv.Error) as e:
            if start is not None:
                self._rollback(path, start)
            raise PersistError(
                message=f"Failed to append row to {path}: {e}",
                source=self._source,
                details={"path": str(path)},
            ) from e

        self._logger.debug(f"Appended {len(fields)} fields to {path}")

    def _rollback(self, path: PathLike, size: int) -> None:
        """Cut a partially written row so the next append starts on a clean line."""
        try:
            os.truncate(path, size)
        except OSError as e:
            self._logger.error(f"Failed to roll back partial row in {path}: {e}")
