from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from calcsheet.models.error_record import UNUSED_ROW, ErrorRecord
from calcsheet.models.unused_row import UnusedRowRecord

"""Error log buffering.

- JSON Lines with a fixed key set (no extra keys)
- one `logs/errors-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- file-level failures carry row -1; unused rows carry their data row index
  and the non-blank cells joined with " | "
- records are buffered and written per input file
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "LOGS_DIR",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Buffered JSON Lines writer for one run.

    The log file name is fixed on first flush; runs are serial so no locking.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def file_error(self, file: str, sheet: str, error_type: str, message: str) -> None:
        """A whole input could not be read; logged with row -1."""
        self.append(ErrorRecord.create(file, sheet, -1, error_type, message))

    def unused_rows(self, file: str, sheet: str, records: Iterable[UnusedRowRecord]) -> int:
        """Log every row still waiting for review; returns how many were logged."""
        count = 0
        for record in records:
            if record.is_used:
                continue
            cells = " | ".join(str(v) for v in record.row_data if v is not None)
            self.append(ErrorRecord.create(file, sheet, record.row_index, UNUSED_ROW, cells))
            count += 1
        return count

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in self._records)
        self._records.clear()
        return fp
