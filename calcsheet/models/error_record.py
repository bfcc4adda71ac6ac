from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Besides read failures, every unused input row is logged as an UNUSED_ROW record
so a reviewer can work through them without opening the sheet. `row` is the
zero-based data row index (header excluded), or -1 for file-level errors.
"""

__all__ = [
    "ErrorRecord",
    "FILE_READ_ERROR",
    "SHEET_HEADER_ERROR",
    "UNUSED_ROW",
]

FILE_READ_ERROR = "FILE_READ_ERROR"
SHEET_HEADER_ERROR = "SHEET_HEADER_ERROR"
UNUSED_ROW = "UNUSED_ROW"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Input filename being processed
        sheet: Sheet name within the file ("" for CSV input)
        row: Data row index. Use -1 for file-level errors where row is unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Description of the problem
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # asdict keeps the key set fixed to the dataclass fields
        return json.dumps(asdict(self), ensure_ascii=False)
