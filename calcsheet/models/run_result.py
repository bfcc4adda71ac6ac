from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Run result models for the batch CLI.

FileStat records one input file; RunResult aggregates them for the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics (internal helper for RunResult)."""
    file_name: str
    status: str  # success/failed
    data_rows: int  # classified rows written to the sheet
    used_rows: int
    unused_rows: int
    elapsed_seconds: float
    output_path: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one CLI run."""
    success_files: int
    failed_files: int
    total_data_rows: int
    used_rows: int
    unused_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def needs_review(self) -> bool:
        return self.failed_files > 0 or self.unused_rows > 0
