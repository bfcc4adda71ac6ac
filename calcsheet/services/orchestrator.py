from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from calcsheet.config.loader import CalcSheetConfig
from calcsheet.excel.reader import (
    InputReadError,
    SheetHeaderError,
    frame_to_raw_input,
    load_sheet_frame,
    scan_input_files,
)
from calcsheet.logging.error_log import ErrorLogBuffer
from calcsheet.models.calculation_result import CalculationResult
from calcsheet.models.error_record import FILE_READ_ERROR, SHEET_HEADER_ERROR
from calcsheet.models.run_result import FileStat, RunResult
from calcsheet.services.assembler import generate_calculation_sheet
from calcsheet.services.progress import ProgressTracker

"""Batch orchestration.

For every input file in the source directory:
1. read the configured sheet into a RawInput
2. load the reviewer state (`unusedRawDataRows`) from a previous
   `<stem>.calc.json`, if any
3. generate the calculation sheet with that state merged in
4. write `<stem>.calc.json` and log unused rows to the error log

A failing file is recorded and skipped; only directory problems are fatal.
"""

__all__ = [
    "OUTPUT_SUFFIX",
    "ProcessingError",
    "output_path_for",
    "load_persisted_unused",
    "write_result",
    "process_all",
]

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".calc.json"


class ProcessingError(Exception):
    """Fatal error that prevents processing (missing or unreadable directory)."""


@dataclass(frozen=True)
class _FileOutcome:
    stat: FileStat
    result: CalculationResult | None = None


def _scan(directory: Path) -> list[Path]:
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return scan_input_files(directory)
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def output_path_for(input_path: Path, output_directory: Path) -> Path:
    return output_directory / f"{input_path.stem}{OUTPUT_SUFFIX}"


def _valid_review_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    index = entry.get("rowIndex")
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    return isinstance(entry.get("isUsed", False), bool)


def load_persisted_unused(path: Path) -> list[dict[str, Any]]:
    """`unusedRawDataRows` of a previously written sheet; [] when absent or unreadable.

    Entries need an integer `rowIndex` and, when present, a boolean `isUsed`;
    anything else is dropped with a warning so a hand-edited file cannot flag
    rows nobody reviewed.
    """
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"{path.name}: previous output unreadable, reviewer flags not carried ({e})")
        return []
    entries = data.get("unusedRawDataRows") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        return []
    valid = [e for e in entries if _valid_review_entry(e)]
    dropped = len(entries) - len(valid)
    if dropped:
        logger.warning(f"{path.name}: {dropped} malformed reviewer entries ignored")
    return valid


def write_result(result: CalculationResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(result.to_dict(), ensure_ascii=False, indent=2, default=str)
    path.write_text(payload + "\n", encoding="utf-8")
    return path


def _failed(file_path: Path, elapsed: float, error: str) -> _FileOutcome:
    return _FileOutcome(
        FileStat(
            file_name=file_path.name,
            status="failed",
            data_rows=0,
            used_rows=0,
            unused_rows=0,
            elapsed_seconds=elapsed,
            error=error,
        )
    )


def _process_single_file(
    file_path: Path,
    config: CalcSheetConfig,
    error_log: ErrorLogBuffer,
) -> _FileOutcome:
    start = datetime.now(UTC)
    sheet = config.sheet_name or ""
    try:
        sheet, df = load_sheet_frame(file_path, config.sheet_name, config.keep_na_strings)
        raw = frame_to_raw_input(df, sheet, config.header_row)
    except InputReadError as e:
        logger.error(f"{file_path.name}: {e}")
        error_log.file_error(file_path.name, sheet, FILE_READ_ERROR, str(e))
        return _failed(file_path, (datetime.now(UTC) - start).total_seconds(), str(e))
    except SheetHeaderError as e:
        logger.error(f"{file_path.name}: {e}")
        error_log.file_error(file_path.name, sheet, SHEET_HEADER_ERROR, str(e))
        return _failed(file_path, (datetime.now(UTC) - start).total_seconds(), str(e))

    out_path = output_path_for(file_path, Path(config.output_directory))
    persisted = load_persisted_unused(out_path)
    result = generate_calculation_sheet(raw, config.settings, persisted)
    write_result(result, out_path)

    pending = error_log.unused_rows(file_path.name, sheet, result.unused_rows)
    if pending:
        logger.warning(f"{file_path.name}: {pending} unused row(s) need review")

    elapsed = (datetime.now(UTC) - start).total_seconds()
    stat = FileStat(
        file_name=file_path.name,
        status="success",
        data_rows=len(result.data_rows),
        used_rows=result.stats.get("used", 0),
        unused_rows=pending,
        elapsed_seconds=elapsed,
        output_path=str(out_path),
    )
    logger.info(f"{file_path.name}: {stat.data_rows} data rows -> {out_path}")
    return _FileOutcome(stat, result)


def process_all(config: CalcSheetConfig) -> RunResult:
    """Process every input file in the configured source directory.

    Raises:
        ProcessingError: For fatal errors that prevent processing
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer()

    file_paths = _scan(Path(config.source_directory))

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_rows = 0
    used_rows = 0
    unused_rows = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            outcome = _process_single_file(file_path, config, error_log)
            stat = outcome.stat
            if stat.status == "success":
                success_count += 1
                total_rows += stat.data_rows
                used_rows += stat.used_rows
                unused_rows += stat.unused_rows
            else:
                failed_count += 1
            progress.finish_file(success=stat.status == "success", unused_rows=stat.unused_rows)
            file_stats.append(stat)
            # one flush per file keeps the log useful if a later file crashes the run
            log_path = error_log.flush()
            if log_path is not None:
                logger.debug(f"error log: {log_path}")

    end_time = datetime.now(UTC)
    return RunResult(
        success_files=success_count,
        failed_files=failed_count,
        total_data_rows=total_rows,
        used_rows=used_rows,
        unused_rows=unused_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
