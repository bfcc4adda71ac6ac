from __future__ import annotations

from calcsheet.models.run_result import RunResult

"""SUMMARY line rendering."""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    # integers without a decimal point, tiny values without scientific notation
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.2f}".rstrip("0").rstrip(".")


def render_summary_line(total_files: int, result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
    used={used} unused={unused} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     success_files=1, failed_files=0, total_data_rows=40,
        ...     used_rows=40, unused_rows=3, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 rows=40 used=40 unused=3 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_data_rows} "
        f"used={result.used_rows} "
        f"unused={result.unused_rows} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
