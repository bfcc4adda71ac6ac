from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any

import pandas as pd
import pandas._libs.parsers as parsers
from openpyxl.utils.exceptions import InvalidFileException

from calcsheet.models.raw_input import RawInput

"""Take-off extract reader.

Reads one sheet of an .xlsx workbook (openpyxl engine) or a .csv file without
header inference. The configured header row becomes `RawInput.headers`; every
later row becomes a data row, blank rows included, so row indices stay aligned
with the source sheet. NaN cells become None.
"""

__all__ = [
    "INPUT_SUFFIXES",
    "SheetHeaderError",
    "InputReadError",
    "scan_input_files",
    "load_sheet_frame",
    "frame_to_raw_input",
    "read_raw_input",
]

INPUT_SUFFIXES = (".xlsx", ".csv")


class SheetHeaderError(Exception):
    """Raised when the sheet has no row at the configured header position."""


class InputReadError(Exception):
    """Raised when an input file cannot be opened or parsed."""


def scan_input_files(directory: Path) -> list[Path]:
    """List .xlsx / .csv files directly under `directory`, sorted by name.

    Office lock files (~$name.xlsx) are skipped.
    """
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in INPUT_SUFFIXES and not p.name.startswith("~$")
    )


def _na_options(keep_na_strings: list[str] | None) -> dict[str, Any]:
    # pandas turns "NA", "N/A", ... into NaN by default; keep the listed ones as text
    if not keep_na_strings:
        return {"keep_default_na": True}
    custom_na = parsers.STR_NA_VALUES - set(keep_na_strings)
    return {"keep_default_na": False, "na_values": list(custom_na)}


def load_sheet_frame(
    path: Path,
    sheet_name: str | None = None,
    keep_na_strings: list[str] | None = None,
) -> tuple[str, pd.DataFrame]:
    """Read the raw grid of one sheet; returns (sheet name, DataFrame).

    CSV files report an empty sheet name. `sheet_name=None` picks the first
    sheet of a workbook.
    """
    na = _na_options(keep_na_strings)
    try:
        if path.suffix.lower() == ".csv":
            return "", pd.read_csv(path, header=None, **na)
        xls = pd.ExcelFile(path, engine="openpyxl")
        names = [str(n) for n in xls.sheet_names]
        target = sheet_name if sheet_name is not None else (names[0] if names else None)
        if target is None or target not in names:
            raise InputReadError(f"{path.name}: sheet not found: {sheet_name!r}")
        return target, xls.parse(target, header=None, **na)
    except InputReadError:
        raise
    except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
        raise InputReadError(f"{path.name}: {e}") from e


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if hasattr(value, "item") and not isinstance(value, (str, pd.Timestamp)):
        # numpy scalar -> plain Python number
        return value.item()
    return value


def frame_to_raw_input(df: pd.DataFrame, sheet_name: str, header_row: int = 0) -> RawInput:
    if df.shape[0] <= header_row:
        label = sheet_name or "csv"
        raise SheetHeaderError(f"sheet '{label}' has no header at row {header_row}")
    grid = [[_clean_cell(v) for v in row] for row in df.astype(object).values.tolist()]
    headers = [str(h).strip() if h is not None else None for h in grid[header_row]]
    return RawInput(headers=headers, rows=grid[header_row + 1 :])


def read_raw_input(
    path: Path,
    sheet_name: str | None = None,
    header_row: int = 0,
    keep_na_strings: list[str] | None = None,
) -> RawInput:
    resolved, df = load_sheet_frame(path, sheet_name, keep_na_strings)
    return frame_to_raw_input(df, resolved, header_row)
