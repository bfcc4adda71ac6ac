from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from calcsheet.excel.reader import (
    InputReadError,
    SheetHeaderError,
    frame_to_raw_input,
    load_sheet_frame,
    read_raw_input,
    scan_input_files,
)
from calcsheet.models.raw_input import HeaderIndex, iter_input_rows


def _xlsx(path: Path, grid: list[list], sheet: str = "Takeoff") -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(grid).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


def test_scan_input_files_filters_and_sorts(tmp_path: Path):
    for name in ("b.xlsx", "a.csv", "~$b.xlsx", "notes.txt"):
        (tmp_path / name).write_text("x", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    assert [p.name for p in scan_input_files(tmp_path)] == ["a.csv", "b.xlsx"]


def test_read_xlsx_first_sheet(tmp_path: Path):
    path = _xlsx(
        tmp_path / "t.xlsx",
        [
            ["Estimate", "Digitizer Item", "Total", "Units"],
            ["Excavation", "SF (2'-0\"x1'-0\")", 12, "FT"],
            [None, "Sump pit", 2, "EA"],
        ],
    )
    raw = read_raw_input(path)
    assert raw.headers == ["Estimate", "Digitizer Item", "Total", "Units"]
    assert raw.rows[0] == ["Excavation", "SF (2'-0\"x1'-0\")", 12, "FT"]
    assert raw.rows[1][0] is None


def test_named_sheet_missing(tmp_path: Path):
    path = _xlsx(tmp_path / "t.xlsx", [["Digitizer Item", "Total"]])
    with pytest.raises(InputReadError, match="sheet not found"):
        load_sheet_frame(path, "Other")


def test_corrupt_workbook(tmp_path: Path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a zip file")
    with pytest.raises(InputReadError):
        read_raw_input(path)


def test_csv_input(tmp_path: Path):
    path = tmp_path / "t.csv"
    path.write_text('Estimate,Digitizer Item,Total,Units\n,"Exc (H=10\'-0"")",400,SF\n', encoding="utf-8")
    sheet, df = load_sheet_frame(path)
    assert sheet == ""
    raw = frame_to_raw_input(df, sheet)
    header = HeaderIndex.resolve(raw.headers)
    (row,) = list(iter_input_rows(raw, header))
    assert row.description == "Exc (H=10'-0\")"
    assert row.takeoff == 400.0
    assert row.estimate is None


def test_keep_na_strings(tmp_path: Path):
    path = tmp_path / "t.csv"
    path.write_text("Digitizer Item,Total,Units\nNA,1,EA\n", encoding="utf-8")
    assert read_raw_input(path).rows[0][0] is None
    assert read_raw_input(path, keep_na_strings=["NA"]).rows[0][0] == "NA"


def test_header_row_offset(tmp_path: Path):
    path = tmp_path / "t.csv"
    path.write_text("Project X,,\nDigitizer Item,Total,Units\nSump pit,2,EA\n", encoding="utf-8")
    raw = read_raw_input(path, header_row=1)
    assert raw.headers == ["Digitizer Item", "Total", "Units"]
    assert len(raw.rows) == 1


def test_missing_header_row():
    df = pd.DataFrame([["Digitizer Item", "Total"]])
    with pytest.raises(SheetHeaderError):
        frame_to_raw_input(df, "Takeoff", header_row=3)
