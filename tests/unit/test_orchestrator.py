from __future__ import annotations

import json
from pathlib import Path

import pytest

from calcsheet.config.loader import CalcSheetConfig
from calcsheet.services.orchestrator import (
    ProcessingError,
    load_persisted_unused,
    output_path_for,
    process_all,
)


def _config(**kwargs) -> CalcSheetConfig:
    return CalcSheetConfig(source_directory="data", output_directory="output", **kwargs)


def _error_lines(workdir: Path) -> list[dict]:
    lines: list[dict] = []
    for log in sorted((workdir / "logs").glob("errors-*.log")):
        lines.extend(json.loads(line) for line in log.read_text(encoding="utf-8").splitlines())
    return lines


def test_output_path_for():
    assert output_path_for(Path("data/tower.xlsx"), Path("out")) == Path("out/tower.calc.json")


def test_process_all_writes_sheet_and_logs_unused(temp_workdir: Path, takeoff_xlsx: Path):
    result = process_all(_config())
    assert (result.success_files, result.failed_files) == (1, 0)
    assert result.total_data_rows == 3
    assert result.used_rows == 3
    assert result.unused_rows == 1
    assert result.needs_review

    out = json.loads((temp_workdir / "output" / "tower.calc.json").read_text(encoding="utf-8"))
    assert set(out) == {"columns", "columnConfigs", "rows", "formulas", "unusedRawDataRows", "aggregates", "stats"}
    assert out["unusedRawDataRows"] == [
        {"rowIndex": 3, "rowData": ["Misc", "Scaffolding allowance", 1, "LS"], "isUsed": False}
    ]

    errors = _error_lines(temp_workdir)
    assert [(e["error_type"], e["row"]) for e in errors] == [("UNUSED_ROW", 3)]
    assert errors[0]["file"] == "tower.xlsx"
    assert errors[0]["sheet"] == "Takeoff"
    assert errors[0]["message"] == "Misc | Scaffolding allowance | 1 | LS"


def test_unreadable_file_does_not_stop_the_run(temp_workdir: Path, clean_xlsx: Path):
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"garbage")
    result = process_all(_config())
    assert (result.success_files, result.failed_files) == (1, 1)
    stats = {s.file_name: s for s in result.file_stats}
    assert stats["broken.xlsx"].status == "failed"
    assert stats["annex.xlsx"].output_path is not None
    errors = _error_lines(temp_workdir)
    assert [(e["error_type"], e["row"], e["file"]) for e in errors] == [("FILE_READ_ERROR", -1, "broken.xlsx")]


def test_missing_header_row_is_a_file_failure(temp_workdir: Path):
    (temp_workdir / "data" / "short.csv").write_text("Digitizer Item,Total\n", encoding="utf-8")
    result = process_all(_config(header_row=4))
    assert result.failed_files == 1
    assert _error_lines(temp_workdir)[0]["error_type"] == "SHEET_HEADER_ERROR"


def test_missing_source_directory(temp_workdir: Path):
    with pytest.raises(ProcessingError, match="Directory not found"):
        process_all(CalcSheetConfig(source_directory="nowhere"))


def test_load_persisted_unused(tmp_path: Path):
    path = tmp_path / "t.calc.json"
    assert load_persisted_unused(path) == []
    path.write_text("{not json", encoding="utf-8")
    assert load_persisted_unused(path) == []
    path.write_text(
        json.dumps({"unusedRawDataRows": [{"rowIndex": 2, "isUsed": True}, {"isUsed": True}, "x"]}),
        encoding="utf-8",
    )
    assert load_persisted_unused(path) == [{"rowIndex": 2, "isUsed": True}]


def test_load_persisted_unused_drops_malformed_entries(tmp_path: Path):
    path = tmp_path / "t.calc.json"
    entries = [
        {"rowIndex": None, "isUsed": True},
        {"rowIndex": "3", "isUsed": True},
        {"rowIndex": True, "isUsed": True},
        {"rowIndex": 4, "isUsed": "false"},
        {"rowIndex": 5, "isUsed": False},
        {"rowIndex": 6},
    ]
    path.write_text(json.dumps({"unusedRawDataRows": entries}), encoding="utf-8")
    assert load_persisted_unused(path) == [{"rowIndex": 5, "isUsed": False}, {"rowIndex": 6}]


def test_malformed_reviewer_state_neither_aborts_nor_flags_rows(temp_workdir: Path, takeoff_xlsx: Path):
    output = temp_workdir / "output"
    output.mkdir()
    persisted = [{"rowIndex": None, "isUsed": True}, {"rowIndex": 3, "isUsed": "false"}]
    (output / "tower.calc.json").write_text(json.dumps({"unusedRawDataRows": persisted}), encoding="utf-8")

    result = process_all(_config())
    assert (result.success_files, result.failed_files) == (1, 0)
    assert result.unused_rows == 1

    out = json.loads((output / "tower.calc.json").read_text(encoding="utf-8"))
    assert [(u["rowIndex"], u["isUsed"]) for u in out["unusedRawDataRows"]] == [(3, False)]
