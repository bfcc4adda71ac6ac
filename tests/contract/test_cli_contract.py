from __future__ import annotations

import json
import re
from pathlib import Path

from calcsheet.cli.__main__ import main

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/\1 success=\d+ failed=\d+ rows=\d+ used=\d+ unused=\d+ elapsed_sec=\d+(?:\.\d+)?$"
)
ERROR_KEYS = ["timestamp", "file", "sheet", "row", "error_type", "message"]


def _summary(out: str) -> str:
    lines = [line for line in out.splitlines() if line.startswith("SUMMARY ")]
    assert len(lines) == 1
    return lines[0]


def test_exit_zero_when_every_row_is_used(write_config: Path, clean_xlsx: Path, capsys):
    assert main([]) == 0
    assert SUMMARY_RE.match(_summary(capsys.readouterr().out))


def test_exit_two_on_unused_rows(write_config: Path, takeoff_xlsx: Path, capsys):
    assert main([]) == 2
    assert SUMMARY_RE.match(_summary(capsys.readouterr().out))


def test_exit_two_on_failed_file(write_config: Path, clean_xlsx: Path, capsys):
    (clean_xlsx.parent / "broken.xlsx").write_bytes(b"garbage")
    assert main([]) == 2
    assert "files=2/2 success=1 failed=1" in _summary(capsys.readouterr().out)


def test_exit_one_on_invalid_config(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "calcsheet.yml").write_text("header_row: 0\n", encoding="utf-8")
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "ERROR config: config validation failed" in out
    assert "SUMMARY" not in out


def test_every_output_line_is_labeled(write_config: Path, takeoff_xlsx: Path, capsys):
    main([])
    labels = {line.split(" ", 1)[0] for line in capsys.readouterr().out.splitlines() if line}
    assert labels <= {"INFO", "WARN", "ERROR", "SUMMARY"}


def test_error_log_records_have_fixed_keys(write_config: Path, takeoff_xlsx: Path):
    (takeoff_xlsx.parent / "broken.xlsx").write_bytes(b"garbage")
    main([])
    logs = list((write_config.parent.parent / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert {r["error_type"] for r in records} == {"FILE_READ_ERROR", "UNUSED_ROW"}
    for record in records:
        assert list(record) == ERROR_KEYS
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z", record["timestamp"])
        assert re.fullmatch(r"[A-Z][A-Z_]*", record["error_type"])
        assert isinstance(record["row"], int)
