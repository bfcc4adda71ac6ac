# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from calcsheet.logging.init import reset_logging
from calcsheet.models.raw_input import RawInput

HEADERS = ["Estimate", "Digitizer Item", "Total", "Units"]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./output
header_row: 0
keep_na_strings:
  - "NA"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "calcsheet.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_raw(*rows: tuple[Any, ...], headers: list[str] | None = None) -> RawInput:
    """RawInput from (estimate, description, total, unit) tuples."""
    return RawInput(headers=list(headers or HEADERS), rows=[list(r) for r in rows])


@pytest.fixture()
def raw_input():
    return make_raw


def write_takeoff_xlsx(path: Path, rows: list[list[Any]], headers: list[str] | None = None) -> Path:
    df = pd.DataFrame([headers or HEADERS, *rows])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Takeoff", header=False, index=False)
    return path


@pytest.fixture()
def takeoff_xlsx(temp_workdir: Path) -> Path:
    return write_takeoff_xlsx(
        temp_workdir / "data" / "tower.xlsx",
        [
            ["Excavation", "SF (2'-0\"x1'-0\")", 12, "FT"],
            ["Excavation", "Exc (H=10'-0\")", 400, "SF"],
            ["Foundation", "SOG 6\" thick", 1500, "SF"],
            ["Misc", "Scaffolding allowance", 1, "LS"],
        ],
    )


@pytest.fixture()
def xlsx_writer():
    return write_takeoff_xlsx


@pytest.fixture()
def clean_xlsx(temp_workdir: Path) -> Path:
    return write_takeoff_xlsx(
        temp_workdir / "data" / "annex.xlsx",
        [
            ["Excavation", "SF (2'-0\"x1'-0\")", 12, "FT"],
            ["Excavation", "Exc (H=10'-0\")", 400, "SF"],
        ],
    )
