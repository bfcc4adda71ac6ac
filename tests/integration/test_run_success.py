from __future__ import annotations

import json
from pathlib import Path

from calcsheet.cli.__main__ import main


def test_end_to_end_sheet(write_config: Path, takeoff_xlsx: Path, capsys):
    assert main([]) == 2
    workdir = write_config.parent.parent
    out = json.loads((workdir / "output" / "tower.calc.json").read_text(encoding="utf-8"))

    particulars = [r["particulars"] for r in out["rows"]]
    assert particulars[:2] == ["Excavation", "Soil excavation"]
    assert "Foundation" in particulars
    assert out["stats"] == {"total": 4, "used": 3, "unused": 1, "blank": 0}
    assert out["aggregates"]["soil_excavation_area"] == 424.0

    positions = {r["position"]: r for r in out["rows"]}
    for directive in out["formulas"]:
        assert directive["row"] in positions
        if "firstDataRow" in directive:
            assert positions[directive["firstDataRow"]]["kind"] == "data"
            assert directive["lastDataRow"] == directive["row"] - 1

    sog = next(r for r in out["rows"] if r.get("itemType") == "sog")
    assert sog["geometry"]["height"] == 0.5
    sog_formula = next(f for f in out["formulas"] if f["row"] == sog["position"])
    assert sog_formula["cells"] == {"J": f"C{sog['position']}", "L": f"J{sog['position']}*H{sog['position']}/27"}

    assert "WARN tower.xlsx: 1 unused row(s) need review" in capsys.readouterr().out


def test_partial_failure_keeps_good_outputs(write_config: Path, clean_xlsx: Path, takeoff_xlsx: Path):
    (clean_xlsx.parent / "zzz.csv").write_text("", encoding="utf-8")
    assert main([]) == 2
    workdir = write_config.parent.parent
    assert (workdir / "output" / "annex.calc.json").exists()
    assert (workdir / "output" / "tower.calc.json").exists()
    assert not (workdir / "output" / "zzz.calc.json").exists()
