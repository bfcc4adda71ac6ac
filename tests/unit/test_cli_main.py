from __future__ import annotations

from pathlib import Path

from calcsheet.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main


def test_missing_config_is_fatal(temp_workdir: Path, capsys):
    assert main([]) == EXIT_FATAL
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_missing_source_directory_is_fatal(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "calcsheet.yml").write_text("source_directory: ./missing\n", encoding="utf-8")
    assert main([]) == EXIT_FATAL
    assert "ERROR directory not found" in capsys.readouterr().out


def test_clean_run_exits_zero(write_config: Path, clean_xlsx: Path, capsys):
    assert main([]) == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "SUMMARY files=1/1 success=1 failed=0 rows=2 used=2 unused=0" in out
    assert (write_config.parent.parent / "output" / "annex.calc.json").exists()


def test_unused_rows_exit_two(write_config: Path, takeoff_xlsx: Path, capsys):
    assert main([]) == EXIT_PARTIAL_FAILURE
    assert "unused=1" in capsys.readouterr().out


def test_explicit_config_path(temp_workdir: Path, clean_xlsx: Path):
    alt = temp_workdir / "alt.yml"
    alt.write_text("source_directory: ./data\noutput_directory: ./elsewhere\n", encoding="utf-8")
    assert main(["--config", str(alt)]) == EXIT_SUCCESS_ALL
    assert (temp_workdir / "elsewhere" / "annex.calc.json").exists()


def test_config_from_environment(temp_workdir: Path, clean_xlsx: Path, monkeypatch):
    alt = temp_workdir / "env.yml"
    alt.write_text("source_directory: ./data\n", encoding="utf-8")
    monkeypatch.setenv("CALCSHEET_CONFIG", str(alt))
    assert main([]) == EXIT_SUCCESS_ALL


def test_config_from_dotenv(temp_workdir: Path, clean_xlsx: Path, monkeypatch):
    # registered so the variable load_dotenv sets is removed again afterwards
    monkeypatch.setenv("CALCSHEET_CONFIG", "placeholder")
    monkeypatch.delenv("CALCSHEET_CONFIG")
    (temp_workdir / "dot.yml").write_text("source_directory: ./data\n", encoding="utf-8")
    (temp_workdir / ".env").write_text("CALCSHEET_CONFIG=dot.yml\n", encoding="utf-8")
    assert main([]) == EXIT_SUCCESS_ALL


def test_inspect_data_writes_nothing(write_config: Path, takeoff_xlsx: Path, capsys):
    assert main(["--inspect-data"]) == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "FILE: tower.xlsx" in out
    assert "required_ok=True" in out
    assert "row[0]=" in out
    assert not (write_config.parent.parent / "output").exists()


def test_debug_flag(write_config: Path, clean_xlsx: Path, capsys):
    assert main(["--debug"]) == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG excavation:" in out
