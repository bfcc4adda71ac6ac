from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from calcsheet.config.loader import CalcSheetConfig, ConfigError, load_config
from calcsheet.excel.reader import InputReadError, SheetHeaderError, read_raw_input, scan_input_files
from calcsheet.logging.init import log_summary, setup_logging
from calcsheet.models.raw_input import HeaderIndex
from calcsheet.services.orchestrator import ProcessingError, process_all
from calcsheet.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (python-dotenv), then the YAML config
- scan the source directory for .xlsx / .csv take-off extracts (non-recursive)
- write one <stem>.calc.json per input and print the SUMMARY line

Exit codes: 0 all inputs processed with no unused rows, 2 some input failed or
left rows for review, 1 fatal (config or source directory).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/calcsheet.yml")
CONFIG_ENV_VAR = "CALCSHEET_CONFIG"
INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="calcsheet", description="Take-off extract -> calculation sheet")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows of each input then exit")
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _inspect_data(cfg: CalcSheetConfig) -> int:
    directory = Path(cfg.source_directory)
    files = scan_input_files(directory)
    if not files:
        print("inspect: no .xlsx / .csv files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            raw = read_raw_input(f, cfg.sheet_name, cfg.header_row, cfg.keep_na_strings)
        except (InputReadError, SheetHeaderError) as e:
            print(f"  read_error: {e}")
            continue
        header = HeaderIndex.resolve(raw.headers)
        print(f"  headers={raw.headers}")
        print(f"  resolved={header.to_dict()} required_ok={header.has_required}")
        for idx, row in enumerate(raw.rows[:INSPECT_SAMPLE_ROWS]):
            safe = [v.isoformat() if hasattr(v, "isoformat") else v for v in row]
            print(f"    row[{idx}]={safe}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None reads sys.argv; an explicit [] must not pick up the test runner's arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    config_path = _config_path(args)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.is_dir():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing files from: {directory}")
    try:
        result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary adds the SUMMARY label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.needs_review:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
