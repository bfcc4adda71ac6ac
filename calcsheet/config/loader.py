from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from calcsheet.services.context import SECTION_ORDER, EngineSettings

"""Config loader.

Responsibilities:
- Load YAML config (default config/calcsheet.yml)
- Validate it against config_schema.json shipped next to this module
- Apply defaults (output_directory=./output, header_row=0, first sheet)
- Reject section keys the engine does not know
"""

__all__ = [
    "SCHEMA_PATH",
    "ConfigError",
    "CalcSheetConfig",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"

DEFAULT_OUTPUT_DIRECTORY = "./output"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class CalcSheetConfig:
    source_directory: str
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    sheet_name: str | None = None  # None: first sheet of each workbook
    header_row: int = 0
    keep_na_strings: list[str] | None = None  # cell texts pandas must not turn into NaN
    settings: EngineSettings = field(default_factory=EngineSettings)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation (missing keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _engine_settings(data: dict[str, Any]) -> EngineSettings:
    labels = data.get("estimate_labels") or {}
    disabled = data.get("disabled_sections") or []
    unknown = sorted((set(labels) | set(disabled)) - set(SECTION_ORDER))
    if unknown:
        raise ConfigError(
            f"unknown section key(s): {', '.join(unknown)} (expected one of {', '.join(SECTION_ORDER)})"
        )
    settings = EngineSettings(disabled_sections=frozenset(disabled))
    if labels:
        merged = dict(settings.estimate_labels)
        merged.update({key: tuple(values) for key, values in labels.items()})
        settings = EngineSettings(estimate_labels=merged, disabled_sections=frozenset(disabled))
    return settings


def load_config(path: Path) -> CalcSheetConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    return CalcSheetConfig(
        source_directory=data["source_directory"],
        output_directory=data.get("output_directory", DEFAULT_OUTPUT_DIRECTORY),
        sheet_name=data.get("sheet_name"),
        header_row=data.get("header_row", 0),
        keep_na_strings=data.get("keep_na_strings"),
        settings=_engine_settings(data),
    )
