"""
Configuration Loader (``schedule_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses its ``scheduling`` section into
the typed ``SchedulingConfig`` frozen dataclass.  Callers go through
``schedule_config.get_active_config()``; this module is its tooling.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or empty ``scheduling`` section  -> every key keeps its default.
* Out-of-range or unparseable values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from schedule_config.schema import SchedulingConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the parsed configuration mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _parse_decimal(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field_name} is not a number: {value!r}") from None


def parse_scheduling_config(data: dict[str, Any]) -> SchedulingConfig:
    """
    Parse a ``SchedulingConfig`` from a loaded YAML document.

    Keys absent from the ``scheduling`` section, or a document without
    that section, keep their dataclass defaults.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Configuration document must be a mapping, got {type(data).__name__}")
    section = data.get("scheduling") or {}
    if not isinstance(section, dict):
        raise ValueError("scheduling section must be a mapping")
    defaults = SchedulingConfig()
    return SchedulingConfig(
        hours_per_day=_parse_decimal(
            section.get("hours_per_day", defaults.hours_per_day), "hours_per_day"
        ),
        critical_float_tolerance=float(
            section.get("critical_float_tolerance", defaults.critical_float_tolerance)
        ),
        default_look_ahead_weeks=int(
            section.get("default_look_ahead_weeks", defaults.default_look_ahead_weeks)
        ),
        default_dependency_type=str(
            section.get("default_dependency_type", defaults.default_dependency_type)
        ),
        default_percent_complete_method=str(
            section.get(
                "default_percent_complete_method",
                defaults.default_percent_complete_method,
            )
        ),
        checksum=compute_checksum(section),
    )


def load_scheduling_config(path: Path) -> SchedulingConfig:
    """Load and parse a scheduling configuration file."""
    return parse_scheduling_config(load_yaml_file(path))
