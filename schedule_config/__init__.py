"""
schedule_config -- single public entrypoint for scheduling configuration.

Responsibility:
    Provides the one way to obtain scheduling configuration at runtime,
    ``get_active_config()``.  Services receive the resulting
    ``SchedulingConfig`` by injection; engines receive individual values
    as parameters.

Failure modes:
    - ``FileNotFoundError`` -- an explicit override path does not exist.
    - ``ValueError`` -- a value is out of range or unparseable.
"""

from __future__ import annotations

import logging
from pathlib import Path

from schedule_config.loader import load_scheduling_config
from schedule_config.schema import SchedulingConfig

_logger = logging.getLogger("schedule_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> SchedulingConfig:
    """
    Load the active scheduling configuration.

    Args:
        path: YAML file to load.  Defaults to the packaged ``defaults.yaml``.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = load_scheduling_config(config_path)
    _logger.info(
        "SCHEDULE_CONFIG_TRACE",
        extra={
            "config_path": str(config_path),
            "checksum": config.checksum,
            "hours_per_day": str(config.hours_per_day),
            "default_look_ahead_weeks": config.default_look_ahead_weeks,
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SchedulingConfig",
    "get_active_config",
]
