"""Configuration management for questcal."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.commitments import DEFAULT_TASK_MINUTES
from .core.interval import ActivityWindow

logger = logging.getLogger(__name__)

QUESTCAL_HOME = Path(os.environ.get("QUESTCAL_HOME", Path.home() / "questcal"))
CONFIG_FILE = QUESTCAL_HOME / "config" / "questcal.conf"
DATA_DIR = QUESTCAL_HOME / "data"


@dataclass
class Config:
    """questcal configuration."""

    default_task_minutes: int = DEFAULT_TASK_MINUTES
    activity_window: ActivityWindow = field(default_factory=ActivityWindow)
    search_days: int = 7
    max_suggestions: int = 5
    conflict_tolerance_minutes: int = 0
    snapshot_file: str = str(DATA_DIR / "snapshot.json")


def _parse_int(key: str, value: str, default: int, minimum: int = 0) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default
    if parsed < minimum:
        logger.warning(f"{key.upper()} must be at least {minimum}, using {default}")
        return default
    return parsed


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from questcal.conf file."""
    config = Config()
    config_file = Path(path) if path else CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value.startswith('"') or value.startswith("'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "default_task_minutes":
                config.default_task_minutes = _parse_int(key, value, config.default_task_minutes, minimum=1)
            case "activity_window":
                try:
                    config.activity_window = ActivityWindow.parse(value)
                except ValueError as e:
                    logger.warning(f"Invalid ACTIVITY_WINDOW {value!r}: {e}")
            case "search_days":
                config.search_days = _parse_int(key, value, config.search_days, minimum=1)
            case "max_suggestions":
                config.max_suggestions = _parse_int(key, value, config.max_suggestions, minimum=1)
            case "conflict_tolerance_minutes":
                config.conflict_tolerance_minutes = _parse_int(key, value, config.conflict_tolerance_minutes)
            case "snapshot_file":
                config.snapshot_file = value
            case _:
                logger.debug(f"Ignoring unknown config key {key.upper()}")

    return config
