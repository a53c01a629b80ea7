"""Processing parameters from optional JSON config files."""

import json
import logging
from dataclasses import asdict
from pathlib import Path

from activity_analyzer.models import ProcessingParams

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "activity-analyzer"
CONFIG_PATH = CONFIG_DIR / "activity-analyzer.json"
LOCAL_CONFIG_PATH = Path("activity-analyzer.json")

# Default values for processing parameters
DEFAULTS = asdict(ProcessingParams())

_INT_KEYS = {key for key, value in DEFAULTS.items() if isinstance(value, int)}


def load_config(paths: list[Path] | None = None) -> dict:
    """Load configuration from config files.

    Merges config from global and local files:
    1. ~/.config/activity-analyzer/activity-analyzer.json (global, loaded first)
    2. ./activity-analyzer.json (local, overrides global)

    Returns:
        Dict with merged config values, empty dict if no files exist.
    """
    config = {}
    for config_path in paths if paths is not None else [CONFIG_PATH, LOCAL_CONFIG_PATH]:
        if config_path.exists():
            try:
                with config_path.open() as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
                continue
    return config


def params_from_config(config: dict | None = None) -> ProcessingParams:
    """Build ProcessingParams from a config dict, falling back to DEFAULTS.

    Unknown keys are ignored. Pass None to read the config files.
    """
    if config is None:
        config = load_config()

    values = {}
    for key, default in DEFAULTS.items():
        value = config.get(key, default)
        values[key] = int(value) if key in _INT_KEYS else float(value)
    return ProcessingParams(**values)
