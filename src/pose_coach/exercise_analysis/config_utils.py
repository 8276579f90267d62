import json
import os
from typing import Any, Dict, Optional

from .errors import ConfigurationError

_DEFAULT_STABILITY = {
    "visibility_threshold": 0.6,
    "grace_period_ms": 1500,
    "velocity_threshold": 0.1,
}


def load_exercise_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load exercise config from JSON file."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "exercise_config.json")
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not load exercise config {config_path}: {e}") from e
    if not isinstance(config, dict):
        raise ConfigurationError(f"Exercise config {config_path} must be a JSON object")
    return config


def get_stability_settings(config: Dict[str, Any]) -> Dict[str, float]:
    settings = dict(_DEFAULT_STABILITY)
    settings.update(config.get("stability", {}))
    return settings


def get_exercise_thresholds(config: Dict[str, Any], exercise: str) -> Dict[str, float]:
    try:
        section = config["exercises"][exercise]
    except (KeyError, TypeError) as e:
        raise ConfigurationError(f"No configuration section for exercise '{exercise}'") from e
    thresholds = section.get("thresholds", {})
    for name, value in thresholds.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"Threshold '{exercise}.{name}' must be a number, got {value!r}")
    return dict(thresholds)
