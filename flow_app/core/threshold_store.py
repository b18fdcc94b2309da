"""Load and save aging threshold configuration as YAML (with fallbacks)."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Protocol

import yaml

from .config import DEFAULT_THRESHOLDS, THRESHOLD_CONFIG_PATH
from .models import AgingThresholdConfig

logger = logging.getLogger(__name__)

# Stored key -> dataclass attribute; stored files keep the dashboard's camelCase keys
CONFIG_KEYS: dict[str, str] = {
    "warningThreshold": "warning_threshold",
    "warningUnit": "warning_unit",
    "criticalThreshold": "critical_threshold",
    "criticalUnit": "critical_unit",
    "useAutoCalculation": "use_auto_calculation",
    "autoCalcPercentileWarning": "auto_calc_percentile_warning",
    "autoCalcPercentileCritical": "auto_calc_percentile_critical",
}


class ThresholdConfigStore(Protocol):
    def load(self) -> AgingThresholdConfig: ...

    def save(self, config: AgingThresholdConfig) -> Path: ...


def threshold_config_to_dict(config: AgingThresholdConfig) -> dict[str, Any]:
    return {key: getattr(config, attr) for key, attr in CONFIG_KEYS.items()}


def threshold_config_from_dict(data: dict[str, Any]) -> AgingThresholdConfig:
    """Merge stored values over DEFAULT_THRESHOLDS.

    Accepts both camelCase and snake_case keys; unknown keys are ignored.
    """
    attrs = {f.name for f in fields(AgingThresholdConfig)}
    overrides: dict[str, Any] = {}
    for key, value in data.items():
        attr = CONFIG_KEYS.get(key, key)
        if attr in attrs and value is not None:
            overrides[attr] = value
    return replace(DEFAULT_THRESHOLDS, **overrides)


def load_threshold_config(path: str | Path | None = None) -> AgingThresholdConfig:
    yaml_path = Path(path or THRESHOLD_CONFIG_PATH)
    if not yaml_path.exists():
        return replace(DEFAULT_THRESHOLDS)
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"expected a mapping, got {type(data).__name__}")
        return threshold_config_from_dict(data)
    except (OSError, yaml.YAMLError, TypeError, ValueError) as exc:
        logger.warning("Failed to load threshold config from %s: %s", yaml_path, exc)
        return replace(DEFAULT_THRESHOLDS)


def save_threshold_config(config: AgingThresholdConfig, path: str | Path | None = None) -> Path:
    yaml_path = Path(path or THRESHOLD_CONFIG_PATH)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)
    yaml_path.write_text(yaml.safe_dump(threshold_config_to_dict(config), sort_keys=False))
    logger.debug("Saved threshold config to %s", yaml_path)
    return yaml_path


class ThresholdStore:
    """File-backed threshold persistence handed to callers that need it."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or THRESHOLD_CONFIG_PATH)

    def load(self) -> AgingThresholdConfig:
        return load_threshold_config(self.path)

    def save(self, config: AgingThresholdConfig) -> Path:
        return save_threshold_config(config, self.path)
