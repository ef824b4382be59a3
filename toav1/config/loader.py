import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from .models import AppConfig


def load_config(config_path: Optional[Path]) -> AppConfig:
    """Loads YAML config and parses it into AppConfig Pydantic model.

    Without a path the built-in defaults are returned.
    """
    if config_path is None:
        return AppConfig()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return AppConfig(**data)


def apply_overrides(config: AppConfig, overrides: Dict[str, Dict[str, Any]]) -> AppConfig:
    """Returns a copy of config with per-section overrides applied.

    None values are ignored so unset CLI options keep the loaded value.
    Overridden sections are re-validated.
    """
    updates = {}
    for section, values in overrides.items():
        values = {k: v for k, v in values.items() if v is not None}
        if not values:
            continue
        current = getattr(config, section)
        merged = {**current.model_dump(), **values}
        updates[section] = type(current)(**merged)
    return config.model_copy(update=updates)
