import copy
import os
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml

CONFIG_PATH = "config/housing_config.yaml"
CONFIG_ENV_VAR = "HOUSING_CONFIG"

DEFAULTS: Dict[str, Any] = {
    "database": {"path": "housing_history.db"},
    "reports": {"price_rank_limit": 5},
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    },
    "ingestion": {"batch_size": 1000, "rejects_file": "rejected_records.csv"},
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@lru_cache
def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads the YAML config and layers it over DEFAULTS.

    Resolution order for the file: explicit argument, the HOUSING_CONFIG
    environment variable, then config/housing_config.yaml. A missing file
    is not an error; the defaults are used as-is.
    """
    path = config_path or os.environ.get(CONFIG_ENV_VAR, CONFIG_PATH)
    if not os.path.exists(path):
        return copy.deepcopy(DEFAULTS)
    with open(path, "r") as f:
        overrides = yaml.safe_load(f) or {}
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")
    return _merge(DEFAULTS, overrides)


def get_setting(section: str, key: str, config_path: Optional[str] = None) -> Any:
    return load_config(config_path)[section][key]
