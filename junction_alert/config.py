import os
from copy import deepcopy
from pathlib import Path

import yaml

CONFIG_ENV = "JUNCTION_ALERT_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

# Defaults
DEFAULTS = {
    "query": {
        "half_size_m": 250.0,
    },
    "selector": {
        "road_classes": [
            "motorway", "trunk", "primary", "secondary", "tertiary",
            "street", "path", "pedestrian", "residential", "minor",
        ],
    },
    "reduction": {
        "max_features": 600,
        "max_lines": 120,
        "simplify_tolerance": 0.0005,
    },
    "engine": {
        "bucket_digits": 6,
        "dedup_tolerance_m": 5.0,
        "proximity_tolerance_m": 10.0,
        "min_branch_sources": 3,
        "direction_line_tolerance_m": 3.0,
        "direction_bin_deg": 60.0,
    },
    "scheduler": {
        "min_interval_s": 2.0,
    },
    "notifier": {
        "cooldown_s": 30.0,
        "reset_distance_m": 100.0,
        "key_digits": 5,
    },
    "storage": {
        "path": "outputs/junction_alert_store.json",
    },
    "logging": {
        "level": "INFO",
    },
}


def _merge(base: dict, override: dict) -> dict:
    out = deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


# Purpose: Load the YAML configuration and merge it over the built-in defaults.
# Inputs:
# - path (str | Path | None): Config file. Falls back to $JUNCTION_ALERT_CONFIG, then config.yaml at the repo root.
# Outputs:
# - dict: Complete configuration; a missing file yields the defaults unchanged.
def load_config(path=None) -> dict:
    path = Path(path or os.getenv(CONFIG_ENV) or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return deepcopy(DEFAULTS)
    with open(path, "r") as f:
        loaded = yaml.safe_load(f) or {}
    return _merge(DEFAULTS, loaded)


CONFIG = load_config()
