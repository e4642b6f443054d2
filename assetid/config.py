"""Config loader with optional overrides for node credentials/local settings."""
from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULTS: Dict[str, Any] = {
    "network": {
        "rpc_nodes": [],
        "retry": 3,
        "retry_wait": 1,
        "timeout": 10,
        "rate_limit_per_sec": None,
    },
    "resolver": {"fetch_previous_output": True},
    "logging": {"level": "INFO", "file": None},
}


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open() as handle:
        return yaml.safe_load(handle) or {}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = deepcopy(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def with_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    return _deep_merge(DEFAULTS, config)


def load_config(base_path: str = "config.yaml", local_path: Optional[str] = None) -> Dict[str, Any]:
    base_file = Path(base_path)
    if not base_file.exists():
        raise FileNotFoundError(f"Config file not found: {base_file}")
    config = _read_yaml(base_file)

    if local_path:
        local_file = Path(local_path)
        if local_file.exists():
            config = _deep_merge(config, _read_yaml(local_file))
    return with_defaults(config)


__all__ = ["DEFAULTS", "load_config", "with_defaults"]
