from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("tasktrack.config.yaml")
DEFAULT_SQLITE_PATH = "tasktrack.db"
DEFAULT_LOG_LEVEL = "INFO"


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load tasktrack configuration from YAML.

    Args:
        path: Optional path to the config file. Defaults to tasktrack.config.yaml

    Returns:
        Config dictionary (sections: database, logging, query)

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    for section in ("database", "logging", "query"):
        value = config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Config section '{section}' must be a dictionary")

    default_limit = (config.get("query") or {}).get("default_limit")
    if default_limit is not None and (not isinstance(default_limit, int) or default_limit < 1):
        raise ValueError("Config 'query.default_limit' must be a positive integer")

    return config


def load_config_or_default(path: Path | None = None) -> Dict[str, Any]:
    """Load config, falling back to an empty config when the default file is absent.

    An explicitly given path must exist.
    """
    if path is None and not DEFAULT_CONFIG_PATH.exists():
        return {}
    return load_config(path)


def get_sqlite_path(config: Dict[str, Any]) -> str:
    return (config.get("database") or {}).get("sqlite_path") or DEFAULT_SQLITE_PATH


def get_log_level(config: Dict[str, Any]) -> str:
    return str((config.get("logging") or {}).get("level") or DEFAULT_LOG_LEVEL)


def get_default_limit(config: Dict[str, Any]) -> Optional[int]:
    return (config.get("query") or {}).get("default_limit")
