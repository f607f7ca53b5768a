"""YAML configuration loader with environment variable overrides.

# --- CONFIGURATION HIERARCHY ---------------------------------------------
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  -- Static defaults checked into the repo
#   2. .env file           -- Local developer overrides (not committed)
#   3. Environment vars    -- Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the values the
# environment actually sets on top:
#   base      = {"search": {"rrf_k": 60, "backend_timeout_seconds": 10}}
#   overrides = {"search": {"backend_timeout_seconds": 2.5}}
#   result    = {"search": {"rrf_k": 60, "backend_timeout_seconds": 2.5}}
# -------------------------------------------------------------------------
"""

from pathlib import Path
from typing import Any

import yaml

from clausefinder.config.settings import Settings
from clausefinder.utils.errors import ConfigurationError


def load_config(path: str | None = None, settings: Settings | None = None) -> dict[str, Any]:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  Defaults to
              ``settings.config_path``.  A missing file yields an empty base.
        settings: Settings instance to read overrides from.  A fresh one is
                  built from the environment when omitted.

    Returns:
        Configuration dictionary with ``app``, ``logging``, ``ingestion``,
        ``chunking``, ``ocr`` and ``search`` sections.

    Raises:
        ConfigurationError: If the YAML file cannot be parsed or is not a mapping.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.config_path)

    yaml_config: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigurationError(message=f"{config_path} must contain a mapping at top level")
        yaml_config = loaded

    for section in ("app", "logging", "ingestion", "chunking", "ocr", "search"):
        if not isinstance(yaml_config.get(section), dict):
            yaml_config[section] = {}

    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "logging": {
            "level": settings.log_level,
        },
        "ocr": {
            "endpoint": settings.llm_ocr_endpoint or None,
            "api_key": settings.llm_ocr_api_key or None,
            "timeout_seconds": settings.llm_ocr_timeout_seconds,
        },
        "ingestion": {
            "max_workers": settings.ingest_max_workers,
        },
        "search": {
            "backend_timeout_seconds": settings.search_backend_timeout_seconds,
            "degrade_on_backend_failure": settings.search_degrade_on_backend_failure,
        },
    }

    _deep_merge(yaml_config, _drop_unset(env_overrides))
    yaml_config["app"].setdefault("env", "development")
    yaml_config["logging"].setdefault("level", "INFO")
    return yaml_config


def _drop_unset(overrides: dict) -> dict:
    """Return *overrides* without ``None`` leaves (values the environment does not set)."""
    pruned: dict = {}
    for key, value in overrides.items():
        if isinstance(value, dict):
            pruned[key] = _drop_unset(value)
        elif value is not None:
            pruned[key] = value
    return pruned


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
