"""
Settings loader for implicate (settings.yaml).

Usage:
    from implicate.settings import settings

    level = settings.logging.level
    tracer = settings.get_nested("tracing.tracer", "null")
"""

import logging
from pathlib import Path
from typing import Any, List

import yaml

logger = logging.getLogger(__name__)


# Path to the bundled settings file
SETTINGS_FILE = Path(__file__).parent / "settings.yaml"

# Defaults, used for anything the YAML file does not set
DEFAULTS = {
    "logging": {
        "level": "INFO",
        "format": "readable",
    },
    "tracing": {
        "tracer": "null",
        "history_size": 1000,
        "log_values": True,
    },
    "storage": {
        "layers": 1,
    },
}

TRACER_KINDS = ("null", "debug", "recording")
LOG_FORMATS = ("readable", "json")


class DotDict(dict):
    """Dict with attribute access: d.key instead of d['key']"""

    def __getattr__(self, key: str) -> Any:
        try:
            value = self[key]
            if isinstance(value, dict):
                return DotDict(value)
            return value
        except KeyError:
            raise AttributeError(f"Setting '{key}' not found")

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def get_nested(self, path: str, default: Any = None) -> Any:
        """Get a value by dotted path: 'tracing.tracer'"""
        keys = path.split('.')
        value = self
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge of two dicts (override wins)"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(filepath: Path = None) -> DotDict:
    """
    Load settings from a YAML file.

    Priority:
    1. Values from the YAML file
    2. DEFAULTS

    Args:
        filepath: Settings file (defaults to the bundled settings.yaml)

    Returns:
        DotDict with the merged settings
    """
    filepath = Path(filepath) if filepath else SETTINGS_FILE

    config = _deep_merge({}, DEFAULTS)

    if filepath.exists():
        with open(filepath, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        config = _deep_merge(config, yaml_config)
    else:
        logger.warning(f"Settings file not found: {filepath}, using defaults")

    return DotDict(config)


def validate_settings(settings: DotDict) -> List[str]:
    """
    Validate settings.

    Returns:
        List of errors (empty if everything is OK)
    """
    errors = []

    level = str(settings.get_nested("logging.level", "")).upper()
    if not isinstance(logging.getLevelName(level), int):
        errors.append(f"logging.level '{level}' is not a logging level")
    if settings.get_nested("logging.format") not in LOG_FORMATS:
        errors.append(f"logging.format must be one of {', '.join(LOG_FORMATS)}")

    if settings.get_nested("tracing.tracer") not in TRACER_KINDS:
        errors.append(f"tracing.tracer must be one of {', '.join(TRACER_KINDS)}")
    history_size = settings.get_nested("tracing.history_size")
    if not isinstance(history_size, int) or history_size < 1:
        errors.append("tracing.history_size must be >= 1")

    layers = settings.get_nested("storage.layers")
    if not isinstance(layers, int) or layers < 1:
        errors.append("storage.layers must be >= 1")

    return errors


# Global settings singleton, built by get_settings() on first use
_settings = None


def get_settings() -> DotDict:
    """Get the global settings (singleton)"""
    global _settings
    if _settings is None:
        _settings = load_settings()
        for err in validate_settings(_settings):
            logger.error(f"Invalid setting: {err}")
    return _settings


def reload_settings() -> DotDict:
    """Reload settings from the file"""
    global _settings
    _settings = None
    return get_settings()


# For convenient import: from implicate.settings import settings
# Loaded at import; reload_settings() does not rebind it, use get_settings()
settings = get_settings()
