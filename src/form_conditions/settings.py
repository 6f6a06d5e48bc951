"""
Settings loader for form_conditions (settings.yaml).

Usage:
    from form_conditions.settings import settings

    effect = settings.rules.effect
    level = settings.get_nested("logging.level", "INFO")
"""

import copy
import os
import yaml
from pathlib import Path
from typing import List, Any

from form_conditions.constants import Condition, Effect, Grouping, ValueType, coerce_enum


SETTINGS_FILE = Path(__file__).parent / "settings.yaml"
SETTINGS_ENV_VAR = "FORM_CONDITIONS_SETTINGS"

# Used when a key is missing from the YAML file
DEFAULTS = {
    "rules": {
        "condition": "value",
        "grouping": "AND",
        "effect": "slide",
        "effect_speed": 300,
        "value_type": "or",
    },
    "logging": {
        "level": "INFO",
        "log_evaluations": False,
    },
}


class DotDict(dict):
    """Settings section with attribute access: settings.rules.effect"""

    def __getattr__(self, key: str) -> Any:
        if key not in self:
            raise AttributeError(f"Setting '{key}' not found")
        value = self[key]
        return DotDict(value) if isinstance(value, dict) else value

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def get_nested(self, path: str, default: Any = None) -> Any:
        """Get a value by dotted path: 'logging.log_evaluations'"""
        node: Any = self
        for key in path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node


def _merge_into(target: dict, override: dict) -> None:
    # Sections merge key by key; scalars and lists from the file replace defaults
    for key, value in override.items():
        section = target.get(key)
        if isinstance(section, dict) and isinstance(value, dict):
            _merge_into(section, value)
        else:
            target[key] = value


def settings_path() -> Path:
    """Settings file in use: $FORM_CONDITIONS_SETTINGS or the packaged settings.yaml"""
    override = os.environ.get(SETTINGS_ENV_VAR)
    return Path(override) if override else SETTINGS_FILE


def load_settings(filepath: Path = None) -> DotDict:
    """
    Load settings, layering a YAML file over DEFAULTS.

    Args:
        filepath: Path to the settings file (settings_path() by default)

    Returns:
        DotDict with settings
    """
    filepath = Path(filepath) if filepath else settings_path()
    config = copy.deepcopy(DEFAULTS)

    if not filepath.exists():
        print(f"[settings] Settings file not found: {filepath}, using defaults")
        return DotDict(config)

    with open(filepath, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f) or {}

    if isinstance(document, dict):
        _merge_into(config, document)
    else:
        print(f"[settings] {filepath} must contain a mapping, using defaults")

    return DotDict(config)


def validate_settings(settings: DotDict) -> List[str]:
    """
    Validate settings.

    Returns:
        List of errors (empty if everything is OK)
    """
    errors = []
    rules = settings.rules

    checks = [
        ("condition", Condition),
        ("grouping", Grouping),
        ("effect", Effect),
        ("value_type", ValueType),
    ]
    for key, enum_cls in checks:
        try:
            coerce_enum(enum_cls, rules.get(key))
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            errors.append(f"rules.{key} must be one of: {allowed}")

    speed = rules.get("effect_speed")
    if not isinstance(speed, int) or speed < 0:
        errors.append("rules.effect_speed must be a non-negative integer")

    if not isinstance(settings.logging.get("level"), str):
        errors.append("logging.level must be a string")

    return errors


_settings = None


def get_settings() -> DotDict:
    """Get global settings (singleton)"""
    global _settings
    if _settings is None:
        _settings = load_settings()
        errors = validate_settings(_settings)
        if errors:
            print("[settings] Invalid settings:")
            for err in errors:
                print(f"  - {err}")
    return _settings


def reload_settings() -> DotDict:
    """Reload settings from file"""
    global _settings
    _settings = None
    return get_settings()


settings = get_settings()
