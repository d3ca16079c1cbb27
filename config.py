import json
import os
from typing import Any, Dict

CONFIG_PATH = "config.json"

# Default configuration values
DEFAULT_CONFIG = {
    # Deezer application (https://developers.deezer.com/myapps)
    "deezer_app_id": "",
    "deezer_app_secret": "",
    "deezer_redirect_uri": "http://127.0.0.1:8888/callback",
    # Percent-encode the redirect URI in the authorize URL (legacy format leaves it raw).
    "deezer_encode_redirect_uri": False,
    "deezer_request_timeout": 30,
    "open_browser": True,
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "deezer_app_id": {"type": str, "required": True},
    "deezer_app_secret": {"type": str, "required": True, "secret": True},
    "deezer_redirect_uri": {"type": str, "required": True},
    "deezer_encode_redirect_uri": {"type": bool, "required": False},
    "deezer_request_timeout": {"type": (int, float), "required": False, "min": 1, "max": 300},
    "open_browser": {"type": bool, "required": False},
}


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from file, applying defaults for missing fields."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file {path} not found.")

    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)

    # Apply defaults for missing fields
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    return config


def save_config(config: Dict[str, Any], path: str = CONFIG_PATH) -> bool:
    """Save configuration to file."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        raise IOError(f"Failed to save config: {e}")


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key, rules in CONFIG_SCHEMA.items():
        # Check required fields
        if rules.get("required", False) and key not in config:
            errors.append(f"Missing required field: {key}")
            continue

        if key not in config:
            continue

        value = config[key]

        # bool is an int subclass; don't let True pass as a timeout.
        expected_type = rules.get("type")
        if expected_type and (not isinstance(value, expected_type) or (isinstance(value, bool) and expected_type is not bool)):
            type_names = expected_type.__name__ if not isinstance(expected_type, tuple) else "/".join(t.__name__ for t in expected_type)
            errors.append(f"Field '{key}' must be {type_names}, got {type(value).__name__}")
            continue

        if rules.get("required", False) and isinstance(value, str) and not value.strip():
            errors.append(f"Field '{key}' must not be empty")
            continue

        # Range check for numeric values
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if "min" in rules and value < rules["min"]:
                errors.append(f"Field '{key}' must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"Field '{key}' must be <= {rules['max']}, got {value}")

    return len(errors) == 0, errors


def update_config(key: str, value: Any, path: str = CONFIG_PATH) -> tuple[bool, str]:
    """
    Update a single config field with validation.
    Returns (success, message).
    """
    config = load_config(path)

    # Check if key is valid
    if key not in CONFIG_SCHEMA:
        return False, f"Unknown config key: {key}"

    # Create temporary config with new value
    test_config = config.copy()
    test_config[key] = value

    # Validate the change
    is_valid, errors = validate_config(test_config)
    if not is_valid:
        return False, f"Validation failed: {', '.join(errors)}"

    # Save the updated config
    config[key] = value
    save_config(config, path)

    shown = "********" if CONFIG_SCHEMA[key].get("secret") else value
    return True, f"Updated '{key}' to '{shown}'"
