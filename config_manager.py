# config_manager.py
import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Dict, Optional

from config import (CONFIG_ROOT, DEFAULT_PATTERNS, ENGINE_CONFIG_FILE,
                    MANUAL_CATEGORIES_FILE, PATTERNS_FILE, EngineConfig)
from models import Category

logger = logging.getLogger(__name__)

# Keys of engine.json; patterns and manual categories live in their own files
_SPLIT_FIELDS = {"patterns", "manual_categories"}
_TUPLE_FIELDS = {"work_hours", "off_hours"}


class ConfigError(Exception):
    """Raised when a configuration file is structurally invalid."""
    pass


# --- Generic Helper Functions ---

def _load_json_config(file_path: Path, default_data):
    """Load a JSON file, creating it with defaults if it doesn't exist."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.info(f"Config file {file_path} not found. Creating with default values.")
        _save_json_config(file_path, default_data)
        return default_data
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Error reading/parsing {file_path}: {e}. Returning defaults.")
        return default_data


def _save_json_config(file_path: Path, data):
    """Save data to a JSON file."""
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=4)
    except IOError as e:
        logger.error(f"Could not write to config file {file_path}: {e}")


# --- Validation ---

def validate_patterns(patterns) -> Dict[str, list]:
    """Checks the {"productive": [{"keywords": [...], "weight": n}], ...} shape."""
    if not isinstance(patterns, dict):
        raise ConfigError("Pattern tables must be an object keyed by category")
    cleaned = {}
    for name, entries in patterns.items():
        try:
            category = Category.from_value(name)
        except ValueError:
            raise ConfigError(f"Unknown category in pattern tables: {name!r}")
        if not isinstance(entries, list):
            raise ConfigError(f"Pattern table '{name}' must be a list")
        table = []
        for entry in entries:
            keywords = entry.get("keywords") if isinstance(entry, dict) else None
            weight = entry.get("weight") if isinstance(entry, dict) else None
            if not keywords or not isinstance(keywords, list):
                raise ConfigError(f"Pattern entry in '{name}' has no keywords: {entry!r}")
            if not isinstance(weight, (int, float)) or weight < 0:
                raise ConfigError(f"Pattern entry in '{name}' has an invalid weight: {entry!r}")
            table.append({"keywords": [str(k).lower() for k in keywords], "weight": weight})
        cleaned[category.value] = table
    return cleaned


def validate_manual_categories(mapping) -> Dict[str, str]:
    if not isinstance(mapping, dict):
        raise ConfigError("Manual categories must be an object of app -> category")
    cleaned = {}
    for app, value in mapping.items():
        try:
            cleaned[str(app)] = Category.from_value(value).value
        except ValueError:
            raise ConfigError(f"Unknown category for '{app}': {value!r}")
    return cleaned


#region ENGINE

def _engine_settings_defaults() -> dict:
    defaults = asdict(EngineConfig())
    for name in _SPLIT_FIELDS:
        defaults.pop(name)
    for name in _TUPLE_FIELDS:
        defaults[name] = list(defaults[name])
    return defaults


def load_engine_config(config_root: str = CONFIG_ROOT) -> EngineConfig:
    """Builds an EngineConfig from engine.json, patterns.json and manual_categories.json."""
    root = Path(config_root)
    settings = _load_json_config(root / ENGINE_CONFIG_FILE, _engine_settings_defaults())
    if not isinstance(settings, dict):
        raise ConfigError(f"{root / ENGINE_CONFIG_FILE} must contain an object")

    known = {f.name for f in fields(EngineConfig)} - _SPLIT_FIELDS
    kwargs = {}
    for key, value in settings.items():
        if key not in known:
            logger.warning(f"Ignoring unknown engine setting '{key}'")
            continue
        kwargs[key] = tuple(value) if key in _TUPLE_FIELDS else value

    kwargs["patterns"] = validate_patterns(_load_json_config(root / PATTERNS_FILE, DEFAULT_PATTERNS))
    kwargs["manual_categories"] = load_manual_categories(config_root)
    config = EngineConfig(**kwargs)
    logger.info(f"Loaded engine configuration from {root}")
    return config


def save_engine_config(config: EngineConfig, config_root: str = CONFIG_ROOT):
    root = Path(config_root)
    settings = asdict(config)
    patterns = settings.pop("patterns")
    manual = settings.pop("manual_categories")
    for name in _TUPLE_FIELDS:
        settings[name] = list(settings[name])
    _save_json_config(root / ENGINE_CONFIG_FILE, settings)
    _save_json_config(root / PATTERNS_FILE, validate_patterns(patterns))
    _save_json_config(root / MANUAL_CATEGORIES_FILE, validate_manual_categories(manual))

#endregion
#region MANUAL

# --- Manual category map CRUD ---

def load_manual_categories(config_root: str = CONFIG_ROOT) -> Dict[str, str]:
    path = Path(config_root) / MANUAL_CATEGORIES_FILE
    return validate_manual_categories(_load_json_config(path, {}))


def add_manual_category(app: str, category, config_root: str = CONFIG_ROOT) -> bool:
    """Adds or updates an app -> category override."""
    if not app:
        logger.warning("Cannot add a manual category for an empty app name.")
        return False
    mapping = load_manual_categories(config_root)
    mapping[app] = Category.from_value(category).value
    _save_json_config(Path(config_root) / MANUAL_CATEGORIES_FILE, mapping)
    logger.info(f"Manual category '{app}' -> '{mapping[app]}' saved.")
    return True


def remove_manual_category(app: str, config_root: str = CONFIG_ROOT) -> bool:
    mapping = load_manual_categories(config_root)
    if app not in mapping:
        logger.warning(f"Manual category for '{app}' not found.")
        return False
    del mapping[app]
    _save_json_config(Path(config_root) / MANUAL_CATEGORIES_FILE, mapping)
    logger.info(f"Manual category for '{app}' removed.")
    return True

#endregion
#region STATE

def load_state_file(path: str) -> Optional[dict]:
    """Reads a learned-state export written by save_state_file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Error reading learned state {path}: {e}")
        return None
    return data if isinstance(data, dict) else None


def save_state_file(path: str, state: dict):
    _save_json_config(Path(path), state)

#endregion
