"""
Configuration loader — reads the raw settings blocks of the root project
and of installed packages.

Settings live in one of two places, checked in this order:

    1. A dedicated file in the package directory:
       assets-compiler.yml / assets-compiler.yaml / assets-compiler.json
    2. The ``extra.composer-asset-compiler`` block of composer.json
       (or of the package entry in vendor/composer/installed.json)

YAML is parsed with ``yaml.safe_load``, which reads the JSON variant too.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

COMPOSER_FILE = "composer.json"
EXTRA_KEY = "composer-asset-compiler"
SETTINGS_FILES = ("assets-compiler.yml", "assets-compiler.yaml", "assets-compiler.json")


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def find_project_root(start_dir: Path | None = None) -> Path | None:
    """Search for composer.json starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        The directory holding composer.json, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        if (current / COMPOSER_FILE).is_file():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_composer_json(root: Path) -> dict[str, Any]:
    """Load the root composer.json.

    Raises:
        ConfigError: If the file is missing or not a JSON object.
    """
    path = root / COMPOSER_FILE
    if not path.is_file():
        raise ConfigError(f"No {COMPOSER_FILE} found in {root}.")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}, got {type(data).__name__}")

    return data


def load_settings_file(directory: Path) -> dict[str, Any] | None:
    """Load a dedicated settings file from ``directory``, if any.

    Returns:
        The settings mapping, or None when no settings file exists.

    Raises:
        ConfigError: If the file exists but is unreadable or not a mapping.
    """
    for filename in SETTINGS_FILES:
        path = directory / filename
        if not path.is_file():
            continue

        logger.debug("Loading settings from %s", path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")
        return data

    return None


def extra_settings(metadata: dict[str, Any]) -> dict[str, Any] | None:
    """Extract ``extra.composer-asset-compiler`` from composer metadata."""
    extra = metadata.get("extra")
    if not isinstance(extra, dict):
        return None
    settings = extra.get(EXTRA_KEY)
    if settings is None:
        return None
    if not isinstance(settings, dict):
        name = metadata.get("name", "<unknown>")
        logger.info("Ignoring non-mapping '%s' settings of %s", EXTRA_KEY, name)
        return None
    return settings


def load_root_settings(root: Path, composer: dict[str, Any] | None = None) -> dict[str, Any]:
    """Load the root settings block (dedicated file first, then composer.json)."""
    settings = load_settings_file(root)
    if settings is not None:
        return settings

    if composer is None:
        composer = load_composer_json(root)
    return extra_settings(composer) or {}
