"""
Installed repository — the packages Composer has installed.

Reads ``<vendor-dir>/composer/installed.json`` in both layouts:
Composer 1 (a bare list) and Composer 2 (``{"packages": [...]}``).
Install paths come from ``install-path`` (relative to the
``vendor/composer`` directory) or default to ``<vendor-dir>/<name>``.
Package settings are only read on demand, once a package is known to be
wanted.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from assets_compiler.core.config.loader import ConfigError, extra_settings, load_settings_file

logger = logging.getLogger(__name__)

DEFAULT_VENDOR_DIR = "vendor"
INSTALLED_FILE = Path("composer") / "installed.json"


@dataclass
class RawPackage:
    """Package metadata as found in the repository, before resolution."""

    name: str
    install_path: Path
    settings: dict[str, Any] | None = None
    version: str | None = None
    reference: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class InstalledRepository:
    """Enumerates installed packages of a Composer project."""

    def __init__(self, project_root: Path, composer: dict[str, Any] | None = None):
        self._root = project_root
        self._composer = composer or {}
        self._packages: list[RawPackage] | None = None

    @property
    def vendor_dir(self) -> Path:
        config = self._composer.get("config")
        vendor = DEFAULT_VENDOR_DIR
        if isinstance(config, dict) and isinstance(config.get("vendor-dir"), str):
            vendor = config["vendor-dir"]
        path = Path(vendor)
        return path if path.is_absolute() else self._root / path

    def packages(self) -> list[RawPackage]:
        if self._packages is None:
            self._packages = self._load()
        return list(self._packages)

    def install_path(self, package: RawPackage) -> Path:
        """Resolve the absolute install path of ``package``."""
        return package.install_path.resolve()

    def load_settings(self, package: RawPackage) -> dict[str, Any] | None:
        """Read the own settings of ``package``: settings file first, then ``extra``.

        Raises:
            ConfigError: The package ships a settings file that cannot be parsed.
        """
        if package.settings is None:
            settings = None
            if package.install_path.is_dir():
                settings = load_settings_file(package.install_path)
            if settings is None:
                settings = extra_settings(package.metadata)
            package.settings = settings
        return package.settings

    def _load(self) -> list[RawPackage]:
        installed = self.vendor_dir / INSTALLED_FILE
        if not installed.is_file():
            logger.info("No %s found, only the root package is visible.", installed)
            return []

        try:
            data = json.loads(installed.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read installed packages from {installed}: {e}") from e

        entries = data.get("packages", []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ConfigError(f"Unexpected layout of {installed}")

        packages = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name"):
                continue
            packages.append(self._raw_package(entry, installed.parent))

        logger.debug("Found %d installed packages", len(packages))
        return packages

    def _raw_package(self, entry: dict[str, Any], composer_dir: Path) -> RawPackage:
        name = str(entry["name"])
        install_path = entry.get("install-path")
        if isinstance(install_path, str) and install_path:
            path = composer_dir / install_path
        else:
            path = self.vendor_dir / name

        return RawPackage(
            name=name,
            install_path=path,
            version=entry.get("version"),
            reference=_reference(entry),
            metadata=entry,
        )


def _reference(entry: dict[str, Any]) -> str | None:
    for key in ("source", "dist"):
        info = entry.get(key)
        if isinstance(info, dict) and info.get("reference"):
            return str(info["reference"])
    return None
