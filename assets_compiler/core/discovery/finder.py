"""
Packages finder — builds the ordered set of packages to compile.

Flow:
    installed packages + root → matcher rules → PackageConfig → Package

Packages no rule mentions are picked up only when ``auto-discover`` is on
and they declare settings of their own. A package that a rule explicitly
includes but that ends up with no usable configuration is a
configuration error under ``stop-on-failure``, and skipped otherwise.
The same goes for a settings file that cannot be parsed; it is only read
once the rules have not excluded its package.

The root package goes through the same rules. With no rule naming it, it
is compiled only when the root settings carry package-level keys.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from assets_compiler.adapters.shell.filesystem import Filesystem
from assets_compiler.core.config.env_resolver import EnvResolver
from assets_compiler.core.config.loader import ConfigError
from assets_compiler.core.config.package_config import PackageConfig
from assets_compiler.core.config.root_config import RootConfig
from assets_compiler.core.discovery.matcher import (
    EXCLUDE,
    EXPLICIT,
    FORCE_DEFAULTS,
    INCLUDE,
    Match,
    PackageMatcher,
)
from assets_compiler.core.discovery.repository import InstalledRepository, RawPackage
from assets_compiler.core.models.package import Package

logger = logging.getLogger(__name__)


class PackageFactory:
    """Creates Package entities with normalized absolute paths."""

    def __init__(
        self,
        env_resolver: EnvResolver,
        filesystem: Filesystem,
        repository: InstalledRepository,
    ):
        self._env_resolver = env_resolver
        self._filesystem = filesystem
        self._repository = repository

    def create(self, raw: RawPackage, config: PackageConfig, is_root: bool = False) -> Package:
        path = raw.install_path if is_root else self._repository.install_path(raw)
        return Package(
            name=raw.name,
            path=self._filesystem.normalize_path(path),
            config=config,
            version=raw.version,
            reference=raw.reference,
            is_root=is_root,
        )


class PackagesFinder:
    """Applies root rules and configuration resolution to discovered packages."""

    def __init__(self, root_config: RootConfig, env_resolver: EnvResolver):
        self._root_config = root_config
        self._env_resolver = env_resolver
        self._matcher = PackageMatcher(root_config.rules)

    def find(
        self,
        repository: InstalledRepository,
        root: RawPackage,
        factory: PackageFactory,
        auto_discover: bool | None = None,
    ) -> dict[str, Package]:
        """Return included packages by name, in discovery order.

        Raises:
            ConfigError: An included package has no valid configuration
                or a broken settings file, and ``stop-on-failure`` is on.
        """
        if auto_discover is None:
            auto_discover = self._root_config.auto_discover

        found: dict[str, Package] = {}
        for raw in repository.packages():
            if raw.name == root.name:
                continue
            config = self._resolve(repository, raw, auto_discover)
            if config is not None:
                found[raw.name] = factory.create(raw, config)

        config = self._resolve_root(repository, root)
        if config is not None:
            found[root.name] = factory.create(root, config, is_root=True)

        logger.info("Found %d package(s) to process.", len(found))
        return found

    def _resolve(
        self,
        repository: InstalledRepository,
        raw: RawPackage,
        auto_discover: bool,
    ) -> PackageConfig | None:
        match = self._matcher.match(raw.name)

        if match is None:
            if not auto_discover:
                return None
            try:
                settings = repository.load_settings(raw)
            except ConfigError as e:
                return self._invalid(raw.name, str(e))
            if not settings:
                return None
            config = self._config_for(settings)
            if not config.is_valid:
                logger.info("Skipping '%s': its settings define nothing to do.", raw.name)
                return None
            return config

        return self._resolve_match(repository, raw, match)

    def _resolve_root(self, repository: InstalledRepository, root: RawPackage) -> PackageConfig | None:
        # root-level keys are not package settings
        root = replace(root, settings=dict(self._root_config.package_settings))
        match = self._matcher.match(root.name)

        if match is None:
            config = PackageConfig.for_raw_settings(root.settings or None, self._env_resolver)
            return config if config.is_valid else None

        return self._resolve_match(repository, root, match)

    def _resolve_match(
        self,
        repository: InstalledRepository,
        raw: RawPackage,
        match: Match,
    ) -> PackageConfig | None:
        if match.directive == EXCLUDE:
            logger.debug("'%s' excluded by pattern '%s'", raw.name, match.pattern)
            return None

        try:
            config = self._config_for_match(repository, raw, match)
        except ConfigError as e:
            return self._invalid(raw.name, str(e))
        if config is not None and config.is_valid:
            return config

        return self._invalid(raw.name, f"Could not find a valid configuration for package '{raw.name}'.")

    def _invalid(self, name: str, message: str) -> None:
        if self._root_config.stop_on_failure:
            raise ConfigError(message)
        logger.info("%s Skipping '%s'.", message, name)
        return None

    def _config_for_match(
        self,
        repository: InstalledRepository,
        raw: RawPackage,
        match: Match,
    ) -> PackageConfig | None:
        defaults = self._root_config.defaults

        if match.directive == FORCE_DEFAULTS:
            if not defaults:
                return None
            return PackageConfig.for_raw_settings(None, self._env_resolver, defaults)

        if match.directive == EXPLICIT:
            return self._config_for(match.settings)

        if match.directive == INCLUDE:
            settings = repository.load_settings(raw)
            if settings:
                return self._config_for(settings)
            if defaults:
                return PackageConfig.for_raw_settings(None, self._env_resolver, defaults)

        return None

    def _config_for(self, settings: dict[str, Any]) -> PackageConfig:
        return PackageConfig.for_raw_settings(
            settings, self._env_resolver, self._root_config.defaults
        )


def root_package(project_root: Path, composer: dict[str, Any], settings: dict[str, Any]) -> RawPackage:
    """Describe the root project as a RawPackage."""
    return RawPackage(
        name=str(composer.get("name") or "__root__"),
        install_path=project_root,
        settings=settings,
        version=composer.get("version"),
        metadata=composer,
    )
