"""
Root configuration — the run-scoped settings of the root project.

Recognized keys of the root settings block::

    packages:          # ordered glob -> directive map
      "acme/*": true               # include, own settings (else defaults)
      "acme/legacy": false         # exclude
      "acme/theme-*": force-defaults
      "acme/special": {script: build}  # explicit settings
    defaults: {...}                # package-shaped settings
    auto-discover: true
    stop-on-failure: true
    wipe-node-modules: true        # true | false | force | glob(s)
    package-manager: yarn          # yarn | npm | {install, update, script}

Any package-level keys (``script``, ``dependencies``, ...) in the same
block describe the root package's own build.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from assets_compiler.core.config.env_resolver import EnvResolver
from assets_compiler.core.config.loader import ConfigError

logger = logging.getLogger(__name__)

ROOT_ONLY_KEYS = (
    "packages",
    "defaults",
    "auto-discover",
    "stop-on-failure",
    "wipe-node-modules",
    "package-manager",
)

WIPE_FORCE = "force"
NODE_MODULES = "node_modules"


class RootConfig(BaseModel):
    """Validated root settings. Insertion order of ``packages`` is preserved."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    packages: dict[str, Any] = Field(default_factory=dict)
    defaults: dict[str, Any] | None = None
    auto_discover: bool = Field(True, alias="auto-discover")
    stop_on_failure: bool = Field(True, alias="stop-on-failure")
    wipe_node_modules: bool | str | list[str] = Field(True, alias="wipe-node-modules")
    package_manager: str | dict[str, str] | None = Field(None, alias="package-manager")
    package_settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("packages", mode="before")
    @classmethod
    def _packages_mapping(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("'packages' must be a mapping of name patterns to directives")
        return value

    @field_validator("defaults", mode="before")
    @classmethod
    def _defaults_mapping(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, dict):
            raise ValueError("'defaults' must be a mapping")
        return value or None

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> RootConfig:
        """Build from a raw root settings block.

        Raises:
            ConfigError: If the block does not validate.
        """
        root_keys = {k: v for k, v in settings.items() if k in ROOT_ONLY_KEYS}
        package_keys = {k: v for k, v in settings.items() if k not in ROOT_ONLY_KEYS}
        try:
            return cls.model_validate({**root_keys, "package_settings": package_keys})
        except Exception as e:
            raise ConfigError(f"Invalid root configuration: {e}") from e

    @property
    def rules(self) -> list[tuple[str, Any]]:
        """Ordered (pattern, directive) pairs."""
        return list(self.packages.items())

    def wipe_allowed(self, package_path: str | Path, project_root: str | Path | None = None) -> bool:
        """Decide, before the build, whether node_modules may be wiped after it.

        ``True`` wipes only a node_modules directory the build itself
        created; ``force`` always wipes; glob patterns are matched against
        the package path (absolute, or relative to ``project_root``).
        """
        policy = self.wipe_node_modules
        path = Path(package_path)

        if policy is False:
            return False
        if policy is True:
            return not (path / NODE_MODULES).exists()
        if isinstance(policy, str) and policy.lower() == WIPE_FORCE:
            return True

        patterns = [policy] if isinstance(policy, str) else list(policy)
        candidates = [path.as_posix()]
        if project_root is not None:
            try:
                candidates.append(path.relative_to(Path(project_root)).as_posix())
            except ValueError:
                pass
        return any(
            fnmatch.fnmatchcase(candidate, pattern)
            for pattern in patterns
            for candidate in candidates
        )


def load_env_resolver(env: str | None, is_dev: bool) -> EnvResolver:
    """Build the EnvResolver for a run, honouring the env-var fallback."""
    resolver = EnvResolver(EnvResolver.resolve_env_name(env), is_dev)
    logger.debug("Environment: %r", resolver)
    return resolver
