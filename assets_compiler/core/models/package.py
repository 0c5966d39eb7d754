"""
Package model — one buildable unit of front-end code.

Built by the PackageFactory during discovery and owned by the
orchestrator for the duration of a run. Never persisted; the only
trace a run leaves is the lock marker file in the package directory.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from assets_compiler.core.config.package_config import PackageConfig, PrecompilationConfig


class Package(BaseModel):
    """A package with its resolved build configuration."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str                       # absolute install directory
    config: PackageConfig
    version: str | None = None      # pretty version from installed metadata
    reference: str | None = None    # source/dist reference (commit hash)
    is_root: bool = False

    @property
    def is_install(self) -> bool:
        return self.config.is_install

    @property
    def is_update(self) -> bool:
        return self.config.is_update

    @property
    def script(self) -> list[str]:
        return list(self.config.script)

    @property
    def env(self) -> dict[str, str]:
        return dict(self.config.env)

    @property
    def precompilation(self) -> list[PrecompilationConfig]:
        return list(self.config.precompilation)

    @property
    def has_work(self) -> bool:
        return self.config.has_work
