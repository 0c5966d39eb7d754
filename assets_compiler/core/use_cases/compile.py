"""
Compile use case — the full vertical slice from CLI flags to a report.

    load composer.json + settings → discover packages → pick package manager
    → run the orchestrator (in strict mode) → CompileReport

Configuration errors end the run before any package is touched and are
reported through ``CompileReport.error``.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from assets_compiler.adapters.registry import AdapterRegistry
from assets_compiler.adapters.shell.command import ProcessExecutor
from assets_compiler.adapters.shell.filesystem import Filesystem
from assets_compiler.core.config.env_resolver import EnvResolver
from assets_compiler.core.config.loader import (
    ConfigError,
    find_project_root,
    load_composer_json,
    load_root_settings,
)
from assets_compiler.core.config.root_config import RootConfig, load_env_resolver
from assets_compiler.core.discovery.finder import PackageFactory, PackagesFinder, root_package
from assets_compiler.core.discovery.repository import InstalledRepository
from assets_compiler.core.engine.commands import Commands
from assets_compiler.core.engine.orchestrator import Orchestrator
from assets_compiler.core.engine.precompilation import PreCompilationHandler
from assets_compiler.core.models.package import Package
from assets_compiler.core.models.report import CompileReport
from assets_compiler.core.persistence.locker import Locker
from assets_compiler.core.reliability.strict_mode import strict_mode

logger = logging.getLogger(__name__)


@dataclass
class Discovery:
    """Everything known about a project after package discovery."""

    project_root: Path
    root_config: RootConfig
    env_resolver: EnvResolver
    packages: dict[str, Package] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_root": str(self.project_root),
            "environment": self.env_resolver.env(),
            "dev": self.env_resolver.is_dev(),
            "packages": [
                {
                    "name": p.name,
                    "path": p.path,
                    "version": p.version,
                    "dependencies": p.config.dependencies,
                    "script": p.script,
                    "precompiled": [c.adapter for c in p.precompilation],
                }
                for p in self.packages.values()
            ],
        }


def discover_packages(
    project_root: Path | None = None,
    env: str | None = None,
    is_dev: bool = True,
) -> Discovery:
    """Load configuration and resolve the ordered build set.

    Raises:
        ConfigError: On missing/invalid configuration or an explicitly
            included package without a valid configuration.
    """
    root = project_root or find_project_root()
    if root is None:
        raise ConfigError("No composer.json found. Run from a Composer project or pass --root.")
    root = root.resolve()

    composer = load_composer_json(root)
    settings = load_root_settings(root, composer)
    root_config = RootConfig.from_settings(settings)
    env_resolver = load_env_resolver(env, is_dev)

    filesystem = Filesystem()
    repository = InstalledRepository(root, composer)
    factory = PackageFactory(env_resolver, filesystem, repository)
    finder = PackagesFinder(root_config, env_resolver)

    packages = finder.find(repository, root_package(root, composer, settings), factory)
    return Discovery(root, root_config, env_resolver, packages)


def compile_assets(
    project_root: Path | None = None,
    env: str | None = None,
    is_dev: bool = True,
    registry: AdapterRegistry | None = None,
    executor: ProcessExecutor | None = None,
    which: Callable[[str], str | None] = shutil.which,
    status_sink: Callable[[str], None] | None = None,
) -> CompileReport:
    """Compile assets of every discovered package.

    Never raises for configuration or package problems; inspect
    ``report.error`` and ``report.all_ok``.
    """
    report = CompileReport()

    with strict_mode():
        try:
            discovery = discover_packages(project_root, env, is_dev)
            report.environment = discovery.env_resolver.env()

            packages = list(discovery.packages.values())
            if not packages:
                logger.info("Nothing to process.")
                return report

            commands = Commands.discover(
                discovery.project_root,
                discovery.root_config.package_manager,
                which=which,
            )
            if not commands.is_valid():
                raise ConfigError(
                    "Could not find a valid package manager. "
                    "Make sure either Yarn or npm are installed."
                )

            orchestrator = Orchestrator(
                root_config=discovery.root_config,
                commands=commands,
                executor=executor or ProcessExecutor(),
                locker=Locker(report.environment),
                precompilation=PreCompilationHandler(registry or AdapterRegistry.default()),
                filesystem=Filesystem(),
                env=report.environment,
                project_root=str(discovery.project_root),
                status_sink=status_sink,
            )
            run = orchestrator.run(packages)
            report.packages = run.packages
            report.stopped_early = run.stopped_early

        except ConfigError as e:
            report.error = str(e)
            logger.info("Configuration error", exc_info=True)
        except Exception as e:
            report.error = f"Assets compilation stopped: {e}"
            logger.info("Unexpected error", exc_info=True)

    if not report.error and not report.all_ok:
        report.error = "Assets compilation stopped due to failure." if report.stopped_early \
            else "Assets compilation finished with failures."

    return report
