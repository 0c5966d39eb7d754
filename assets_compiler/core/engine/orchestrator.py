"""
Orchestrator — the per-package compile pipeline.

Flow per package:
    lock check → pre-compilation → dependencies → scripts → wipe → lock

Packages are processed one at a time in discovery order. A failing
package is recorded and, with ``stop-on-failure``, ends dispatching.
Either way the run fails if any package failed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from assets_compiler.adapters.shell.command import OutputSink, ProcessExecutor, log_sink
from assets_compiler.adapters.shell.filesystem import Filesystem
from assets_compiler.core.config.root_config import NODE_MODULES, RootConfig
from assets_compiler.core.engine.commands import Commands
from assets_compiler.core.engine.placeholders import Placeholders
from assets_compiler.core.engine.precompilation import PreCompilationHandler
from assets_compiler.core.models.package import Package
from assets_compiler.core.models.report import CompileReport, PackageReport, StepResult
from assets_compiler.core.persistence.locker import Locker

logger = logging.getLogger(__name__)

FAILED_DEPENDENCIES = "failed dependency installation"
FAILED_SCRIPT = "failed script execution"
FAILED_WIPE = "failed node_modules wiping"


class Orchestrator:
    """Drives every package of a run through the compile pipeline."""

    def __init__(
        self,
        root_config: RootConfig,
        commands: Commands,
        executor: ProcessExecutor,
        locker: Locker,
        precompilation: PreCompilationHandler,
        filesystem: Filesystem,
        env: str = "",
        project_root: str | None = None,
        output_sink: OutputSink = log_sink,
        status_sink: Callable[[str], None] | None = None,
    ):
        self._root_config = root_config
        self._commands = commands
        self._executor = executor
        self._locker = locker
        self._precompilation = precompilation
        self._filesystem = filesystem
        self._env = env
        self._project_root = project_root
        self._sink = output_sink
        self._status = status_sink or logger.info

    def run(self, packages: list[Package]) -> CompileReport:
        report = CompileReport(environment=self._env)

        for package in packages:
            result = self.process(package)
            report.packages.append(result)

            if not result.ok and self._root_config.stop_on_failure:
                remaining = len(packages) - len(report.packages)
                if remaining:
                    logger.warning("Stopping: %d package(s) not processed.", remaining)
                    report.stopped_early = True
                break

        return report

    def process(self, package: Package) -> PackageReport:
        """Run the pipeline for one package. Never raises."""
        report = PackageReport(name=package.name, path=package.path)

        try:
            self._process(package, report)
        except Exception as e:
            report.state = "failed"
            report.failures.append(f"unexpected error: {e}")
            logger.info("  %s", e, exc_info=True)

        if report.ok:
            if report.state != "skipped":
                self._status(f"  Processing of '{package.name}' done.")
        else:
            lines = [f"  Processing of '{package.name}' terminated with errors:"]
            lines.extend(f"   - {reason}" for reason in report.failures)
            logger.error("\n".join(lines))

        return report

    def _process(self, package: Package, report: PackageReport) -> None:
        name = package.name

        if self._locker.is_locked(package):
            logger.info("Skipping '%s' because already compiled.", name)
            report.state = "skipped"
            return

        self._status(f"Start processing '{name}'...")

        lock_hash = self._locker.hash_for(package) or ""
        placeholders = Placeholders.for_package(package, self._env, lock_hash)

        if package.precompilation and self._precompilation.try_precompile(
            package, placeholders, lock_hash
        ):
            report.state = "precompiled"
            report.record(self._locker.lock(package))
            return

        should_wipe = self._root_config.wipe_allowed(package.path, self._project_root)

        deps = self._do_dependencies(package)
        report.record(deps)

        if deps is None or deps.ok:
            report.record(self._do_scripts(package, placeholders))

        if not report.ok:
            return

        if should_wipe:
            report.record(self._wipe_node_modules(package.path))

        report.record(self._locker.lock(package))

    def _do_dependencies(self, package: Package) -> StepResult | None:
        if package.is_update:
            logger.info("  - updating...")
            command = self._commands.update_cmd()
        elif package.is_install:
            logger.info("  - installing...")
            command = self._commands.install_cmd()
        else:
            return None

        exit_code = self._executor.execute(command, self._sink, package.path, package.env)
        if exit_code == 0:
            logger.info("    success!")
            return StepResult.success()

        logger.info("    failed! (exit code %d)", exit_code)
        return StepResult.error(FAILED_DEPENDENCIES)

    def _do_scripts(self, package: Package, placeholders: Placeholders) -> StepResult | None:
        scripts = package.script
        if not scripts:
            return None

        done = 0
        for script in scripts:
            command = self._commands.script_cmd(script, placeholders, package.env)
            logger.info("  - executing '%s'...", command)
            exit_code = self._executor.execute(command, self._sink, package.path, package.env)
            if exit_code == 0:
                logger.info("    success!")
                done += 1
            else:
                logger.info("    failed! (exit code %d)", exit_code)

        if done == len(scripts):
            return StepResult.success()
        return StepResult.error(FAILED_SCRIPT)

    def _wipe_node_modules(self, base_dir: str) -> StepResult | None:
        directory = f"{self._filesystem.normalize_path(base_dir)}/{NODE_MODULES}"
        if not self._filesystem.is_dir(directory):
            logger.info("  - '%s' not found, nothing to wipe.", directory)
            return None

        logger.info("  - wiping '%s'...", directory)
        if self._filesystem.remove_directory(directory):
            logger.info("    success!")
            return StepResult.success()

        logger.info("    failed!")
        return StepResult.soft_failure(FAILED_WIPE)
