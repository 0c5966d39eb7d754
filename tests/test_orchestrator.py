"""
Tests for the orchestrator — the per-package compile pipeline.
"""

import logging
from pathlib import Path

from assets_compiler.adapters import AdapterRegistry, MockAdapter
from assets_compiler.adapters.shell.filesystem import Filesystem
from assets_compiler.core.config.package_config import PackageConfig, PrecompilationConfig
from assets_compiler.core.config.root_config import RootConfig
from assets_compiler.core.engine.commands import Commands
from assets_compiler.core.engine.orchestrator import (
    FAILED_DEPENDENCIES,
    FAILED_SCRIPT,
    FAILED_WIPE,
    Orchestrator,
)
from assets_compiler.core.engine.precompilation import PreCompilationHandler
from assets_compiler.core.models.package import Package
from assets_compiler.core.persistence.locker import LOCK_FILE, Locker

from tests.helpers import FakeExecutor


class NodeModulesExecutor(FakeExecutor):
    """Creates node_modules on install, like a real package manager."""

    def execute(self, command, output_sink=None, cwd=None, env=None) -> int:
        code = super().execute(command, output_sink, cwd, env)
        if command == "npm install" and cwd:
            (Path(cwd) / "node_modules").mkdir(exist_ok=True)
        return code


class BrokenFilesystem(Filesystem):
    def remove_directory(self, path) -> bool:
        return False


def make_package(root: Path, name: str, **config) -> Package:
    path = root / name.replace("/", "_")
    path.mkdir(parents=True, exist_ok=True)
    (path / "package.json").write_text('{"name": "%s"}' % name)
    return Package(name=name, path=str(path), config=PackageConfig(**config), version="1.0.0")


def make_orchestrator(
    executor: FakeExecutor,
    settings: dict | None = None,
    adapters: list | None = None,
    filesystem: Filesystem | None = None,
    env: str = "",
    status: list | None = None,
) -> Orchestrator:
    return Orchestrator(
        root_config=RootConfig.from_settings(settings or {}),
        commands=Commands.discover(".", "npm"),
        executor=executor,
        locker=Locker(env),
        precompilation=PreCompilationHandler(AdapterRegistry(adapters or [])),
        filesystem=filesystem or Filesystem(),
        env=env,
        status_sink=status.append if status is not None else None,
    )


class TestPipeline:
    def test_install_then_scripts_then_lock(self, tmp_path: Path):
        executor = FakeExecutor()
        package = make_package(tmp_path, "me/foo", dependencies="install", script=("build", "lint"))
        report = make_orchestrator(executor).process(package)

        assert report.state == "success"
        assert executor.commands == ["npm install", "npm run build", "npm run lint"]
        assert all(cwd == package.path for _, cwd, _ in executor.calls)
        assert (Path(package.path) / LOCK_FILE).is_file()

    def test_update(self, tmp_path: Path):
        executor = FakeExecutor()
        package = make_package(tmp_path, "me/foo", dependencies="update")
        make_orchestrator(executor).process(package)
        assert executor.commands == ["npm update --no-save"]

    def test_package_env_passed_to_commands(self, tmp_path: Path):
        executor = FakeExecutor()
        package = make_package(tmp_path, "me/foo", script=("build",), env={"NODE_ENV": "production"})
        make_orchestrator(executor).process(package)
        assert executor.calls[0][2] == {"NODE_ENV": "production"}

    def test_script_placeholders(self, tmp_path: Path):
        executor = FakeExecutor()
        package = make_package(tmp_path, "me/foo", script=("build -- --env=${env} --v=${version}",))
        make_orchestrator(executor, env="prod").process(package)
        assert executor.commands == ["npm run build -- --env=prod --v=1.0.0"]

    def test_locked_package_skipped(self, tmp_path: Path):
        executor = FakeExecutor()
        package = make_package(tmp_path, "me/foo", script=("build",))
        orchestrator = make_orchestrator(executor)
        orchestrator.process(package)
        report = orchestrator.process(package)
        assert report.state == "skipped"
        assert report.ok
        assert executor.commands == ["npm run build"]

    def test_dependency_failure_skips_scripts(self, tmp_path: Path):
        executor = FakeExecutor({"npm install": 1})
        package = make_package(tmp_path, "me/foo", dependencies="install", script=("build",))
        report = make_orchestrator(executor).process(package)

        assert report.state == "failed"
        assert report.failures == [FAILED_DEPENDENCIES]
        assert executor.commands == ["npm install"]
        assert not (Path(package.path) / LOCK_FILE).exists()

    def test_all_scripts_run_even_if_one_fails(self, tmp_path: Path):
        executor = FakeExecutor({"npm run a": 2})
        package = make_package(tmp_path, "me/foo", script=("a", "b"))
        report = make_orchestrator(executor).process(package)

        assert report.failures == [FAILED_SCRIPT]
        assert executor.commands == ["npm run a", "npm run b"]
        assert not (Path(package.path) / LOCK_FILE).exists()

    def test_unexpected_error_is_package_failure(self, tmp_path: Path, caplog):
        caplog.set_level(logging.INFO)

        class ExplodingExecutor(FakeExecutor):
            def execute(self, *args, **kwargs):
                raise RuntimeError("kaboom")

        package = make_package(tmp_path, "me/foo", script=("build",))
        report = make_orchestrator(ExplodingExecutor()).process(package)
        assert report.state == "failed"
        assert "kaboom" in report.failures[0]
        assert "terminated with errors" in caplog.text

    def test_status_lines(self, tmp_path: Path):
        status: list[str] = []
        package = make_package(tmp_path, "me/foo", script=("build",))
        make_orchestrator(FakeExecutor(), status=status).process(package)
        assert status == ["Start processing 'me/foo'...", "  Processing of 'me/foo' done."]


class TestWipe:
    def test_wipes_node_modules_created_by_build(self, tmp_path: Path):
        package = make_package(tmp_path, "me/foo", dependencies="install")
        make_orchestrator(NodeModulesExecutor()).process(package)
        assert not (Path(package.path) / "node_modules").exists()

    def test_keeps_preexisting_node_modules(self, tmp_path: Path):
        package = make_package(tmp_path, "me/foo", dependencies="install")
        (Path(package.path) / "node_modules").mkdir()
        make_orchestrator(NodeModulesExecutor()).process(package)
        assert (Path(package.path) / "node_modules").is_dir()

    def test_force_wipes_preexisting(self, tmp_path: Path):
        package = make_package(tmp_path, "me/foo", dependencies="install")
        (Path(package.path) / "node_modules").mkdir()
        make_orchestrator(NodeModulesExecutor(), {"wipe-node-modules": "force"}).process(package)
        assert not (Path(package.path) / "node_modules").exists()

    def test_wipe_disabled(self, tmp_path: Path):
        package = make_package(tmp_path, "me/foo", dependencies="install")
        make_orchestrator(NodeModulesExecutor(), {"wipe-node-modules": False}).process(package)
        assert (Path(package.path) / "node_modules").is_dir()

    def test_wipe_failure_is_diagnostic_only(self, tmp_path: Path):
        package = make_package(tmp_path, "me/foo", dependencies="install")
        report = make_orchestrator(NodeModulesExecutor(), filesystem=BrokenFilesystem()).process(package)
        assert report.state == "success"
        assert report.diagnostics == [FAILED_WIPE]
        assert (Path(package.path) / LOCK_FILE).is_file()


class TestPrecompilation:
    def test_precompiled_skips_build(self, tmp_path: Path):
        executor = FakeExecutor()
        adapter = MockAdapter("mock", result=True)
        package = make_package(
            tmp_path, "me/foo", dependencies="install", script=("build",),
            precompilation=(PrecompilationConfig(adapter="mock"),),
        )
        report = make_orchestrator(executor, adapters=[adapter]).process(package)

        assert report.state == "precompiled"
        assert executor.commands == []
        assert adapter.call_log[0].hash == Locker("").hash_for(package)
        assert (Path(package.path) / LOCK_FILE).is_file()

    def test_miss_falls_back_to_build(self, tmp_path: Path):
        executor = FakeExecutor()
        package = make_package(
            tmp_path, "me/foo", script=("build",),
            precompilation=(PrecompilationConfig(adapter="mock"),),
        )
        report = make_orchestrator(executor, adapters=[MockAdapter("mock", result=False)]).process(package)
        assert report.state == "success"
        assert executor.commands == ["npm run build"]


class TestRun:
    def test_stop_on_failure(self, tmp_path: Path):
        executor = FakeExecutor({"npm run bad": 1})
        packages = [
            make_package(tmp_path, "me/a", script=("bad",)),
            make_package(tmp_path, "me/b", script=("good",)),
        ]
        report = make_orchestrator(executor).run(packages)

        assert report.failed == 1
        assert report.total == 1
        assert report.stopped_early
        assert not report.all_ok
        assert executor.commands == ["npm run bad"]

    def test_continue_on_failure_still_fails_run(self, tmp_path: Path):
        executor = FakeExecutor({"npm run bad": 1})
        packages = [
            make_package(tmp_path, "me/a", script=("bad",)),
            make_package(tmp_path, "me/b", script=("good",)),
        ]
        report = make_orchestrator(executor, {"stop-on-failure": False}).run(packages)

        assert report.total == 2
        assert report.failed == 1
        assert not report.stopped_early
        assert report.status == "partial"
        assert not report.all_ok
        assert executor.commands == ["npm run bad", "npm run good"]

    def test_all_ok(self, tmp_path: Path):
        packages = [make_package(tmp_path, "me/a", script=("x",)), make_package(tmp_path, "me/b", script=("y",))]
        report = make_orchestrator(FakeExecutor(), env="prod").run(packages)
        assert report.all_ok
        assert report.status == "ok"
        data = report.to_dict()
        assert data["environment"] == "prod"
        assert [p["state"] for p in data["packages"]] == ["success", "success"]

    def test_failure_as_last_package_is_not_stopped_early(self, tmp_path: Path):
        executor = FakeExecutor({"npm run bad": 1})
        packages = [make_package(tmp_path, "me/a", script=("bad",))]
        report = make_orchestrator(executor).run(packages)
        assert report.status == "failed"
        assert not report.stopped_early
