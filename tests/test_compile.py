"""
Tests for the compile use case — configuration to report, end to end with a fake executor.
"""

from pathlib import Path

from assets_compiler.core.persistence.locker import LOCK_FILE
from assets_compiler.core.use_cases.compile import compile_assets, discover_packages

from tests.helpers import FakeExecutor, write_project

PACKAGES = {
    "me/foo": {"dependencies": "install", "script": "build"},
    "me/bar": {"script": "build", "env": {"production": {"script": "build --prod"}}},
    "me/plain": None,
}


def npm_only(name: str) -> str | None:
    return "/usr/bin/npm" if name == "npm" else None


class TestDiscoverPackages:
    def test_discovery(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        discovery = discover_packages(tmp_path, env="production", is_dev=False)
        assert list(discovery.packages) == ["me/foo", "me/bar"]
        data = discovery.to_dict()
        assert data["environment"] == "production"
        assert data["dev"] is False
        assert data["packages"][1]["script"] == ["build --prod"]

    def test_env_from_environment_variable(self, tmp_path: Path, clean_env):
        clean_env.setenv("COMPOSER_ASSETS_COMPILER", "production")
        write_project(tmp_path, {}, PACKAGES)
        assert discover_packages(tmp_path).env_resolver.env() == "production"


class TestCompileAssets:
    def test_compiles_and_locks(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        executor = FakeExecutor()
        report = compile_assets(tmp_path, executor=executor, which=npm_only)

        assert report.all_ok
        assert report.error is None
        assert executor.commands == ["npm install", "npm run build", "npm run build"]
        assert (tmp_path / "vendor" / "me" / "foo" / LOCK_FILE).is_file()

    def test_second_run_skips_everything(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        compile_assets(tmp_path, executor=FakeExecutor(), which=npm_only)
        executor = FakeExecutor()
        report = compile_assets(tmp_path, executor=executor, which=npm_only)
        assert report.skipped == 2
        assert executor.commands == []

    def test_env_change_rebuilds(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        compile_assets(tmp_path, executor=FakeExecutor(), which=npm_only)
        executor = FakeExecutor()
        compile_assets(tmp_path, env="production", executor=executor, which=npm_only)
        assert "npm run build --prod" in executor.commands

    def test_yarn_lock_in_root_selects_yarn(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        (tmp_path / "yarn.lock").write_text("")
        executor = FakeExecutor()
        compile_assets(tmp_path, executor=executor, which=npm_only)
        assert executor.commands[0] == "yarn"

    def test_no_package_manager(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        report = compile_assets(tmp_path, executor=FakeExecutor(), which=lambda name: None)
        assert not report.all_ok
        assert "valid package manager" in report.error

    def test_nothing_to_do(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {"auto-discover": False}, PACKAGES)
        report = compile_assets(tmp_path, executor=FakeExecutor(), which=lambda name: None)
        assert report.all_ok
        assert report.total == 0

    def test_config_error_reported(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {"packages": {"me/plain": True}}, PACKAGES)
        executor = FakeExecutor()
        report = compile_assets(tmp_path, executor=executor, which=npm_only)
        assert "'me/plain'" in report.error
        assert executor.commands == []

    def test_failure_reported(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {}, PACKAGES)
        report = compile_assets(tmp_path, executor=FakeExecutor({"npm install": 1}), which=npm_only)
        assert report.status == "failed"
        assert report.stopped_early
        assert report.error == "Assets compilation stopped due to failure."

    def test_root_package_compiled_last(self, tmp_path: Path, clean_env):
        write_project(tmp_path, {"script": "root-build"}, PACKAGES)
        executor = FakeExecutor()
        report = compile_assets(tmp_path, executor=executor, which=npm_only)
        assert [p.name for p in report.packages] == ["me/foo", "me/bar", "me/root"]
        assert executor.calls[-1][0] == "npm run root-build"
