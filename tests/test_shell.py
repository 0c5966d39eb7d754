"""
Tests for the shell adapters — process execution and filesystem primitives.
"""

from pathlib import Path

from assets_compiler.adapters.shell.command import STDOUT, ProcessExecutor
from assets_compiler.adapters.shell.filesystem import Filesystem


class Collector:
    def __init__(self):
        self.lines: list[str] = []

    def __call__(self, stream: str, chunk: str) -> None:
        assert stream == STDOUT
        self.lines.append(chunk)


class TestProcessExecutor:
    def test_success_streams_output(self, tmp_path: Path):
        sink = Collector()
        code = ProcessExecutor().execute("echo one; echo two", sink, cwd=str(tmp_path))
        assert code == 0
        assert sink.lines == ["one", "two"]

    def test_stderr_merged(self):
        sink = Collector()
        ProcessExecutor().execute("echo oops 1>&2", sink)
        assert sink.lines == ["oops"]

    def test_exit_code(self):
        assert ProcessExecutor().execute("exit 4", Collector()) == 4

    def test_cwd_and_env(self, tmp_path: Path):
        sink = Collector()
        ProcessExecutor().execute('echo "$MY_VAR"; pwd', sink, cwd=str(tmp_path), env={"MY_VAR": "hello"})
        assert sink.lines[0] == "hello"
        assert Path(sink.lines[1]).resolve() == tmp_path.resolve()

    def test_missing_cwd(self, tmp_path: Path):
        sink = Collector()
        assert ProcessExecutor().execute("echo hi", sink, cwd=str(tmp_path / "nope")) == 127
        assert "Could not start" in sink.lines[0]


class TestFilesystem:
    def test_normalize_path(self, tmp_path: Path):
        fs = Filesystem()
        messy = f"{tmp_path}/a/../b/./c/"
        assert fs.normalize_path(messy) == (tmp_path / "b" / "c").as_posix()

    def test_remove_directory(self, tmp_path: Path):
        target = tmp_path / "node_modules"
        (target / "pkg").mkdir(parents=True)
        (target / "pkg" / "index.js").write_text("x")
        fs = Filesystem()
        assert fs.remove_directory(target)
        assert not fs.exists(target)

    def test_remove_missing_directory(self, tmp_path: Path):
        assert Filesystem().remove_directory(tmp_path / "missing")

    def test_remove_symlink_keeps_target(self, tmp_path: Path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        assert Filesystem().remove_directory(link)
        assert real.is_dir()
