"""
Test helpers — a recording process executor and a Composer project builder.
"""

import json
from pathlib import Path
from typing import Any

from assets_compiler.adapters.shell.command import STDOUT


class FakeExecutor:
    """Records commands instead of spawning processes."""

    def __init__(self, exit_codes: dict[str, int] | None = None, default: int = 0):
        self.exit_codes = exit_codes or {}
        self.default = default
        self.calls: list[tuple[str, str | None, dict[str, str]]] = []

    def execute(self, command, output_sink=None, cwd=None, env=None) -> int:
        self.calls.append((command, cwd, dict(env or {})))
        if output_sink:
            output_sink(STDOUT, f"ran {command}")
        return self.exit_codes.get(command, self.default)

    @property
    def commands(self) -> list[str]:
        return [call[0] for call in self.calls]


def write_project(
    root: Path,
    root_settings: dict[str, Any] | None = None,
    packages: dict[str, dict[str, Any] | None] | None = None,
    name: str = "me/root",
    composer_2: bool = True,
) -> Path:
    """Create a Composer project with installed packages.

    ``packages`` maps package names to their own settings (None for a
    package without settings). Every package directory gets a package.json.
    """
    composer: dict[str, Any] = {"name": name}
    if root_settings is not None:
        composer["extra"] = {"composer-asset-compiler": root_settings}
    root.mkdir(parents=True, exist_ok=True)
    (root / "composer.json").write_text(json.dumps(composer))

    entries = []
    for pkg_name, settings in (packages or {}).items():
        pkg_dir = root / "vendor" / pkg_name
        pkg_dir.mkdir(parents=True, exist_ok=True)
        (pkg_dir / "package.json").write_text(json.dumps({"name": pkg_name.split("/")[1]}))
        entry: dict[str, Any] = {
            "name": pkg_name,
            "version": "1.0.0",
            "install-path": f"../{pkg_name}",
            "source": {"type": "git", "reference": "abc123"},
        }
        if settings is not None:
            entry["extra"] = {"composer-asset-compiler": settings}
        entries.append(entry)

    installed_dir = root / "vendor" / "composer"
    installed_dir.mkdir(parents=True, exist_ok=True)
    data: Any = {"packages": entries, "dev": True} if composer_2 else entries
    (installed_dir / "installed.json").write_text(json.dumps(data))
    return root
