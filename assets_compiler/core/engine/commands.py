"""
Commands — package-manager selection and command-line building.

The manager is chosen once per run, probing in order:

    1. ``package-manager`` root setting ("yarn", "npm", or custom templates)
    2. a yarn.lock file in the working directory
    3. a yarn executable on PATH
    4. an npm executable on PATH

Custom templates are a mapping with ``install``, ``update`` and
``script`` keys; ``%s`` in the script template is the script name.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from assets_compiler.core.engine.placeholders import Placeholders

logger = logging.getLogger(__name__)

YARN = "yarn"
NPM = "npm"
YARN_LOCK = "yarn.lock"


@dataclass(frozen=True)
class ManagerCommands:
    name: str
    install: str
    update: str
    script: str

    def script_for(self, script_name: str) -> str:
        if "%s" in self.script:
            return self.script.replace("%s", script_name)
        return f"{self.script} {script_name}"


MANAGERS = {
    YARN: ManagerCommands(YARN, install="yarn", update="yarn upgrade", script="yarn %s"),
    NPM: ManagerCommands(NPM, install="npm install", update="npm update --no-save", script="npm run %s"),
}


class Commands:
    """Builds install/update/script command lines for the selected manager."""

    def __init__(self, manager: ManagerCommands | None):
        self._manager = manager

    @classmethod
    def discover(
        cls,
        working_dir: str | Path,
        override: str | Mapping[str, Any] | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> Commands:
        manager = _from_override(override)
        if manager is None:
            if (Path(working_dir) / YARN_LOCK).is_file() or which(YARN):
                manager = MANAGERS[YARN]
            elif which(NPM):
                manager = MANAGERS[NPM]

        if manager is not None:
            logger.info("Using package manager: %s", manager.name)
        return cls(manager)

    @property
    def manager(self) -> str | None:
        return self._manager.name if self._manager else None

    def is_valid(self) -> bool:
        return self._manager is not None

    def install_cmd(self) -> str:
        return self._require().install

    def update_cmd(self) -> str:
        return self._require().update

    def script_cmd(
        self,
        script: str,
        placeholders: Placeholders | None = None,
        env: Mapping[str, Any] | None = None,
    ) -> str:
        """Manager-specific run command with placeholders replaced.

        ``env`` is the package's own resolved env map.
        """
        command = self._require().script_for(script)
        if placeholders is None:
            placeholders = Placeholders("")
        return placeholders.replace(command, env)

    def _require(self) -> ManagerCommands:
        if self._manager is None:
            raise RuntimeError("No valid package manager available.")
        return self._manager


def _from_override(override: str | Mapping[str, Any] | None) -> ManagerCommands | None:
    if not override:
        return None

    if isinstance(override, str):
        manager = MANAGERS.get(override.strip().lower())
        if manager is None:
            logger.warning("Unknown package manager '%s', falling back to detection.", override)
        return manager

    install = override.get("install")
    script = override.get("script")
    if not isinstance(install, str) or not isinstance(script, str):
        logger.warning("Custom package manager needs 'install' and 'script' commands.")
        return None
    update = override.get("update")
    return ManagerCommands(
        name=str(override.get("name") or "custom"),
        install=install,
        update=update if isinstance(update, str) else install,
        script=script,
    )
