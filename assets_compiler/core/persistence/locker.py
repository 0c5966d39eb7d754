"""
Locker — content-addressed markers that let unchanged packages be skipped.

Each compiled package gets a ``.composer_compiled_assets`` file holding a
single hash: SHA-1 of its package.json content plus the active
environment name. Switching environments therefore always invalidates
the lock.

Locking is an optimization only. Read problems fail open (the package
is rebuilt) and write problems are logged, never raised.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from assets_compiler.core.models.package import Package
from assets_compiler.core.models.report import StepResult

logger = logging.getLogger(__name__)

LOCK_FILE = ".composer_compiled_assets"
MANIFEST_FILE = "package.json"


class Locker:
    """Reads and writes per-package lock markers for one environment."""

    def __init__(self, env: str):
        self._env = env

    def is_locked(self, package: Package) -> bool:
        lock_file = Path(package.path) / LOCK_FILE
        if not lock_file.is_file():
            return False

        try:
            stored = lock_file.read_text(encoding="utf-8").strip()
        except OSError:
            stored = ""

        if not stored:
            logger.info("Could not read content of lock file '%s'.", lock_file)
            return False

        current = self.hash_for(package)
        return current is not None and current == stored

    def lock(self, package: Package) -> StepResult:
        """Write the current hash for ``package``, overwriting any prior one."""
        current = self.hash_for(package)
        lock_file = Path(package.path) / LOCK_FILE
        if current is None:
            return StepResult.soft_failure(f"could not compute lock hash for '{package.name}'")

        try:
            lock_file.write_text(current, encoding="utf-8")
        except OSError as e:
            logger.info("Could not write lock file '%s': %s", lock_file, e)
            return StepResult.soft_failure(f"could not write lock file '{lock_file}'")

        logger.debug("Locked %s (%s)", package.name, current)
        return StepResult.success()

    def hash_for(self, package: Package) -> str | None:
        """Lock hash of ``package``, or None if its manifest is unreadable."""
        manifest = Path(package.path) / MANIFEST_FILE
        content = b""
        if manifest.exists():
            try:
                content = manifest.read_bytes()
            except OSError:
                logger.info("Could not read content of '%s'.", manifest)
                return None

        return hashlib.sha1(content + self._env.encode("utf-8")).hexdigest()
