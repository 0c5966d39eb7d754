"""
Filesystem adapter — path normalization and directory removal.

Removal returns a boolean instead of raising so callers can treat it
as a best-effort cleanup.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class Filesystem:
    """Small set of filesystem primitives used by the compiler."""

    def normalize_path(self, path: str | os.PathLike[str]) -> str:
        """Absolute, normalized path with forward slashes and no trailing slash."""
        normalized = Path(os.path.normpath(os.path.abspath(os.fspath(path))))
        return normalized.as_posix()

    def exists(self, path: str | os.PathLike[str]) -> bool:
        return Path(path).exists()

    def is_dir(self, path: str | os.PathLike[str]) -> bool:
        return Path(path).is_dir()

    def remove_directory(self, path: str | os.PathLike[str]) -> bool:
        """Recursively delete ``path``. Returns True if it is gone afterwards."""
        target = Path(path)
        if not target.exists():
            return True

        try:
            if target.is_symlink() or target.is_file():
                target.unlink()
            else:
                shutil.rmtree(target)
        except OSError as e:
            logger.info("Could not remove '%s': %s", target, e)
            return False

        return not target.exists()
