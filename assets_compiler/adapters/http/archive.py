"""
Archive downloader — download an archive and unpack it into a directory.

Supports ``zip`` and ``tar`` (gzip/bzip2/xz compressed or plain). When
the archive holds a single top-level directory, its contents are placed
directly in the target directory. Raises on any failure.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import tempfile
import urllib.request
import zipfile
from pathlib import Path

from assets_compiler.adapters.http.client import DEFAULT_TIMEOUT, build_request

logger = logging.getLogger(__name__)

ZIP = "zip"
TAR = "tar"


class ArchiveError(Exception):
    """Raised when an archive cannot be downloaded or unpacked."""


class ArchiveDownloader:
    """Download + unpack, the way a package installer treats dist archives."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self._timeout = timeout

    def download(self, dist_type: str, dist_url: str, target_dir: str | Path) -> None:
        if dist_type not in (ZIP, TAR):
            raise ArchiveError(f"Unsupported archive type '{dist_type}'.")

        target = Path(target_dir)
        with tempfile.TemporaryDirectory(prefix="assets-compiler-") as tmp:
            tmp_path = Path(tmp)
            archive = tmp_path / f"archive.{dist_type}"
            self._fetch(dist_url, archive)

            unpacked = tmp_path / "unpacked"
            unpacked.mkdir()
            self._extract(dist_type, archive, unpacked)
            self._place(unpacked, target)

        logger.info("  Archive unpacked to '%s'.", target)

    def _fetch(self, url: str, destination: Path) -> None:
        request = build_request(url, "application/octet-stream")
        logger.debug("Downloading %s", request.full_url)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as resp, \
                    destination.open("wb") as fh:
                shutil.copyfileobj(resp, fh)
        except OSError as e:
            raise ArchiveError(f"Could not download {request.full_url}: {e}") from e

    def _extract(self, dist_type: str, archive: Path, destination: Path) -> None:
        try:
            if dist_type == ZIP:
                with zipfile.ZipFile(archive) as zf:
                    _check_members(zf.namelist(), destination)
                    zf.extractall(destination)
            else:
                with tarfile.open(archive) as tf:
                    _check_members(tf.getnames(), destination)
                    tf.extractall(destination, filter="data")
        except (zipfile.BadZipFile, tarfile.TarError) as e:
            raise ArchiveError(f"Invalid {dist_type} archive: {e}") from e

    def _place(self, unpacked: Path, target: Path) -> None:
        entries = list(unpacked.iterdir())
        source = entries[0] if len(entries) == 1 and entries[0].is_dir() else unpacked

        target.mkdir(parents=True, exist_ok=True)
        for item in source.iterdir():
            destination = target / item.name
            if destination.is_dir() and not destination.is_symlink():
                shutil.rmtree(destination)
            elif destination.exists() or destination.is_symlink():
                destination.unlink()
            shutil.move(str(item), str(destination))


def _check_members(names: list[str], destination: Path) -> None:
    """Refuse archives with members escaping ``destination``."""
    root = destination.resolve()
    for name in names:
        resolved = (root / name).resolve()
        if resolved != root and root not in resolved.parents:
            raise ArchiveError(f"Archive member '{name}' escapes the target directory.")
