"""
Adapter registry — lookup of pre-compilation adapters by id.
"""

from __future__ import annotations

import logging

from assets_compiler.adapters.base import PreCompilationAdapter

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry of pre-compilation adapters."""

    def __init__(self, adapters: list[PreCompilationAdapter] | None = None):
        self._adapters: dict[str, PreCompilationAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: PreCompilationAdapter) -> None:
        """Register an adapter, replacing any adapter with the same id."""
        adapter_id = adapter.id
        if adapter_id in self._adapters:
            logger.warning("Overwriting existing adapter: %s", adapter_id)
        self._adapters[adapter_id] = adapter
        logger.debug("Registered adapter: %s", adapter_id)

    def unregister(self, adapter_id: str) -> None:
        self._adapters.pop(adapter_id, None)

    def get(self, adapter_id: str) -> PreCompilationAdapter | None:
        return self._adapters.get(adapter_id)

    def list_adapters(self) -> list[str]:
        return list(self._adapters.keys())

    @classmethod
    def default(cls) -> AdapterRegistry:
        """Registry with the built-in adapters and real collaborators."""
        from assets_compiler.adapters.http.archive import ArchiveDownloader
        from assets_compiler.adapters.http.client import HttpClient
        from assets_compiler.adapters.vcs.github_release import GitHubReleaseZipAdapter

        return cls([GitHubReleaseZipAdapter(HttpClient(), ArchiveDownloader())])
