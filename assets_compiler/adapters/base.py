"""
Adapter base — the pre-compilation adapter protocol.

A pre-compilation adapter tries to replace a package's local build with
a prebuilt artifact. The orchestrator only talks to adapters through
this protocol, looked up by id in the AdapterRegistry.

A miss is not an error: it is the signal to continue with the normal
install/script pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class PreCompilationAdapter(ABC):
    """Abstract base class for all pre-compilation adapters.

    To create a new adapter:
        1. Subclass PreCompilationAdapter
        2. Implement id and try_precompiled
        3. Register it in the AdapterRegistry
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """The key used for this adapter in ``pre-compiled.adapter``."""

    @abstractmethod
    def try_precompiled(
        self,
        name: str,
        hash: str,
        source: str,
        target_dir: str,
        config: dict[str, Any],
        version: str | None,
    ) -> bool:
        """Fetch the artifact into ``target_dir``.

        Returns True only if the artifact was fetched and placed.
        MUST never raise; failures are logged at verbose level and
        reported as False.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id!r}>"
