"""
Mock adapter — test double for the pre-compilation protocol.

Records every call and answers with a configurable result. Optionally
writes a marker file into the target directory to simulate an unpacked
artifact.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from assets_compiler.adapters.base import PreCompilationAdapter


@dataclass
class MockCall:
    name: str
    hash: str
    source: str
    target_dir: str
    config: dict[str, Any]
    version: str | None


class MockAdapter(PreCompilationAdapter):
    """Configurable pre-compilation adapter for tests."""

    def __init__(
        self,
        adapter_id: str = "mock",
        result: bool = True,
        marker_file: str | None = None,
    ):
        self._id = adapter_id
        self._result = result
        self._marker_file = marker_file
        self._call_log: list[MockCall] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def call_log(self) -> list[MockCall]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_result(self, result: bool) -> None:
        self._result = result

    def try_precompiled(
        self,
        name: str,
        hash: str,
        source: str,
        target_dir: str,
        config: dict[str, Any],
        version: str | None,
    ) -> bool:
        self._call_log.append(MockCall(name, hash, source, target_dir, config, version))
        if self._result and self._marker_file:
            target = Path(target_dir)
            target.mkdir(parents=True, exist_ok=True)
            (target / self._marker_file).write_text(source, encoding="utf-8")
        return self._result

    def reset(self) -> None:
        self._call_log.clear()
