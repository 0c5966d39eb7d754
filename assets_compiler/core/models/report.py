"""
Step results and run reports — the execution contract of the orchestrator.

Best-effort operations (lock writes, node_modules wiping, dependency and
script steps) return a StepResult instead of raising. Only ``error``
results turn a package into a failure; ``soft-failure`` results are
collected as diagnostics and never interrupt control flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field

StepStatus = Literal["ok", "soft-failure", "error"]
PackageState = Literal["skipped", "precompiled", "success", "failed"]


class StepResult(BaseModel):
    """Tri-state outcome of one pipeline step."""

    status: StepStatus = "ok"
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "error"

    @classmethod
    def success(cls) -> StepResult:
        return cls(status="ok")

    @classmethod
    def soft_failure(cls, reason: str) -> StepResult:
        return cls(status="soft-failure", reason=reason)

    @classmethod
    def error(cls, reason: str) -> StepResult:
        return cls(status="error", reason=reason)


class PackageReport(BaseModel):
    """What happened to one package during a run."""

    name: str
    path: str = ""
    state: PackageState = "success"
    failures: list[str] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state != "failed"

    def record(self, result: StepResult | None) -> None:
        """Fold a step result into this report."""
        if result is None or result.ok:
            return
        if result.failed:
            self.failures.append(result.reason)
            self.state = "failed"
        else:
            self.diagnostics.append(result.reason)


@dataclass
class CompileReport:
    """Result of compiling every package of a run."""

    environment: str = ""
    packages: list[PackageReport] = field(default_factory=list)
    stopped_early: bool = False
    error: str | None = None

    @property
    def total(self) -> int:
        return len(self.packages)

    @property
    def failed(self) -> int:
        return sum(1 for p in self.packages if not p.ok)

    @property
    def skipped(self) -> int:
        return sum(1 for p in self.packages if p.state == "skipped")

    @property
    def all_ok(self) -> bool:
        return self.error is None and self.failed == 0

    @property
    def status(self) -> str:
        if self.all_ok:
            return "ok"
        if self.failed and self.failed < self.total:
            return "partial"
        return "failed"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "environment": self.environment,
            "status": self.status,
            "total": self.total,
            "failed": self.failed,
            "skipped": self.skipped,
            "stopped_early": self.stopped_early,
            "packages": [p.model_dump(mode="json") for p in self.packages],
        }
        if self.error:
            result["error"] = self.error
        return result
