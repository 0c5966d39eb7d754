"""
Domain models — Pydantic types for the assets compiler.

All models are re-exported here for convenient access:

    from assets_compiler.core.models import Package, PackageReport, StepResult
"""

from assets_compiler.core.config.package_config import PackageConfig, PrecompilationConfig
from assets_compiler.core.models.package import Package
from assets_compiler.core.models.report import CompileReport, PackageReport, StepResult

__all__ = [
    "CompileReport",
    # package.py
    "Package",
    "PackageConfig",
    # report.py
    "PackageReport",
    "PrecompilationConfig",
    "StepResult",
]
