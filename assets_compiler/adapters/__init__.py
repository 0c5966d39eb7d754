"""Adapters — pre-compilation protocol and external collaborators.

Public re-exports for convenient access.
"""

from assets_compiler.adapters.base import PreCompilationAdapter
from assets_compiler.adapters.mock import MockAdapter
from assets_compiler.adapters.registry import AdapterRegistry

__all__ = [
    "AdapterRegistry",
    "MockAdapter",
    "PreCompilationAdapter",
]
