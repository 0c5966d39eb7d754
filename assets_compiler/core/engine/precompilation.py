"""
Pre-compilation handler — try each configured adapter until one succeeds.

``source`` and ``target`` go through placeholder replacement with the
package's env map; ``target`` is resolved against the package path. The
package version is handed to adapters only when it is stable.
"""

from __future__ import annotations

import logging
from pathlib import Path

from assets_compiler.adapters.registry import AdapterRegistry
from assets_compiler.core.engine.placeholders import Placeholders
from assets_compiler.core.models.package import Package

logger = logging.getLogger(__name__)


class PreCompilationHandler:
    def __init__(self, registry: AdapterRegistry):
        self._registry = registry

    def try_precompile(self, package: Package, placeholders: Placeholders, lock_hash: str) -> bool:
        for entry in package.precompilation:
            adapter = self._registry.get(entry.adapter)
            if adapter is None:
                logger.info("  Unknown pre-compilation adapter '%s'.", entry.adapter)
                continue

            env = package.env
            source = placeholders.replace(entry.source, env) or package.name.rsplit("/", 1)[-1]
            target = Path(package.path) / placeholders.replace(entry.target, env)
            version = placeholders.version if placeholders.has_stable_version() else None
            config = {"env": env, **entry.config}

            logger.info("  - trying pre-compiled '%s' via %s...", source, adapter.id)
            try:
                done = adapter.try_precompiled(
                    package.name, lock_hash, source, str(target), config, version
                )
            except Exception as e:
                logger.info("  Adapter '%s' raised: %s", adapter.id, e, exc_info=True)
                done = False

            if done:
                logger.info("    success!")
                return True

        return False
