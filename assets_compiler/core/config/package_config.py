"""
Package configuration — raw settings resolved into a frozen PackageConfig.

A raw settings block (from the root ``defaults``, a root ``packages``
entry, or a package's own metadata) looks like::

    dependencies: install          # install | update | none | true | false
    script: [build, "lint --fix"]  # string or list of strings
    env:
      NODE_ENV: production         # scalar -> process environment variable
      $default:                    # mapping -> environment variant
        script: build
      production:
        script: "build --prod"
    pre-compiled:
      adapter: gh-release-zip
      source: assets-${version}
      target: ./assets/
      config: {repository: acme/theme}

Resolution of one block: its plain keys, overlaid with the variant that
``EnvResolver.select_variant`` picks from its ``env`` mappings. Two blocks
are merged with ``merge_configs`` where the package level always wins.
Variants are applied per level before the merge, not over the merged
result: a variant in ``defaults`` never overrides a plain key that the
package itself sets.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from assets_compiler.core.config.env_resolver import EnvResolver

DEPENDENCIES = "dependencies"
SCRIPT = "script"
ENV = "env"
PRE_COMPILED = "pre-compiled"
PRE_COMPILED_ALIASES = ("pre-compiled", "precompiled")

DEP_NONE = "none"
DEP_INSTALL = "install"
DEP_UPDATE = "update"

Dependencies = Literal["none", "install", "update"]


class PrecompilationConfig(BaseModel):
    """One pre-compilation attempt: which adapter, what to fetch, where to put it."""

    model_config = ConfigDict(frozen=True)

    adapter: str
    source: str = ""
    target: str = ""
    config: dict[str, Any] = Field(default_factory=dict)


class PackageConfig(BaseModel):
    """Fully resolved, immutable build configuration of one package."""

    model_config = ConfigDict(frozen=True)

    dependencies: Dependencies = DEP_NONE
    script: tuple[str, ...] = ()
    env: dict[str, str] = Field(default_factory=dict)
    precompilation: tuple[PrecompilationConfig, ...] = ()

    @property
    def is_install(self) -> bool:
        return self.dependencies == DEP_INSTALL

    @property
    def is_update(self) -> bool:
        return self.dependencies == DEP_UPDATE

    @property
    def has_work(self) -> bool:
        """Whether there is a dependency step or at least one script."""
        return self.dependencies != DEP_NONE or bool(self.script)

    @property
    def is_valid(self) -> bool:
        return self.has_work or bool(self.precompilation)

    @classmethod
    def for_raw_settings(
        cls,
        raw: Mapping[str, Any] | None,
        env_resolver: EnvResolver,
        defaults: Mapping[str, Any] | None = None,
    ) -> PackageConfig:
        """Resolve ``raw`` (and optional ``defaults`` beneath it)."""
        resolved = resolve_settings(defaults, env_resolver) if defaults else {}
        if raw:
            resolved = merge_configs(resolved, resolve_settings(raw, env_resolver))
        return cls.from_resolved(resolved)

    @classmethod
    def from_resolved(cls, resolved: Mapping[str, Any]) -> PackageConfig:
        return cls(
            dependencies=_normalize_dependencies(resolved.get(DEPENDENCIES)),
            script=tuple(_normalize_script(resolved.get(SCRIPT))),
            env=dict(resolved.get(ENV) or {}),
            precompilation=tuple(_normalize_precompilation(resolved.get(PRE_COMPILED))),
        )


def resolve_settings(raw: Mapping[str, Any], env_resolver: EnvResolver) -> dict[str, Any]:
    """Resolve one settings block against the active environment.

    Returns a flat mapping whose ``env`` key holds only process
    environment variables. Variants that do not match are dropped.
    """
    variants, env_vars = split_env(raw.get(ENV))

    resolved: dict[str, Any] = {}
    for key, value in raw.items():
        if key == ENV:
            continue
        if key in PRE_COMPILED_ALIASES:
            resolved[PRE_COMPILED] = value
            continue
        resolved[key] = value

    variant = env_resolver.select_variant(variants)
    if variant:
        # nested variants are ignored
        _, variant_env = split_env(variant.get(ENV))
        for key, value in variant.items():
            if key == ENV:
                continue
            resolved[PRE_COMPILED if key in PRE_COMPILED_ALIASES else key] = value
        env_vars = {**env_vars, **variant_env}

    if env_vars:
        resolved[ENV] = env_vars

    return resolved


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Key-by-key merge; ``override`` wins. Process env vars are merged too."""
    merged = {**base, **override}
    if ENV in base or ENV in override:
        merged[ENV] = {**(base.get(ENV) or {}), **(override.get(ENV) or {})}
    return merged


def split_env(value: Any) -> tuple[dict[str, Any], dict[str, str]]:
    """Split a raw ``env`` block into (variants, process env vars)."""
    if not isinstance(value, Mapping):
        return {}, {}

    variants: dict[str, Any] = {}
    env_vars: dict[str, str] = {}
    for key, item in value.items():
        if isinstance(item, Mapping):
            variants[str(key)] = item
        elif item is not None and not isinstance(item, (list, tuple)):
            env_vars[str(key)] = str(item).lower() if isinstance(item, bool) else str(item)
    return variants, env_vars


def _normalize_dependencies(value: Any) -> str:
    if value is True:
        return DEP_INSTALL
    if isinstance(value, str) and value.strip().lower() in (DEP_INSTALL, DEP_UPDATE):
        return value.strip().lower()
    return DEP_NONE


def _normalize_script(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _normalize_precompilation(value: Any) -> list[PrecompilationConfig]:
    if isinstance(value, Mapping):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []

    configs = []
    for item in value:
        if not isinstance(item, Mapping) or not item.get("adapter"):
            continue
        configs.append(
            PrecompilationConfig(
                adapter=str(item["adapter"]),
                source=str(item.get("source") or ""),
                target=str(item.get("target") or ""),
                config=dict(item.get("config") or {}),
            )
        )
    return configs
