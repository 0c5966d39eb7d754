"""
Placeholders — ``${hash}``, ``${env}``, ``${version}``, ``${ref}`` substitution.

Used for script commands and for pre-compilation ``source``/``target``
strings. Replacement is best-effort: tokens that cannot be resolved are
replaced with an empty string, never left in place and never an error.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Mapping
from typing import Any

from assets_compiler.core.config.env_resolver import EnvResolver
from assets_compiler.core.models.package import Package

ENV = "env"
HASH = "hash"
VERSION = "version"
REFERENCE = "ref"

_TOKEN_PATTERN = re.compile(
    r"\$\{\s*(" + "|".join((HASH, ENV, VERSION, REFERENCE)) + r")\s*\}",
    re.IGNORECASE,
)

# Composer stability suffixes, e.g. 1.2.0-beta3, 2.0.0RC1, 1.0.0-pl2
_MODIFIER_PATTERN = re.compile(
    r"[._-]?(?:(stable|beta|b|RC|alpha|a|patch|pl|p)((?:[.-]?\d+)*)?)?([.-]?dev)?$",
    re.IGNORECASE,
)


def parse_stability(version: str) -> str:
    """Classify a version string as stable, RC, beta, alpha or dev."""
    # drop "#ref" and "+build" metadata
    version = re.sub(r"#.+$", "", version)
    version = re.sub(r"\+.*$", "", version).strip()
    lower = version.lower()

    if lower.startswith("dev-") or lower.endswith("-dev") or lower == "dev":
        return "dev"

    match = _MODIFIER_PATTERN.search(lower)
    if match is None:
        return "stable"
    if match.group(3):
        return "dev"

    modifier = (match.group(1) or "").lower()
    if modifier in ("beta", "b"):
        return "beta"
    if modifier in ("alpha", "a"):
        return "alpha"
    if modifier == "rc":
        return "RC"
    return "stable"


class Placeholders:
    """Immutable value bag for one package's placeholder replacement."""

    def __init__(
        self,
        env: str,
        hash: str | None = None,
        version: str | None = None,
        reference: str | None = None,
    ):
        self._env = env
        self._hash = hash
        self._version = version
        self._reference = reference

        digest = hashlib.md5(
            "|".join([env, hash or "", version or "", reference or ""]).encode("utf-8")
        ).hexdigest()
        tail = hashlib.md5(digest.encode("utf-8")).hexdigest()
        self._uuid = "-".join(
            [digest[8:16], digest[16:20], digest[20:24], digest[24:28], tail[12:24]]
        )

    @classmethod
    def for_package(cls, package: Package, env: str, hash: str | None) -> Placeholders:
        return cls(env, hash, package.version, package.reference)

    @property
    def version(self) -> str | None:
        return self._version

    def uuid(self) -> str:
        """Stable cache key; not for cryptographic use."""
        return self._uuid

    def has_stable_version(self) -> bool:
        return bool(self._version) and parse_stability(self._version) == "stable"

    def replace(self, template: str, env_vars: Mapping[str, Any] | None = None) -> str:
        if not template or "${" not in template:
            return template

        values = {
            HASH: self._hash,
            ENV: self._env,
            VERSION: self._version,
            REFERENCE: self._reference,
        }
        replaced = _TOKEN_PATTERN.sub(lambda m: values.get(m.group(1).lower()) or "", template)
        return EnvResolver.replace_env_variables(replaced, env_vars)
