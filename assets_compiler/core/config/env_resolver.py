"""
Environment resolver — the active environment name and dev/no-dev mode.

This is the only place where process environment state enters the
system: the environment-name fallback, raw variable reads, and
``${NAME}`` substitution all go through here.

Environment variants are mappings keyed by an environment name or by
one of the two magic keys::

    env:
      $default:        {script: "build"}
      $default-no-dev: {script: "build --prod"}
      production:      {script: "build --prod --minify"}
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any

ENV_VAR_NAME = "COMPOSER_ASSETS_COMPILER"

DEFAULT_ENV = "$default"
DEFAULT_NO_DEV_ENV = "$default-no-dev"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]*)\}")


class EnvResolver:
    """Active environment name + dev flag, and variant selection."""

    def __init__(self, env: str | None, is_dev: bool):
        self._env = env or ""
        self._is_dev = is_dev

    @staticmethod
    def resolve_env_name(explicit: str | None = None) -> str | None:
        """Pick the environment name: explicit argument, then env var."""
        if explicit:
            return explicit
        value = os.environ.get(ENV_VAR_NAME)
        return value or None

    @staticmethod
    def read_env(name: str, env: Mapping[str, Any] | None = None) -> str | None:
        """Read a variable from ``env`` first, then the process environment."""
        if env and name in env and env[name] is not None:
            return str(env[name])
        return os.environ.get(name)

    @staticmethod
    def replace_env_variables(text: str, env: Mapping[str, Any] | None = None) -> str:
        """Substitute ``${NAME}`` forms. Anything unresolved becomes ``""``."""
        if not text or "${" not in text:
            return text
        return _ENV_VAR_PATTERN.sub(
            lambda m: EnvResolver.read_env(m.group(1).strip(), env) or "",
            text,
        )

    def env(self) -> str:
        return self._env

    def is_dev(self) -> bool:
        return self._is_dev

    def select_variant(self, variants: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """Return the variant matching the active state, or None.

        Priority: exact environment name, then ``$default-no-dev`` when
        not in dev mode, then ``$default``. Non-mapping values never match.
        """
        if not variants:
            return None

        candidates = []
        if self._env:
            candidates.append(self._env)
        if not self._is_dev:
            candidates.append(DEFAULT_NO_DEV_ENV)
        candidates.append(DEFAULT_ENV)

        for key in candidates:
            value = variants.get(key)
            if isinstance(value, Mapping):
                return dict(value)

        return None

    def __repr__(self) -> str:
        return f"<EnvResolver env={self._env!r} dev={self._is_dev}>"
