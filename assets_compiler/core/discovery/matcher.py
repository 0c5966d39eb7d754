"""
Package matcher — first-match-wins evaluation of the root ``packages`` rules.

Rules are (glob pattern, directive) pairs kept in declaration order;
the order is semantically load-bearing. ``*`` matches any run of
characters, including ``/``.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from assets_compiler.core.config.loader import ConfigError

INCLUDE = "include"
EXCLUDE = "exclude"
FORCE_DEFAULTS = "force-defaults"
EXPLICIT = "explicit"


@dataclass(frozen=True)
class Match:
    """The rule that decided a package's fate."""

    pattern: str
    directive: str
    settings: dict[str, Any] = field(default_factory=dict)


def parse_directive(pattern: str, value: Any) -> Match:
    """Turn a raw ``packages`` value into a Match.

    Raises:
        ConfigError: For values that are not a known directive.
    """
    if value is True:
        return Match(pattern, INCLUDE)
    if value is False or value is None:
        return Match(pattern, EXCLUDE)
    if isinstance(value, dict):
        return Match(pattern, EXPLICIT, dict(value))
    if isinstance(value, str) and value.strip().lower() in (INCLUDE, EXCLUDE, FORCE_DEFAULTS):
        return Match(pattern, value.strip().lower())
    raise ConfigError(f"Invalid directive {value!r} for package pattern '{pattern}'.")


class PackageMatcher:
    """Evaluates ordered glob rules against package names."""

    def __init__(self, rules: Iterable[tuple[str, Any]]):
        self._rules = [parse_directive(pattern, value) for pattern, value in rules]

    def __len__(self) -> int:
        return len(self._rules)

    def match(self, name: str) -> Match | None:
        """Return the first rule whose pattern matches ``name``, or None."""
        for rule in self._rules:
            if rule.pattern == name or fnmatch.fnmatchcase(name, rule.pattern):
                return rule
        return None
