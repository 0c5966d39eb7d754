"""
Shared test fixtures and configuration.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove environment variables that influence resolution."""
    for name in (
        "COMPOSER_ASSETS_COMPILER",
        "GITHUB_REPOSITORY",
        "GITHUB_USER_TOKEN",
        "GITHUB_USER",
        "ASSETS_COMPILER_LOG_LEVEL",
        "ASSETS_COMPILER_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
