"""
GitHub release zip adapter — fetch prebuilt assets attached to a release.

Configuration (``pre-compiled.config``)::

    repository: acme/theme     # owner/repo, or GITHUB_REPOSITORY
    token: ghp_...             # optional, or GITHUB_USER_TOKEN
    user: acme-bot             # optional, or GITHUB_USER; defaults to owner

The release is looked up by tag (the package version), and the asset
named ``<source>.zip`` is downloaded and unpacked into the target
directory. Private repositories are reached by putting the token into
the URLs as basic-auth credentials.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

from assets_compiler.adapters.base import PreCompilationAdapter
from assets_compiler.adapters.http.archive import ZIP
from assets_compiler.core.config.env_resolver import EnvResolver

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"

REPO = "repository"
TOKEN = "token"
TOKEN_USER = "user"


class HttpGetter(Protocol):
    def get(self, url: str) -> str | None: ...


class Downloader(Protocol):
    def download(self, dist_type: str, dist_url: str, target_dir: str) -> None: ...


@dataclass(frozen=True)
class GitHubConfig:
    """Repository and credentials, from adapter config or environment."""

    repository: str | None = None
    token: str | None = None
    user: str | None = None

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        env: Mapping[str, Any] | None = None,
    ) -> GitHubConfig:
        def pick(key: str, env_name: str) -> str | None:
            value = config.get(key) or EnvResolver.read_env(env_name, env)
            return value if isinstance(value, str) and value else None

        return cls(
            repository=pick(REPO, "GITHUB_REPOSITORY"),
            token=pick(TOKEN, "GITHUB_USER_TOKEN"),
            user=pick(TOKEN_USER, "GITHUB_USER"),
        )

    @property
    def owner(self) -> str | None:
        if not self.repository:
            return None
        parts = self.repository.split("/")
        if len(parts) != 2 or not all(parts):
            return None
        return parts[0]

    def auth_prefix(self) -> str:
        """``https://user:token@`` when a token is set, else ``https://``."""
        if not self.token:
            return "https://"
        user = self.user or self.owner or ""
        return f"https://{quote(user, safe='')}:{quote(self.token, safe='')}@"


class GitHubReleaseZipAdapter(PreCompilationAdapter):
    """Pre-compilation from a zip asset of a GitHub release."""

    def __init__(self, client: HttpGetter, downloader: Downloader):
        self._client = client
        self._downloader = downloader

    @property
    def id(self) -> str:
        return "gh-release-zip"

    def try_precompiled(
        self,
        name: str,
        hash: str,
        source: str,
        target_dir: str,
        config: dict[str, Any],
        version: str | None,
    ) -> bool:
        try:
            gh = GitHubConfig.from_config(config, config.get("env"))
            if not version or not source or not gh.owner:
                logger.info("  Invalid configuration for GitHub release zip.")
                return False

            endpoint = self._release_endpoint(gh, version)
            dist_url = self._asset_url(gh, source, endpoint)
            if not dist_url:
                return False

            self._downloader.download(ZIP, dist_url, target_dir)
            return True
        except Exception as e:
            logger.info("  %s", e)
            return False

    def _release_endpoint(self, gh: GitHubConfig, version: str) -> str:
        tag = quote(version, safe="")
        return f"{gh.auth_prefix()}api.github.com/repos/{gh.repository}/releases/tags/{tag}"

    def _asset_url(self, gh: GitHubConfig, source: str, endpoint: str) -> str:
        """Find the asset id for ``source`` and build its download URL.

        Raises:
            ValueError: The release response is missing or has no assets.
        """
        response = self._client.get(endpoint)
        data = json.loads(response) if response else None
        if not isinstance(data, dict) or not data.get("assets"):
            safe_endpoint = f"{API_BASE}/repos/{gh.repository}/releases"
            raise ValueError(f"Could not obtain a valid API response from {safe_endpoint}.")

        asset_name = source if source.lower().endswith(".zip") else f"{source}.zip"

        asset_id = None
        for asset in data["assets"]:
            if isinstance(asset, dict) and asset.get("name") == asset_name and asset.get("id"):
                asset_id = asset["id"]
                break

        if not asset_id:
            logger.info("  Release zip '%s' not found in '%s'.", asset_name, gh.repository)
            return ""

        return f"{gh.auth_prefix()}api.github.com/repos/{gh.repository}/releases/assets/{asset_id}"
