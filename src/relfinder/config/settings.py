"""
Configuration management for relfinder.

Hierarchical settings loading: defaults → config file → environment variables

Modified: 2026-10-19
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

from relfinder.core.exceptions import ConfigurationError


# GitHub caps per_page at 100 for search and listing endpoints
MAX_PAGE_SIZE = 100


@dataclass
class GitHubSettings:
    """GitHub OAuth and API settings."""

    client_id: str = "9aa654ac32dd532c5560"
    scope: str = "user"
    redirect_uri: str = "http://localhost:3000/"
    relay_url: str = "https://release-finder-github.herokuapp.com"
    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    request_timeout: float = 30.0
    rate_limit_buffer: int = 100


@dataclass
class StorageSettings:
    """Where the UI state blob lives."""

    db_path: str = "~/.cache/relfinder/state.db"
    state_key: str = "state"

    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass
class SearchSettings:
    """Cascade search behaviour."""

    page_size: int = MAX_PAGE_SIZE
    min_user_query_length: int = 2
    search_max_pages: Optional[int] = 10  # GitHub search stops at 1000 results
    discard_stale_responses: bool = True


@dataclass
class Settings:
    """Main settings container."""

    github: GitHubSettings = field(default_factory=GitHubSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    search: SearchSettings = field(default_factory=SearchSettings)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """
        Load settings from file and environment variables.

        Priority:
        1. Default values (defined in dataclasses)
        2. Config file (~/.config/relfinder/config.yaml)
        3. Environment variables (override everything)

        Args:
            config_path: Optional path to config file

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If the config file is unreadable or holds invalid values
        """
        settings = cls()

        if config_path is None:
            config_path = Path.home() / ".config" / "relfinder" / "config.yaml"

        if config_path.exists():
            try:
                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid config file {config_path}: {e}")

            if not isinstance(config_data, dict):
                raise ConfigurationError(f"Config file {config_path} must contain a mapping")

            # GitHub settings
            if "github" in config_data:
                gh = config_data["github"] or {}
                defaults = GitHubSettings()
                settings.github = GitHubSettings(
                    client_id=gh.get("client_id", defaults.client_id),
                    scope=gh.get("scope", defaults.scope),
                    redirect_uri=gh.get("redirect_uri", defaults.redirect_uri),
                    relay_url=gh.get("relay_url", defaults.relay_url),
                    api_url=gh.get("api_url", defaults.api_url),
                    token=gh.get("token"),
                    request_timeout=gh.get("request_timeout", defaults.request_timeout),
                    rate_limit_buffer=gh.get("rate_limit_buffer", defaults.rate_limit_buffer),
                )

            # Storage settings
            if "storage" in config_data:
                storage = config_data["storage"] or {}
                settings.storage = StorageSettings(
                    db_path=storage.get("db_path", StorageSettings.db_path),
                    state_key=storage.get("state_key", StorageSettings.state_key),
                )

            # Search settings
            if "search" in config_data:
                search = config_data["search"] or {}
                settings.search = SearchSettings(
                    page_size=search.get("page_size", MAX_PAGE_SIZE),
                    min_user_query_length=search.get("min_user_query_length", 2),
                    search_max_pages=search.get("search_max_pages", 10),
                    discard_stale_responses=search.get("discard_stale_responses", True),
                )

        # Override with environment variables
        github_token = os.getenv("GITHUB_TOKEN")
        if github_token:
            settings.github.token = github_token

        client_id = os.getenv("RELFINDER_CLIENT_ID")
        if client_id:
            settings.github.client_id = client_id

        relay_url = os.getenv("RELFINDER_RELAY_URL")
        if relay_url:
            settings.github.relay_url = relay_url

        state_path = os.getenv("RELFINDER_STATE_PATH")
        if state_path:
            settings.storage.db_path = state_path

        settings.validate()
        return settings

    def validate(self) -> None:
        """
        Check value ranges that the fetcher and reducer rely on.

        Raises:
            ConfigurationError: If any value is out of range
        """
        page_size = self.search.page_size
        if not isinstance(page_size, int) or not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ConfigurationError(
                f"search.page_size must be an integer between 1 and {MAX_PAGE_SIZE}, got {page_size!r}"
            )

        max_pages = self.search.search_max_pages
        if max_pages is not None and (not isinstance(max_pages, int) or max_pages < 1):
            raise ConfigurationError(
                f"search.search_max_pages must be a positive integer or null, got {max_pages!r}"
            )

        if not isinstance(self.search.min_user_query_length, int) or self.search.min_user_query_length < 1:
            raise ConfigurationError("search.min_user_query_length must be a positive integer")

        if not self.storage.state_key:
            raise ConfigurationError("storage.state_key must not be empty")

        try:
            float(self.github.request_timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"github.request_timeout must be a number, got {self.github.request_timeout!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary (token omitted)."""
        return {
            "github": {
                "client_id": self.github.client_id,
                "scope": self.github.scope,
                "redirect_uri": self.github.redirect_uri,
                "relay_url": self.github.relay_url,
                "api_url": self.github.api_url,
                "request_timeout": self.github.request_timeout,
                "rate_limit_buffer": self.github.rate_limit_buffer,
            },
            "storage": {
                "db_path": self.storage.db_path,
                "state_key": self.storage.state_key,
            },
            "search": {
                "page_size": self.search.page_size,
                "min_user_query_length": self.search.min_user_query_length,
                "search_max_pages": self.search.search_max_pages,
                "discard_stale_responses": self.search.discard_stale_responses,
            },
        }


def get_config_dir() -> Path:
    """Get configuration directory, creating if needed."""
    config_dir = Path.home() / ".config" / "relfinder"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_cache_dir() -> Path:
    """Get cache directory, creating if needed."""
    cache_dir = Path.home() / ".cache" / "relfinder"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
