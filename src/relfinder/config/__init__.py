"""
Configuration management for relfinder.

Handles loading and merging configuration from multiple sources:
- Default settings
- User config file (~/.config/relfinder/config.yaml)
- Environment variables

Modified: 2026-10-19
"""

from relfinder.config.settings import (
    Settings,
    GitHubSettings,
    StorageSettings,
    SearchSettings,
    get_config_dir,
    get_cache_dir,
)

__all__ = [
    "Settings",
    "GitHubSettings",
    "StorageSettings",
    "SearchSettings",
    "get_config_dir",
    "get_cache_dir",
]
