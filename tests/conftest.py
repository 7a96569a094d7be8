"""Shared test fixtures for relfinder tests.

Created: 2026-10-19
"""

import pytest
import pytest_asyncio

from relfinder.config.settings import Settings, StorageSettings
from relfinder.core.github_client import GitHubAPIClient
from relfinder.core.store import StateStore

from tests.utils import FakeGitHub, release_item, repo_item, user_item, asset_item


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's token and home directory out of the tests."""
    for name in ("GITHUB_TOKEN", "RELFINDER_CLIENT_ID", "RELFINDER_RELAY_URL", "RELFINDER_STATE_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def settings(tmp_path):
    """Default settings with the state database under tmp_path."""
    settings = Settings()
    settings.storage = StorageSettings(db_path=str(tmp_path / "state.db"))
    return settings


@pytest_asyncio.fixture
async def store(settings):
    """Initialized state store."""
    store = StateStore(db_path=settings.storage.resolved_db_path(), key=settings.storage.state_key)
    await store.initialize()
    return store


@pytest.fixture
def fake_github():
    """GitHub with octocat, one repository and 107 releases."""
    releases = [
        release_item(
            i,
            f"v1.{i}",
            assets=[asset_item(i * 10, f"hello-1.{i}.tar.gz")] if i == 1 else [],
        )
        for i in range(1, 108)
    ]
    return FakeGitHub(
        users=[
            user_item(1, "octocat"),
            user_item(2, "octo"),
            user_item(3, "octocat-bot"),
            user_item(4, "octopus"),
        ],
        repos={
            "octocat": [
                repo_item(10, "octocat", "Hello-World"),
                repo_item(11, "octocat", "Spoon-Knife"),
            ]
        },
        releases={"octocat/Hello-World": releases},
    )


@pytest_asyncio.fixture
async def api_client(fake_github):
    """Authenticated API client talking to ``fake_github``."""
    client = GitHubAPIClient(token="gho_test_token", transport=fake_github.transport())
    yield client
    await client.aclose()
