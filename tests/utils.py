"""Test utilities and helper functions.

Created: 2026-10-19
"""

import re
from typing import Any, Dict, List, Optional

import httpx

from relfinder.core.models import Asset, ReleaseCandidate, RepoCandidate, UserCandidate


def user_item(id: int, login: str, **overrides) -> Dict[str, Any]:
    """Factory for one ``/search/users`` item.

    Example:
        item = user_item(1, "octocat")
    """
    item = {
        "id": id,
        "login": login,
        "avatar_url": f"https://avatars.example.com/u/{id}",
        "html_url": f"https://github.com/{login}",
    }
    item.update(overrides)
    return item


def repo_item(id: int, owner: str, name: str, **overrides) -> Dict[str, Any]:
    """Factory for one ``/search/repositories`` item."""
    item = {
        "id": id,
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "description": f"Test repository {name}",
        "html_url": f"https://github.com/{owner}/{name}",
    }
    item.update(overrides)
    return item


def release_item(id: int, tag: str, assets: Optional[List[Dict[str, Any]]] = None, **overrides) -> Dict[str, Any]:
    """Factory for one ``/repos/{owner}/{repo}/releases`` item."""
    item = {
        "id": id,
        "tag_name": tag,
        "name": f"Release {tag}",
        "published_at": "2025-11-01T12:00:00Z",
        "html_url": f"https://github.com/octocat/Hello-World/releases/tag/{tag}",
        "assets": assets or [],
    }
    item.update(overrides)
    return item


def asset_item(id: int, name: str, **overrides) -> Dict[str, Any]:
    """Factory for one release asset."""
    item = {
        "id": id,
        "name": name,
        "browser_download_url": f"https://github.com/octocat/Hello-World/releases/download/v1/{name}",
        "size": 2048,
        "download_count": 3,
    }
    item.update(overrides)
    return item


def make_user(id: int, login: str) -> UserCandidate:
    return UserCandidate.from_github_response(user_item(id, login))


def make_repo(id: int, owner: str, name: str) -> RepoCandidate:
    return RepoCandidate.from_github_response(repo_item(id, owner, name))


def make_release(id: int, tag: str, asset_names: Optional[List[str]] = None) -> ReleaseCandidate:
    assets = [asset_item(id * 100 + i, name) for i, name in enumerate(asset_names or [])]
    return ReleaseCandidate.from_github_response(release_item(id, tag, assets=assets))


def make_asset(id: int, name: str) -> Asset:
    return Asset.from_github_response(asset_item(id, name))


class FakeGitHub:
    """In-memory GitHub serving the three cascade endpoints.

    Hand ``transport()`` to ``GitHubAPIClient``; every request is recorded
    in ``requests`` so tests can count pages.

    Example:
        github = FakeGitHub(users=[user_item(1, "octocat")])
        client = GitHubAPIClient(token="t", transport=github.transport())
    """

    def __init__(
        self,
        users: Optional[List[Dict[str, Any]]] = None,
        repos: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        releases: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        include_total_count: bool = True,
    ):
        self.users = users or []
        self.repos = repos or {}
        self.releases = releases or {}
        self.include_total_count = include_total_count
        self.status_overrides: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requests_for(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params
        per_page = int(params.get("per_page", "30"))
        page = int(params.get("page", "1"))

        if path in self.status_overrides:
            return httpx.Response(self.status_overrides[path], json={"message": "Forbidden"})

        headers = {
            "X-RateLimit-Limit": "5000",
            "X-RateLimit-Remaining": str(5000 - len(self.requests)),
            "X-RateLimit-Reset": "1900000000",
        }

        if path == "/search/users":
            query = params.get("q", "").lower()
            items = [u for u in self.users if query in u["login"].lower()]
            return httpx.Response(200, json=self._search_body(items, page, per_page), headers=headers)

        if path == "/search/repositories":
            match = re.search(r"user:(\S+)", params.get("q", ""))
            owner = match.group(1) if match else ""
            items = self.repos.get(owner, [])
            return httpx.Response(200, json=self._search_body(items, page, per_page), headers=headers)

        match = re.fullmatch(r"/repos/([^/]+)/([^/]+)/releases", path)
        if match:
            full_name = f"{match.group(1)}/{match.group(2)}"
            if full_name not in self.releases:
                return httpx.Response(404, json={"message": "Not Found"})
            items = self.releases[full_name]
            return httpx.Response(200, json=self._chunk(items, page, per_page), headers=headers)

        return httpx.Response(404, json={"message": "Not Found"})

    def _search_body(self, items, page, per_page) -> Dict[str, Any]:
        body: Dict[str, Any] = {"items": self._chunk(items, page, per_page)}
        if self.include_total_count:
            body["total_count"] = len(items)
        return body

    @staticmethod
    def _chunk(items, page, per_page):
        start = (page - 1) * per_page
        return items[start:start + per_page]
