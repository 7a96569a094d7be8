"""
Core data models for relfinder.

Candidates mirror the GitHub REST payloads they are built from; the cascade
and session records make up the single persisted UI state blob.

Modified: 2026-10-19
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from dateutil import parser as date_parser


class AuthStatus(Enum):
    """Where the session is in the OAuth handshake."""

    UNAUTHENTICATED = "unauthenticated"
    EXCHANGING = "exchanging"
    AUTHENTICATED = "authenticated"


class Step(Enum):
    """Deepest cascade level currently visible."""

    USER = "user"
    REPO = "repo"
    VERSION = "version"


class Level(Enum):
    """One of the three cascade levels."""

    USER = "user"
    REPO = "repo"
    RELEASE = "release"


@dataclass(frozen=True)
class Session:
    """OAuth session for the local user."""

    auth_token: Optional[str] = None
    auth_status: AuthStatus = AuthStatus.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.auth_status is AuthStatus.AUTHENTICATED and bool(self.auth_token)

    def to_dict(self) -> Dict[str, Any]:
        return {"auth_token": self.auth_token, "auth_status": self.auth_status.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            auth_token=data.get("auth_token") or None,
            auth_status=AuthStatus(data.get("auth_status", AuthStatus.UNAUTHENTICATED.value)),
        )


@dataclass(frozen=True)
class Asset:
    """A downloadable file attached to a release."""

    id: str
    name: str
    browser_download_url: str
    size: int = 0
    download_count: int = 0

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "Asset":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            browser_download_url=data.get("browser_download_url") or "",
            size=data.get("size") or 0,
            download_count=data.get("download_count") or 0,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Asset":
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "browser_download_url": self.browser_download_url,
            "size": self.size,
            "download_count": self.download_count,
        }

    def format_size(self) -> str:
        """Format byte size for display (e.g., 3.4 MB)."""
        if self.size < 1024:
            return f"{self.size} B"

        size = float(self.size)
        for unit in ("KB", "MB"):
            size /= 1024
            if size < 1024:
                return f"{size:.1f} {unit}"
        return f"{size / 1024:.1f} GB"


@dataclass(frozen=True)
class UserCandidate:
    """A GitHub account returned by user search."""

    id: str
    login: str
    avatar_url: str = ""
    html_url: str = ""

    @property
    def display_name(self) -> str:
        return self.login

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "UserCandidate":
        """Create from one item of ``GET /search/users``."""
        return cls(
            id=str(data["id"]),
            login=data["login"],
            avatar_url=data.get("avatar_url") or "",
            html_url=data.get("html_url") or "",
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserCandidate":
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "login": self.login,
            "avatar_url": self.avatar_url,
            "html_url": self.html_url,
        }


@dataclass(frozen=True)
class RepoCandidate:
    """A repository returned by owner-scoped repository search."""

    id: str
    name: str
    full_name: str
    owner: str
    description: str = ""
    html_url: str = ""

    @property
    def display_name(self) -> str:
        return self.name

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "RepoCandidate":
        """Create from one item of ``GET /search/repositories``."""
        owner = (data.get("owner") or {}).get("login", "")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            full_name=data.get("full_name") or f"{owner}/{data['name']}",
            owner=owner,
            description=data.get("description") or "",
            html_url=data.get("html_url") or "",
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepoCandidate":
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "full_name": self.full_name,
            "owner": self.owner,
            "description": self.description,
            "html_url": self.html_url,
        }


@dataclass(frozen=True)
class ReleaseCandidate:
    """
    A published release of the committed repository.

    Releases without a title fall back to their tag for display, matching
    how GitHub's own release list renders them.
    """

    id: str
    tag_name: str
    name: str = ""
    published_at: Optional[datetime] = None
    html_url: str = ""
    assets: Tuple[Asset, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name or self.tag_name

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "ReleaseCandidate":
        """Create from one item of ``GET /repos/{owner}/{repo}/releases``."""
        return cls(
            id=str(data["id"]),
            tag_name=data.get("tag_name") or "",
            name=data.get("name") or "",
            published_at=_parse_datetime(data.get("published_at")),
            html_url=data.get("html_url") or "",
            assets=tuple(Asset.from_github_response(a) for a in data.get("assets") or []),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseCandidate":
        data = data.copy()
        data["published_at"] = _parse_datetime(data.get("published_at"))
        data["assets"] = tuple(Asset.from_dict(a) for a in data.get("assets", []))
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tag_name": self.tag_name,
            "name": self.name,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "html_url": self.html_url,
            "assets": [asset.to_dict() for asset in self.assets],
        }

    def format_published(self) -> str:
        if not self.published_at:
            return "unpublished"
        return self.published_at.strftime("%Y-%m-%d")


@dataclass(frozen=True)
class CascadeState:
    """
    The drill-down record for the three cascade levels.

    Each level keeps its query text, its committed selection and the
    candidates from the latest fetch. Instances are never mutated; the
    reducer in ``relfinder.core.cascade`` returns a new one per event.
    """

    query_user: str = ""
    selected_user: Optional[UserCandidate] = None
    users: Tuple[UserCandidate, ...] = ()
    query_repo: str = ""
    selected_repo: Optional[RepoCandidate] = None
    repos: Tuple[RepoCandidate, ...] = ()
    query_release: str = ""
    releases: Tuple[ReleaseCandidate, ...] = ()
    selected_release: Optional[ReleaseCandidate] = None
    step: Step = Step.USER
    loading_user: bool = False
    loading_repo: bool = False
    loading_release: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query_user": self.query_user,
            "selected_user": self.selected_user.to_dict() if self.selected_user else None,
            "users": [user.to_dict() for user in self.users],
            "query_repo": self.query_repo,
            "selected_repo": self.selected_repo.to_dict() if self.selected_repo else None,
            "repos": [repo.to_dict() for repo in self.repos],
            "query_release": self.query_release,
            "releases": [release.to_dict() for release in self.releases],
            "selected_release": self.selected_release.to_dict() if self.selected_release else None,
            "step": self.step.value,
            "loading_user": self.loading_user,
            "loading_repo": self.loading_repo,
            "loading_release": self.loading_release,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CascadeState":
        selected_user = data.get("selected_user")
        selected_repo = data.get("selected_repo")
        selected_release = data.get("selected_release")
        return cls(
            query_user=data.get("query_user", ""),
            selected_user=UserCandidate.from_dict(selected_user) if selected_user else None,
            users=tuple(UserCandidate.from_dict(u) for u in data.get("users", [])),
            query_repo=data.get("query_repo", ""),
            selected_repo=RepoCandidate.from_dict(selected_repo) if selected_repo else None,
            repos=tuple(RepoCandidate.from_dict(r) for r in data.get("repos", [])),
            query_release=data.get("query_release", ""),
            releases=tuple(ReleaseCandidate.from_dict(r) for r in data.get("releases", [])),
            selected_release=(
                ReleaseCandidate.from_dict(selected_release) if selected_release else None
            ),
            step=Step(data.get("step", Step.USER.value)),
            loading_user=bool(data.get("loading_user", False)),
            loading_repo=bool(data.get("loading_repo", False)),
            loading_release=bool(data.get("loading_release", False)),
        )


@dataclass(frozen=True)
class AppState:
    """Everything that is persisted between runs."""

    session: Session = field(default_factory=Session)
    cascade: CascadeState = field(default_factory=CascadeState)

    @classmethod
    def blank(cls) -> "AppState":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {"session": self.session.to_dict(), "cascade": self.cascade.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppState":
        return cls(
            session=Session.from_dict(data["session"]),
            cascade=CascadeState.from_dict(data["cascade"]),
        )


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp from GitHub or the state blob."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return date_parser.parse(value)
