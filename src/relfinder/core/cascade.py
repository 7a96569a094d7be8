"""
Cascade state machine for the user → repository → release drill-down.

The reducer is a pure function ``reduce(state, event) -> state``. It never
performs I/O; the fetch an event calls for is computed separately by
``plan_fetch`` and executed by the controller, whose results come back in
as ``PageLoaded`` and ``FetchFinished`` events.

Every fetch is tagged with a key describing the query state it was issued
for (the user query text, the committed owner, the committed repository).
Pages whose key no longer matches the current state are dropped, so a slow
response for an outdated query cannot overwrite newer results.

Modified: 2026-10-19
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from relfinder.core.models import (
    Asset,
    CascadeState,
    Level,
    ReleaseCandidate,
    RepoCandidate,
    Step,
    UserCandidate,
)

logger = logging.getLogger(__name__)

Candidate = Union[UserCandidate, RepoCandidate, ReleaseCandidate]

DEFAULT_MIN_USER_QUERY_LENGTH = 2


# ==================== Events ====================


@dataclass(frozen=True)
class EditUserQuery:
    """Text typed into the user field."""

    text: str


@dataclass(frozen=True)
class CommitUser:
    """A user picked from the user dropdown."""

    user: UserCandidate


@dataclass(frozen=True)
class EditRepoQuery:
    """Text typed into the repository field."""

    text: str


@dataclass(frozen=True)
class CommitRepo:
    """A repository picked from the repository dropdown."""

    repo: RepoCandidate


@dataclass(frozen=True)
class EditReleaseQuery:
    """Text typed into the release field."""

    text: str


@dataclass(frozen=True)
class CommitRelease:
    """A release picked from the release dropdown."""

    release: ReleaseCandidate


@dataclass(frozen=True)
class PageLoaded:
    """One page of candidates arrived for a level."""

    level: Level
    page: int
    items: Tuple[Candidate, ...]
    key: str


@dataclass(frozen=True)
class FetchFinished:
    """The page chain for a level stopped (short page, error or cap)."""

    level: Level
    key: str


Event = Union[
    EditUserQuery,
    CommitUser,
    EditRepoQuery,
    CommitRepo,
    EditReleaseQuery,
    CommitRelease,
    PageLoaded,
    FetchFinished,
]


@dataclass(frozen=True)
class FetchRequest:
    """A fetch the cascade wants issued, starting at page 1."""

    level: Level
    key: str
    text: str = ""
    owner: str = ""
    repo: str = ""


# ==================== Keys ====================


def current_key(state: CascadeState, level: Level) -> Optional[str]:
    """
    Key a fetch for ``level`` would carry if issued from ``state`` now.

    Returns None when no fetch for that level can be current, e.g. the
    repository level after the user query was edited away from the
    committed user.
    """
    if level is Level.USER:
        return state.query_user

    user = state.selected_user
    if user is None or state.query_user != user.login:
        return None
    if level is Level.REPO:
        return user.login

    repo = state.selected_repo
    if repo is None or state.query_repo != repo.name:
        return None
    return repo.full_name


def is_stale(state: CascadeState, level: Level, key: str) -> bool:
    return current_key(state, level) != key


# ==================== Reducer ====================


def reduce(
    state: CascadeState,
    event: Event,
    *,
    min_user_query_length: int = DEFAULT_MIN_USER_QUERY_LENGTH,
    discard_stale: bool = True,
) -> CascadeState:
    """
    Apply one event to the cascade state.

    Args:
        state: Current state (left untouched)
        event: Event to apply
        min_user_query_length: User query length at which a search is issued
        discard_stale: Drop pages whose key no longer matches the state

    Returns:
        The next state (``state`` itself when the event is a no-op)
    """
    replace = dataclasses.replace

    if isinstance(event, EditUserQuery):
        fetching = len(event.text) >= min_user_query_length
        return replace(
            state,
            query_user=event.text,
            loading_user=fetching,
            query_repo="",
            selected_repo=None,
            repos=(),
            loading_repo=False,
            query_release="",
            releases=(),
            selected_release=None,
            loading_release=False,
            step=Step.REPO if state.selected_user is not None else Step.USER,
        )

    if isinstance(event, CommitUser):
        if not _is_candidate(event.user, state.users):
            logger.debug(f"Ignoring commit of unknown user {event.user.login!r}")
            return state
        return replace(
            state,
            query_user=event.user.login,
            selected_user=event.user,
            loading_user=False,
            query_repo="",
            selected_repo=None,
            repos=(),
            loading_repo=True,
            query_release="",
            releases=(),
            selected_release=None,
            loading_release=False,
            step=Step.REPO,
        )

    if isinstance(event, EditRepoQuery):
        return replace(
            state,
            query_repo=event.text,
            query_release="",
            releases=(),
            selected_release=None,
            loading_release=False,
        )

    if isinstance(event, CommitRepo):
        if not _is_candidate(event.repo, state.repos):
            logger.debug(f"Ignoring commit of unknown repo {event.repo.full_name!r}")
            return state
        return replace(
            state,
            query_repo=event.repo.name,
            selected_repo=event.repo,
            loading_repo=False,
            query_release="",
            releases=(),
            selected_release=None,
            loading_release=True,
            step=Step.VERSION,
        )

    if isinstance(event, EditReleaseQuery):
        return replace(state, query_release=event.text, selected_release=None)

    if isinstance(event, CommitRelease):
        if not _is_candidate(event.release, state.releases):
            logger.debug(f"Ignoring commit of unknown release {event.release.tag_name!r}")
            return state
        return replace(
            state,
            query_release=event.release.display_name,
            selected_release=event.release,
        )

    if isinstance(event, PageLoaded):
        if discard_stale and is_stale(state, event.level, event.key):
            logger.debug(f"Dropping stale page {event.page} for {event.level.value} {event.key!r}")
            return state
        return _apply_page(state, event)

    if isinstance(event, FetchFinished):
        if discard_stale and is_stale(state, event.level, event.key):
            return state
        return replace(state, **{_LOADING_FIELDS[event.level]: False})

    raise TypeError(f"Unknown cascade event: {event!r}")


_LIST_FIELDS = {Level.USER: "users", Level.REPO: "repos", Level.RELEASE: "releases"}
_LOADING_FIELDS = {
    Level.USER: "loading_user",
    Level.REPO: "loading_repo",
    Level.RELEASE: "loading_release",
}


def _apply_page(state: CascadeState, event: PageLoaded) -> CascadeState:
    field_name = _LIST_FIELDS[event.level]
    items = tuple(event.items)

    if event.page <= 1:
        if event.level is Level.USER:
            # Short logins are the likeliest exact matches
            items = tuple(sorted(items, key=lambda user: len(user.login)))
        merged = items
    else:
        merged = getattr(state, field_name) + items

    return dataclasses.replace(state, **{field_name: merged})


def _is_candidate(candidate: Candidate, candidates: Tuple[Candidate, ...]) -> bool:
    return any(c.id == candidate.id for c in candidates)


# ==================== Fetch planning ====================


def plan_fetch(
    state: CascadeState,
    event: Event,
    *,
    min_user_query_length: int = DEFAULT_MIN_USER_QUERY_LENGTH,
) -> Optional[FetchRequest]:
    """
    Work out which fetch ``event`` triggers.

    Args:
        state: The state *after* ``event`` was reduced
        event: The event just applied
        min_user_query_length: User query length at which a search is issued

    Returns:
        FetchRequest to run from page 1, or None
    """
    if isinstance(event, EditUserQuery):
        if len(event.text) >= min_user_query_length:
            return FetchRequest(level=Level.USER, key=event.text, text=event.text)
        return None

    if isinstance(event, CommitUser):
        if state.selected_user != event.user:
            return None
        login = event.user.login
        return FetchRequest(level=Level.REPO, key=login, owner=login, text=state.query_repo)

    if isinstance(event, CommitRepo):
        if state.selected_repo != event.repo:
            return None
        owner = event.repo.owner or (state.selected_user.login if state.selected_user else "")
        return FetchRequest(
            level=Level.RELEASE,
            key=event.repo.full_name,
            owner=owner,
            repo=event.repo.name,
        )

    return None


def transition(
    state: CascadeState,
    event: Event,
    *,
    min_user_query_length: int = DEFAULT_MIN_USER_QUERY_LENGTH,
    discard_stale: bool = True,
) -> Tuple[CascadeState, Optional[FetchRequest]]:
    """Reduce ``event`` and plan its fetch in one call."""
    new_state = reduce(
        state,
        event,
        min_user_query_length=min_user_query_length,
        discard_stale=discard_stale,
    )
    return new_state, plan_fetch(new_state, event, min_user_query_length=min_user_query_length)


# ==================== Views ====================


def visible_users(state: CascadeState) -> Tuple[UserCandidate, ...]:
    """Users whose login starts with the query, case-insensitively."""
    query = state.query_user.casefold()
    return tuple(u for u in state.users if u.login.casefold().startswith(query))


def visible_repos(state: CascadeState) -> Tuple[RepoCandidate, ...]:
    """Repositories whose name contains the query, case-insensitively."""
    query = state.query_repo.casefold()
    return tuple(r for r in state.repos if query in r.name.casefold())


def visible_releases(state: CascadeState) -> Tuple[ReleaseCandidate, ...]:
    """Releases whose display name contains the query, case-insensitively."""
    query = state.query_release.casefold()
    return tuple(r for r in state.releases if query in r.display_name.casefold())


def visible_assets(state: CascadeState) -> Tuple[Asset, ...]:
    """Assets of the committed release; empty until a release is committed."""
    if state.selected_release is None:
        return ()
    return state.selected_release.assets
