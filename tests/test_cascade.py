"""
Tests for the cascade reducer and fetch planning.

Created: 2026-10-19
"""

import pytest

from relfinder.core.cascade import (
    CommitRelease,
    CommitRepo,
    CommitUser,
    EditReleaseQuery,
    EditRepoQuery,
    EditUserQuery,
    FetchFinished,
    FetchRequest,
    PageLoaded,
    current_key,
    plan_fetch,
    reduce,
    transition,
    visible_assets,
    visible_releases,
    visible_repos,
    visible_users,
)
from relfinder.core.models import CascadeState, Level, Step
from tests.utils import make_release, make_repo, make_user


OCTOCAT = make_user(1, "octocat")
HELLO = make_repo(10, "octocat", "Hello-World")
SPOON = make_repo(11, "octocat", "Spoon-Knife")
V1 = make_release(100, "v1.0.0", ["hello.zip"])
V2 = make_release(101, "v2.0.0", ["hello-2.zip", "hello-2.tar.gz"])


def run(state, *events, **kwargs):
    for event in events:
        state = reduce(state, event, **kwargs)
    return state


@pytest.fixture
def with_users():
    """State after searching for 'octo' and receiving one page."""
    users = (OCTOCAT, make_user(2, "octo"), make_user(3, "octopus"))
    return run(
        CascadeState(),
        EditUserQuery("octo"),
        PageLoaded(Level.USER, 1, users, key="octo"),
    )


@pytest.fixture
def at_release_step(with_users):
    """State with octocat/Hello-World committed and two releases loaded."""
    return run(
        with_users,
        CommitUser(OCTOCAT),
        PageLoaded(Level.REPO, 1, (HELLO, SPOON), key="octocat"),
        CommitRepo(HELLO),
        PageLoaded(Level.RELEASE, 1, (V1, V2), key="octocat/Hello-World"),
        FetchFinished(Level.RELEASE, key="octocat/Hello-World"),
    )


class TestUserQuery:
    """Test editing the user field."""

    @pytest.mark.parametrize("text", ["", "o"])
    def test_short_query_does_not_fetch(self, text):
        state, request = transition(CascadeState(), EditUserQuery(text))

        assert request is None
        assert state.query_user == text
        assert state.loading_user is False

    def test_query_of_min_length_fetches(self):
        state, request = transition(CascadeState(), EditUserQuery("oc"))

        assert request == FetchRequest(level=Level.USER, key="oc", text="oc")
        assert state.loading_user is True

    def test_min_length_is_configurable(self):
        _, request = transition(CascadeState(), EditUserQuery("oc"), min_user_query_length=3)
        assert request is None

        _, request = transition(CascadeState(), EditUserQuery("o"), min_user_query_length=1)
        assert request is not None

    def test_edit_clears_downstream(self, at_release_step):
        state = reduce(at_release_step, EditUserQuery("octocat-bot"))

        assert state.selected_repo is None
        assert state.repos == ()
        assert state.query_repo == ""
        assert state.releases == ()
        assert state.selected_release is None
        assert state.loading_repo is False
        assert state.loading_release is False
        assert state.step is Step.REPO

    def test_edit_without_committed_user_stays_on_user_step(self):
        state = reduce(CascadeState(), EditUserQuery("octo"))
        assert state.step is Step.USER


class TestCommit:
    """Test committing a selection at each level."""

    def test_commit_user_resets_repo_and_release(self, at_release_step):
        state, request = transition(at_release_step, CommitUser(OCTOCAT))

        assert state.selected_user == OCTOCAT
        assert state.query_user == "octocat"
        assert state.query_repo == ""
        assert state.selected_repo is None
        assert state.repos == ()
        assert state.query_release == ""
        assert state.releases == ()
        assert state.selected_release is None
        assert state.step is Step.REPO
        assert state.loading_repo is True
        assert request == FetchRequest(level=Level.REPO, key="octocat", owner="octocat", text="")

    def test_commit_repo_resets_release(self, at_release_step):
        state = reduce(at_release_step, CommitRelease(V1))
        state = reduce(state, PageLoaded(Level.REPO, 1, (HELLO, SPOON), key="octocat"))
        state, request = transition(state, CommitRepo(SPOON))

        assert state.selected_repo == SPOON
        assert state.query_repo == "Spoon-Knife"
        assert state.query_release == ""
        assert state.releases == ()
        assert state.selected_release is None
        assert state.step is Step.VERSION
        assert state.loading_release is True
        assert request == FetchRequest(
            level=Level.RELEASE,
            key="octocat/Spoon-Knife",
            owner="octocat",
            repo="Spoon-Knife",
        )

    def test_commit_release_shows_assets(self, at_release_step):
        state = reduce(at_release_step, CommitRelease(V2))

        assert state.selected_release == V2
        assert state.query_release == "Release v2.0.0"
        assert [a.name for a in visible_assets(state)] == ["hello-2.zip", "hello-2.tar.gz"]
        assert state.step is Step.VERSION

    def test_commit_release_does_not_fetch(self, at_release_step):
        _, request = transition(at_release_step, CommitRelease(V1))
        assert request is None

    def test_commit_of_unknown_candidate_is_ignored(self, with_users):
        stranger = make_user(99, "stranger")
        state, request = transition(with_users, CommitUser(stranger))

        assert state is with_users
        assert request is None

    def test_commit_of_unknown_repo_is_ignored(self, at_release_step):
        other = make_repo(42, "someone", "elsewhere")
        state, request = transition(at_release_step, CommitRepo(other))

        assert state is at_release_step
        assert request is None


class TestQueryEdits:
    """Test the repository and release text fields."""

    def test_edit_release_clears_selection_and_is_idempotent(self, at_release_step):
        committed = reduce(at_release_step, CommitRelease(V1))

        once = reduce(committed, EditReleaseQuery("v2"))
        twice = reduce(once, EditReleaseQuery("v2"))

        assert once.selected_release is None
        assert once.query_release == "v2"
        assert once == twice
        assert once.releases == (V1, V2)
        assert visible_assets(once) == ()

    def test_edit_repo_clears_releases_but_keeps_step(self, at_release_step):
        state, request = transition(at_release_step, EditRepoQuery("Spoon"))

        assert request is None
        assert state.query_repo == "Spoon"
        assert state.releases == ()
        assert state.selected_release is None
        assert state.selected_repo == HELLO
        assert state.step is Step.VERSION
        assert current_key(state, Level.RELEASE) is None


class TestPages:
    """Test page merging."""

    def test_first_page_replaces_and_sorts_users_by_login_length(self):
        state = reduce(CascadeState(), EditUserQuery("octo"))
        users = (make_user(4, "octopus"), OCTOCAT, make_user(2, "octo"))

        state = reduce(state, PageLoaded(Level.USER, 1, users, key="octo"))

        assert [u.login for u in state.users] == ["octo", "octopus", "octocat"]

    def test_later_pages_append_unsorted(self, with_users):
        extra = (make_user(5, "octocat-the-longest"), make_user(6, "oc"))
        state = reduce(with_users, PageLoaded(Level.USER, 2, extra, key="octo"))

        assert [u.login for u in state.users][-2:] == ["octocat-the-longest", "oc"]
        assert len(state.users) == 5

    def test_first_page_replaces_previous_list(self, with_users):
        state = reduce(with_users, EditUserQuery("octop"))
        state = reduce(state, PageLoaded(Level.USER, 1, (make_user(4, "octopus"),), key="octop"))

        assert [u.login for u in state.users] == ["octopus"]

    def test_page_concatenation_is_associative(self, at_release_step):
        releases = [make_release(200 + i, f"v3.{i}") for i in range(6)]
        base = reduce(at_release_step, CommitRepo(HELLO))
        key = "octocat/Hello-World"

        one_by_one = run(
            base,
            PageLoaded(Level.RELEASE, 1, tuple(releases[:2]), key=key),
            PageLoaded(Level.RELEASE, 2, tuple(releases[2:4]), key=key),
            PageLoaded(Level.RELEASE, 3, tuple(releases[4:]), key=key),
        )
        two_pages = run(
            base,
            PageLoaded(Level.RELEASE, 1, tuple(releases[:2]), key=key),
            PageLoaded(Level.RELEASE, 2, tuple(releases[2:]), key=key),
        )

        assert one_by_one.releases == two_pages.releases == tuple(releases)

    def test_stale_user_page_is_dropped(self):
        state = run(CascadeState(), EditUserQuery("oc"), EditUserQuery("octo"))
        stale = reduce(state, PageLoaded(Level.USER, 1, (make_user(7, "ocelot"),), key="oc"))

        assert stale is state

    def test_stale_pages_kept_when_discarding_disabled(self):
        state = run(CascadeState(), EditUserQuery("oc"), EditUserQuery("octo"))
        state = reduce(
            state,
            PageLoaded(Level.USER, 1, (make_user(7, "ocelot"),), key="oc"),
            discard_stale=False,
        )

        assert [u.login for u in state.users] == ["ocelot"]

    def test_release_page_for_previous_repo_is_dropped(self, at_release_step):
        state = run(
            at_release_step,
            CommitRepo(SPOON),
            PageLoaded(Level.RELEASE, 2, (make_release(300, "old"),), key="octocat/Hello-World"),
        )

        assert state.releases == ()

    def test_repo_page_dropped_after_user_query_edit(self, at_release_step):
        state = reduce(at_release_step, EditUserQuery("octop"))
        after = reduce(state, PageLoaded(Level.REPO, 1, (HELLO,), key="octocat"))

        assert after is state


class TestFetchFinished:
    """Test loading flags."""

    def test_finished_clears_loading(self, with_users):
        assert with_users.loading_user is True

        state = reduce(with_users, FetchFinished(Level.USER, key="octo"))

        assert state.loading_user is False

    def test_stale_finish_leaves_loading_set(self, with_users):
        state = reduce(with_users, EditUserQuery("octop"))
        state = reduce(state, FetchFinished(Level.USER, key="octo"))

        assert state.loading_user is True


class TestPlanFetch:
    """Test fetch planning on its own."""

    def test_edits_of_repo_and_release_never_fetch(self, at_release_step):
        assert plan_fetch(at_release_step, EditRepoQuery("Hello")) is None
        assert plan_fetch(at_release_step, EditReleaseQuery("v1")) is None

    def test_page_events_never_fetch(self, with_users):
        event = PageLoaded(Level.USER, 1, (), key="octo")
        assert plan_fetch(with_users, event) is None


class TestVisibleCandidates:
    """Test dropdown filtering."""

    def test_users_filtered_by_prefix(self, with_users):
        state = reduce(with_users, EditUserQuery("OCTOP"))
        state = reduce(state, PageLoaded(Level.USER, 1, with_users.users, key="OCTOP"))

        assert [u.login for u in visible_users(state)] == ["octopus"]

    def test_repos_filtered_by_substring(self, at_release_step):
        state = reduce(at_release_step, EditRepoQuery("knife"))
        state = reduce(state, PageLoaded(Level.REPO, 1, (HELLO, SPOON), key="octocat"))

        assert visible_repos(state) == (SPOON,)

    def test_releases_filtered_by_display_name(self, at_release_step):
        state = reduce(at_release_step, EditReleaseQuery("V2"))
        assert visible_releases(state) == (V2,)

    def test_empty_query_shows_everything(self, at_release_step):
        assert visible_releases(at_release_step) == (V1, V2)


def test_unknown_event_raises():
    with pytest.raises(TypeError):
        reduce(CascadeState(), object())
