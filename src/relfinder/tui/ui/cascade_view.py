"""Cascade view for relfinder.

Three stacked input-with-dropdown pickers (user, repository, release) and
the asset pane for the committed release.

Modified: 2026-10-19
"""

from typing import Any, Optional, Sequence, Tuple

from rich.style import Style
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.widget import Widget
from textual.widgets import Input, Label, LoadingIndicator, OptionList, Static
from textual.widgets.option_list import Option

from ...core import cascade
from ...core.models import CascadeState, Level, ReleaseCandidate, Step
from ..messages import CandidateChosen, QueryEdited


def describe_candidate(level: Level, candidate: Any) -> Text:
    """One dropdown line for a candidate."""
    if level is Level.USER:
        return Text(candidate.login)
    if level is Level.REPO:
        return Text.assemble(candidate.name, ("  " + candidate.description[:60], "dim"))
    return Text.assemble(candidate.display_name, ("  " + candidate.format_published(), "dim"))


def describe_release(release: ReleaseCandidate) -> Text:
    """Asset pane body: heading, release page link and one line per asset."""
    lines = [
        Text.assemble(
            (release.display_name, "bold"),
            f"  ({release.tag_name}, {release.format_published()})",
        )
    ]
    if release.html_url:
        lines.append(Text("Release page", style=Style(link=release.html_url)))
    lines.append(Text())

    if not release.assets:
        lines.append(Text("No assets attached to this release", style="dim"))
    for asset in release.assets:
        lines.append(
            Text.assemble(
                (asset.name, Style(link=asset.browser_download_url)),
                (f"  {asset.format_size()}, {asset.download_count:,} downloads", "dim"),
            )
        )
    return Text("\n").join(lines)


class LevelPicker(Vertical):
    """Text input plus a filtered dropdown for one cascade level."""

    DEFAULT_CSS = """
    LevelPicker {
        height: auto;
        margin-bottom: 1;
    }

    LevelPicker > .picker-label {
        text-style: bold;
    }

    LevelPicker > OptionList {
        height: auto;
        max-height: 10;
    }

    LevelPicker > LoadingIndicator {
        height: 1;
    }
    """

    def __init__(self, level: Level, label: str, placeholder: str, **kwargs):
        super().__init__(**kwargs)
        self.level = level
        self.label = label
        self.placeholder = placeholder
        self.candidates: Tuple[Any, ...] = ()
        self._query = ""

    def compose(self) -> ComposeResult:
        yield Label(self.label, classes="picker-label")
        yield Input(placeholder=self.placeholder)
        yield LoadingIndicator()
        yield OptionList()

    def on_mount(self) -> None:
        self.query_one(LoadingIndicator).display = False
        self.query_one(OptionList).display = False

    def show(self, query: str, candidates: Sequence[Any], loading: bool, committed: bool) -> None:
        """Bring the picker in line with the cascade state.

        Args:
            query: Query text for this level
            candidates: Candidates passing the visibility filter
            loading: Whether a fetch for this level is outstanding
            committed: Whether the level's current query is a committed pick
        """
        self._query = query
        text_input = self.query_one(Input)
        if text_input.value != query:
            with text_input.prevent(Input.Changed):
                text_input.value = query

        candidates = tuple(candidates)
        option_list = self.query_one(OptionList)
        if candidates != self.candidates:
            self.candidates = candidates
            option_list.clear_options()
            option_list.add_options(
                [Option(describe_candidate(self.level, c)) for c in candidates]
            )

        self.query_one(LoadingIndicator).display = loading and not candidates
        option_list.display = bool(candidates) and not committed

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        if event.value == self._query:
            return
        self._query = event.value
        self.post_message(QueryEdited(self.level, event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter in the field picks the first visible candidate."""
        event.stop()
        if self.candidates:
            self.post_message(CandidateChosen(self.level, self.candidates[0]))

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        index = event.option_index
        if 0 <= index < len(self.candidates):
            self.post_message(CandidateChosen(self.level, self.candidates[index]))


class AssetPane(VerticalScroll):
    """Downloadable assets of the committed release."""

    DEFAULT_CSS = """
    AssetPane {
        height: 1fr;
        border-top: solid $accent;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("", id="asset-content")

    def show_release(self, release: Optional[ReleaseCandidate]) -> None:
        """Render ``release`` with its asset links, or clear the pane."""
        self.display = release is not None
        if release is None:
            return

        self.query_one("#asset-content", Static).update(describe_release(release))


class CascadeView(Widget):
    """The user → repository → release drill-down."""

    DEFAULT_CSS = """
    CascadeView {
        layout: vertical;
        width: 100%;
        height: 100%;
        padding: 1 2;
    }
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_picker: Optional[LevelPicker] = None
        self.repo_picker: Optional[LevelPicker] = None
        self.release_picker: Optional[LevelPicker] = None
        self.asset_pane: Optional[AssetPane] = None

    def compose(self) -> ComposeResult:
        self.user_picker = LevelPicker(Level.USER, "User", "GitHub login", id="user-picker")
        self.repo_picker = LevelPicker(Level.REPO, "Repository", "Filter repositories", id="repo-picker")
        self.release_picker = LevelPicker(
            Level.RELEASE, "Version", "Filter releases", id="release-picker"
        )
        self.asset_pane = AssetPane(id="asset-pane")

        yield self.user_picker
        yield self.repo_picker
        yield self.release_picker
        yield self.asset_pane

    def render_state(self, state: CascadeState) -> None:
        """Show the levels and candidates ``state`` calls for."""
        if not self.user_picker:
            return

        user = state.selected_user
        repo = state.selected_repo
        self.user_picker.show(
            state.query_user,
            cascade.visible_users(state),
            state.loading_user,
            committed=user is not None and state.query_user == user.login,
        )

        self.repo_picker.display = state.step is not Step.USER
        self.repo_picker.show(
            state.query_repo,
            cascade.visible_repos(state),
            state.loading_repo,
            committed=repo is not None and state.query_repo == repo.name,
        )

        self.release_picker.display = state.step is Step.VERSION
        self.release_picker.show(
            state.query_release,
            cascade.visible_releases(state),
            state.loading_release,
            committed=state.selected_release is not None,
        )

        self.asset_pane.show_release(state.selected_release)

    def focus_step(self, state: CascadeState) -> None:
        """Move focus to the input of the deepest visible level."""
        picker = {
            Step.USER: self.user_picker,
            Step.REPO: self.repo_picker,
            Step.VERSION: self.release_picker,
        }[state.step]
        if picker:
            picker.query_one(Input).focus()
