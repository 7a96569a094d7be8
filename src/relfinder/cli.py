"""
CLI entry point for relfinder.

Modified: 2026-10-19
"""

import asyncio
import logging
import sys
import webbrowser
from pathlib import Path
from typing import Optional

import click

from relfinder import __version__
from relfinder.config.settings import Settings, get_cache_dir
from relfinder.core.auth import GitHubAuth
from relfinder.core.exceptions import AuthenticationError, ConfigurationError, RelFinderError
from relfinder.core.models import AppState
from relfinder.core.store import StateStore
from relfinder.tui.ui.status_bar import format_context


def _setup_logging(level: str) -> None:
    """Send log records to a file so they don't draw over the TUI."""
    logging.basicConfig(
        filename=str(get_cache_dir() / "relfinder.log"),
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _make_store(settings: Settings) -> StateStore:
    return StateStore(
        db_path=settings.storage.resolved_db_path(),
        key=settings.storage.state_key,
    )


async def _load_state(store: StateStore) -> AppState:
    await store.initialize()
    return await store.load_or_blank()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config file (default: ~/.config/relfinder/config.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level for ~/.cache/relfinder/relfinder.log",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: str):
    """relfinder - find a GitHub release and its downloads."""
    _setup_logging(log_level)
    try:
        ctx.obj = Settings.load(config_path)
    except ConfigurationError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--callback-url",
    default=None,
    help="URL GitHub redirected to after authorizing (carries ?code=...)",
)
@click.pass_obj
def login(settings: Settings, callback_url: Optional[str]):
    """Log in with GitHub OAuth through the token relay."""
    store = _make_store(settings)
    auth = GitHubAuth(settings.github, store)

    if not callback_url:
        url = auth.authorize_url()
        click.echo("\n" + "=" * 60)
        click.echo("GitHub Authentication Required")
        click.echo("=" * 60)
        click.echo(f"\n1. Visit: {url}")
        click.echo("2. Authorize the app")
        click.echo("3. Paste the URL you were redirected to below\n")

        try:
            webbrowser.open(url)
        except webbrowser.Error:
            pass

        callback_url = click.prompt("Redirected URL").strip()

    code = auth.extract_code(callback_url)
    if not code:
        click.echo("✗ No authorization code found in that URL", err=True)
        sys.exit(1)

    async def _login() -> AppState:
        state = await _load_state(store)
        return await auth.complete_login(state, code)

    try:
        state = asyncio.run(_login())
        info = auth.get_user_info(state.session.auth_token)
    except AuthenticationError as e:
        click.echo(f"✗ Authentication failed: {e}", err=True)
        sys.exit(1)
    except RelFinderError as e:
        click.echo(f"✗ Unexpected error: {e}", err=True)
        sys.exit(1)

    click.echo("\n✓ Authentication successful!")
    click.echo(f"✓ Logged in as: {info['login']}")


@cli.command()
@click.pass_obj
def logout(settings: Settings):
    """Logout and remove the stored token."""
    store = _make_store(settings)
    auth = GitHubAuth(settings.github, store)

    async def _logout() -> None:
        state = await _load_state(store)
        await auth.revoke_credentials(state)

    try:
        asyncio.run(_logout())
        click.echo("✓ Successfully logged out")
    except RelFinderError as e:
        click.echo(f"✗ Error during logout: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--callback-url",
    default=None,
    help="URL GitHub redirected to after authorizing (carries ?code=...)",
)
@click.pass_obj
def tui(settings: Settings, callback_url: Optional[str]):
    """Launch the TUI interface."""
    try:
        from relfinder.tui.app import run_app

        asyncio.run(run_app(settings=settings, location=callback_url))
    except KeyboardInterrupt:
        click.echo("\nGoodbye!")
    except Exception as e:
        click.echo(f"✗ TUI error: {e}", err=True)
        import traceback
        traceback.print_exc()
        sys.exit(1)


@cli.command()
@click.pass_obj
def status(settings: Settings):
    """Show authentication and drill-down status."""
    click.echo(f"relfinder v{__version__}")
    store = _make_store(settings)
    auth = GitHubAuth(settings.github, store)

    state = asyncio.run(_load_state(store))
    session = state.session

    click.echo("\nAuthentication:")
    token = session.auth_token or settings.github.token
    if token:
        try:
            info = auth.get_user_info(token)
            source = "stored session" if session.auth_token else "GITHUB_TOKEN / config"
            click.echo(f"  ✓ Logged in as: {info['login']} ({source})")
            if info.get("name"):
                click.echo(f"  Name: {info['name']}")
            click.echo(f"  Public Repos: {info['public_repos']}")
        except AuthenticationError as e:
            click.echo(f"  ✗ {e}")
    else:
        click.echo(f"  ✗ Not authenticated ({session.auth_status.value}, run 'relfinder login')")

    cascade = state.cascade
    click.echo("\nSelection:")
    click.echo(f"  Path: {format_context(cascade)}")
    click.echo(f"  Step: {cascade.step.value}")
    if cascade.selected_release:
        click.echo(f"  Assets: {len(cascade.selected_release.assets)}")

    click.echo("\nState:")
    click.echo(f"  Location: {store.db_path}")


@cli.command()
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_obj
def reset(settings: Settings, yes: bool):
    """Forget the stored session and selections."""
    if not yes and not click.confirm("Remove the stored token and all selections?"):
        click.echo("Aborted")
        return

    store = _make_store(settings)

    async def _reset() -> None:
        await store.initialize()
        await store.clear()

    asyncio.run(_reset())
    click.echo("✓ State cleared")


if __name__ == "__main__":
    cli()
