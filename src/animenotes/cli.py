"""CLI interface for Anime Notes."""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from animenotes import __version__
from animenotes.config import Settings, get_settings
from animenotes.database.repository import NoteRepository
from animenotes.database.storage import KeyValueStore
from animenotes.models.note import NoteSource
from animenotes.models.result import NoticeLevel
from animenotes.services.anilist_client import AniListClient
from animenotes.services.anime_lookup import AnimeLookup
from animenotes.services.mode_policy import ModePolicy
from animenotes.services.remote_notes import RemoteNoteGateway
from animenotes.services.session import NotesSession
from animenotes.services.view_state import ViewStateMachine

app = typer.Typer(
    name="animenotes",
    help="Keep notes on anime locally and in sync with your AniList list.",
    no_args_is_help=True,
)
console = Console()

NOTICE_STYLES = {
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.INFO: "yellow",
    NoticeLevel.ERROR: "red",
}


def load_settings() -> Settings:
    """Load settings or exit with a readable error."""
    try:
        return get_settings()
    except Exception as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        console.print("\nMake sure you have a .env file with ANIMENOTES_* settings.")
        raise typer.Exit(1)


def get_repository(settings: Settings) -> NoteRepository:
    """Get repository instance, ensuring data directory exists."""
    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    return NoteRepository(KeyValueStore(settings.database_url), settings.storage_key)


def get_state_machine(settings: Settings, source: Optional[NoteSource] = None) -> ViewStateMachine:
    """Wire up one session's components from settings."""
    policy = ModePolicy.from_preference(settings.sync_mode)
    client = AniListClient(url=settings.anilist_api_url, timeout=settings.anilist_timeout)
    gateway = RemoteNoteGateway(
        client,
        token=settings.anilist_token,
        chunk_size=settings.list_chunk_size,
    )
    session = NotesSession()
    if source is not None:
        session.view_mode = source
    return ViewStateMachine(
        policy=policy,
        session=session,
        repository=get_repository(settings),
        gateway=gateway,
        lookup=AnimeLookup(client),
        settle_delay=settings.settle_delay,
    )


def print_notices(machine: ViewStateMachine) -> None:
    for notice in machine.session.drain_notices():
        style = NOTICE_STYLES.get(notice.level, "white")
        console.print(f"[{style}]{escape(notice.message)}[/{style}]")


def render_view(machine: ViewStateMachine) -> None:
    """Print the machine's current view."""
    view = machine.render()
    console.print(f"\n[bold blue]{escape(view.header)}[/bold blue]")

    if view.search:
        console.print(f"  Search: [cyan]{escape(view.search)}[/cyan]")

    if view.rows:
        table = Table(show_lines=True)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Note")
        table.add_column("Actions", style="dim")
        for row in view.rows:
            table.add_row(
                str(row.id),
                escape(row.title),
                escape(row.text) if row.text else "[dim](empty)[/dim]",
                ", ".join(action.value for action in row.actions),
            )
        console.print(table)
    elif view.message:
        console.print(f"[yellow]{view.message}[/yellow]")

    if view.actions:
        console.print(
            "  [dim]Available: " + ", ".join(action.value for action in view.actions) + "[/dim]"
        )


@app.command()
def show(
    media_id: int = typer.Argument(..., help="AniList media id"),
    source: Optional[NoteSource] = typer.Option(
        None, "--source", "-s", help="Source to read from (dual-view mode only)"
    ),
):
    """Show the note for one anime."""
    machine = get_state_machine(load_settings(), source)
    machine.select(media_id)
    print_notices(machine)
    render_view(machine)


@app.command()
def edit(
    media_id: int = typer.Argument(..., help="AniList media id"),
    text: str = typer.Argument(..., help="New note text"),
    source: Optional[NoteSource] = typer.Option(
        None, "--source", "-s", help="Source to write to (dual-view mode only)"
    ),
):
    """Save a note for one anime."""
    machine = get_state_machine(load_settings(), source)
    machine.select(media_id)
    machine.edit_single(text)
    machine.save()
    print_notices(machine)
    render_view(machine)


@app.command()
def delete(
    media_id: int = typer.Argument(..., help="AniList media id"),
    source: Optional[NoteSource] = typer.Option(
        None, "--source", "-s", help="Source to delete from (dual-view mode only)"
    ),
):
    """Delete the note for one anime."""
    machine = get_state_machine(load_settings(), source)
    machine.select(media_id)
    machine.delete()
    print_notices(machine)


@app.command()
def fetch(media_id: int = typer.Argument(..., help="AniList media id")):
    """Fetch one anime's note from AniList into the local store."""
    machine = get_state_machine(load_settings())
    machine.select(media_id)
    machine.fetch()
    print_notices(machine)
    render_view(machine)


@app.command("list")
def list_notes(
    source: Optional[NoteSource] = typer.Option(
        None, "--source", "-s", help="Source to list (dual-view mode only)"
    ),
    search: str = typer.Option("", "--search", "-q", help="Filter by title or note text"),
):
    """List all notes."""
    machine = get_state_machine(load_settings(), source)
    with console.status("[yellow]Loading notes...[/yellow]"):
        machine.view_all()
    machine.set_search(search)
    print_notices(machine)
    render_view(machine)


@app.command("fetch-all")
def fetch_all():
    """Fetch every note from your AniList list."""
    machine = get_state_machine(load_settings())
    with console.status("[yellow]Fetching notes from AniList...[/yellow]"):
        machine.fetch_all()
    print_notices(machine)
    render_view(machine)


@app.command("push-all")
def push_all():
    """Push every local note to AniList."""
    machine = get_state_machine(load_settings())
    with console.status("[yellow]Pushing notes to AniList...[/yellow]"):
        machine.push_all()
    print_notices(machine)


@app.command()
def config():
    """Show current configuration."""
    settings = load_settings()
    policy = ModePolicy.from_preference(settings.sync_mode)

    table = Table(title="Anime Notes Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    token_masked = (
        settings.anilist_token[:10] + "..." if len(settings.anilist_token) > 10 else "***"
    ) if settings.anilist_token else "(not set)"

    table.add_row("Mode", policy.mode.value)
    table.add_row("  View Toggle", str(policy.enable_view_toggle))
    table.add_row("  Push Mode", policy.push_mode.value)
    table.add_row("  Fetch Mode", policy.fetch_mode.value)
    table.add_row("AniList Token", token_masked)
    table.add_row("AniList API URL", settings.anilist_api_url)
    table.add_row("Database Path", str(settings.database_path))
    table.add_row("Storage Key", settings.storage_key)

    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"Anime Notes v{__version__}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Anime Notes - notes for your anime, locally and on AniList.

    Reads and writes notes according to the configured mode
    (local-only, anilist-only, local-anilist-synced or dual-view).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


if __name__ == "__main__":
    app()
