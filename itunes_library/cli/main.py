#!/usr/bin/env python3
"""
🎵 iTunes Library - inspect exported iTunes / Music libraries
CLI interface with Typer and Rich
"""

import sys
from collections.abc import Mapping
from typing import Any, List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from itunes_library.core.config import get_config
from itunes_library.core.exceptions import ItunesLibraryError
from itunes_library.core.library import ItunesLibrary
from itunes_library.core.models import Track

# Configure Rich console
console = Console()

# Create Typer app
app = typer.Typer(
    name="itunes-library",
    help="🎵 Inspect exported iTunes / Music libraries",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Set up logging before running a command"""
    level = "DEBUG" if verbose else get_config().log_level
    logger.remove()
    logger.add(sys.stderr, level=level)


def _open_library(xml_path: str) -> ItunesLibrary:
    """Load a library or exit with an error message"""
    library = ItunesLibrary()
    try:
        with console.status("[bold green]Loading library...", spinner="dots"):
            library.open(xml_path)
    except ItunesLibraryError as e:
        console.print(f"[red]❌ Could not load library: {e}[/red]")
        raise typer.Exit(1)
    return library


def _format(value: Any) -> str:
    return "" if value is None else str(value)


def _tracks_table(title: str, tracks: List[Track]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Artist")
    table.add_column("Album")
    table.add_column("Genre", style="dim")

    for track in tracks:
        table.add_row(
            _format(track.track_id),
            _format(track.name),
            _format(track.artist),
            _format(track.album),
            _format(track.genre),
        )
    return table


@app.command()
def summary(
    xml_path: str = typer.Argument(..., help="Path to iTunes XML library file"),
) -> None:
    """📊 Show library metadata and counts"""
    library = _open_library(xml_path)

    banner = Text()
    banner.append("🎵 ", style="bold magenta")
    banner.append(xml_path, style="bold cyan")
    console.print(Panel(banner, style="cyan", padding=(1, 2)))

    table = Table(
        title="📊 Library Summary", show_header=True, header_style="bold magenta"
    )
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Major Version", _format(library.get_major_version()))
    table.add_row("Minor Version", _format(library.get_minor_version()))
    table.add_row("Application Version", _format(library.get_application_version()))
    table.add_row("Date", _format(library.get_date()))
    table.add_row("Features", _format(library.get_features()))
    table.add_row("Show Content Ratings", _format(library.get_show_content_ratings()))
    table.add_row("Persistent ID", _format(library.get_library_persistent_id()))
    table.add_row("Music Folder", _format(library.get_music_folder()))
    table.add_row("Tracks", str(len(library.get_all_tracks())))
    table.add_row("Playlists", str(len(library.get_all_playlists())))

    console.print(table)


@app.command()
def tracks(
    xml_path: str = typer.Argument(..., help="Path to iTunes XML library file"),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Show at most this many tracks"
    ),
) -> None:
    """🎶 List tracks"""
    library = _open_library(xml_path)
    all_tracks = library.get_all_tracks()
    shown = all_tracks[:limit] if limit else all_tracks

    console.print(_tracks_table(f"🎶 Tracks ({len(all_tracks)})", shown))
    if len(shown) < len(all_tracks):
        console.print(f"[dim]... {len(all_tracks) - len(shown)} more[/dim]")


@app.command()
def track(
    xml_path: str = typer.Argument(..., help="Path to iTunes XML library file"),
    track_id: int = typer.Argument(..., help="Track ID"),
) -> None:
    """🔎 Show a single track"""
    library = _open_library(xml_path)
    try:
        found = library.get_track_by_id(track_id)
    except ItunesLibraryError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"🔎 Track {track_id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, value in found.to_dict().items():
        table.add_row(name, _format(value))
    console.print(table)


@app.command()
def playlists(
    xml_path: str = typer.Argument(..., help="Path to iTunes XML library file"),
) -> None:
    """📋 List playlists"""
    library = _open_library(xml_path)
    all_playlists = library.get_all_playlists()

    table = Table(
        title=f"📋 Playlists ({len(all_playlists)})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Items", justify="right")
    table.add_column("Smart", justify="center")

    for playlist in all_playlists:
        table.add_row(
            _format(playlist.playlist_id),
            _format(playlist.name),
            str(playlist.item_count),
            "✓" if playlist.is_smart else "",
        )
    console.print(table)


@app.command()
def playlist(
    xml_path: str = typer.Argument(..., help="Path to iTunes XML library file"),
    playlist_id: int = typer.Argument(..., help="Playlist ID"),
    raw: bool = typer.Option(
        False, "--raw", help="Show track references without resolving them"
    ),
) -> None:
    """🎧 Show the tracks in a playlist"""
    library = _open_library(xml_path)
    try:
        found = library.get_playlist_by_id(playlist_id)
        items = found.get_playlist_items(resolve_full=not raw)
    except ItunesLibraryError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    title = f"🎧 {_format(found.name)} ({len(items)} items)"
    if raw:
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Track ID", style="cyan", justify="right")
        for item in items:
            track_id = item.get("track_id") if isinstance(item, Mapping) else None
            table.add_row(_format(track_id))
        console.print(table)
    else:
        console.print(_tracks_table(title, items))


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
