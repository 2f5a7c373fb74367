"""
Rendering functions for committagger output.

Core functions return data, this module makes it human-readable.
"""

from datetime import datetime
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .domain import CacheEntry, TagMap

console = Console()


def _table(title: Optional[str], headers: List[str]) -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    for header in headers:
        table.add_column(header)
    return table


def _format_tags(tags: List[str]) -> str:
    return ", ".join(f"[cyan]{tag}[/cyan]" for tag in tags)


def render_resolved(result: Dict[str, List[str]], title: Optional[str] = None) -> None:
    """Render identifier -> tags as a table."""
    if not result:
        console.print("[yellow]No tags found.[/yellow]")
        return

    table = _table(title, ["Commit", "Tags"])
    for identifier, tags in result.items():
        table.add_row(identifier, _format_tags(tags))
    console.print(table)


def render_tag_map(tag_map: TagMap, title: Optional[str] = None) -> None:
    """Render a full tag map, one row per commit."""
    if not tag_map:
        console.print("[yellow]No tags found.[/yellow]")
        return

    table = _table(title, ["Commit", "Tags"])
    for identifier in sorted(tag_map):
        table.add_row(identifier[:12], _format_tags(tag_map[identifier]))
    console.print(table)
    console.print(f"[dim]{len(tag_map)} tagged commits[/dim]")


def render_commit_listing(identifiers: List[str], tags: Dict[str, List[str]],
                          title: Optional[str] = None) -> None:
    """Render a commit listing with tags next to the commits that have them."""
    if not identifiers:
        console.print("[yellow]No commits found.[/yellow]")
        return

    table = _table(title, ["Commit", "Tags"])
    for identifier in identifiers:
        table.add_row(identifier[:12], _format_tags(tags.get(identifier, [])) or "[dim]-[/dim]")
    console.print(table)


def render_cache_entries(entries: Dict[str, CacheEntry]) -> None:
    """Render the cached repositories with their age and size."""
    if not entries:
        console.print("[yellow]Cache is empty.[/yellow]")
        return

    table = _table("Tag cache", ["Repository", "Commits", "Cached at"])
    for repo, entry in sorted(entries.items()):
        cached_at = datetime.fromtimestamp(entry.timestamp / 1000).strftime('%Y-%m-%d %H:%M:%S')
        table.add_row(repo, str(len(entry.data)), cached_at)
    console.print(table)


def render_rate_limit(status: Dict) -> None:
    console.print(
        f"[bold]{status['remaining']}[/bold] / {status['limit']} requests remaining\n"
        f"Resets at {status['reset_at']}"
    )
