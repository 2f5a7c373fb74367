"""
Tag cache management commands.
"""

from typing import Optional

import click

from ..api import build_cache
from ..cli_utils import load_cli_config, parse_repository, standard_command
from ..exit_codes import USAGE_ERROR, CommandError
from ..render import render_cache_entries, render_tag_map


@click.group('cache')
def cache_cmd():
    """Inspect and clear the tag cache."""
    pass


@cache_cmd.command('list')
@click.option('--pretty', is_flag=True, help='Render a table instead of JSON lines')
@standard_command
def list_cache(pretty: bool):
    """List repositories with a fresh cached tag map."""
    cache = build_cache(load_cli_config())
    entries = cache.entries()

    if pretty:
        render_cache_entries(entries)
        return None
    return [
        {"repository": repo, "commits": len(entry.data), "timestamp": entry.timestamp}
        for repo, entry in sorted(entries.items())
    ]


@cache_cmd.command('show')
@click.argument('repository')
@click.option('--pretty', is_flag=True, help='Render a table instead of JSON')
@standard_command
def show_cache(repository: str, pretty: bool):
    """Show the cached tag map of a repository (null when not cached)."""
    key = parse_repository(repository)
    tag_map = build_cache(load_cli_config()).get(key)

    if pretty:
        render_tag_map(tag_map or {}, title=f"{key} (cached)")
        return None
    return {"repository": str(key), "tags": tag_map}


@cache_cmd.command('clear')
@click.argument('repository', required=False)
@click.option('--all', 'clear_all', is_flag=True, help='Clear every cached repository')
@standard_command
def clear_cache(repository: Optional[str], clear_all: bool):
    """
    Drop cached tag maps.

    \b
    Examples:
        committagger cache clear octo/hello
        committagger cache clear --all
    """
    if bool(repository) == clear_all:
        raise CommandError("Give either a REPOSITORY or --all", USAGE_ERROR)

    cache = build_cache(load_cli_config())
    if clear_all:
        return {"cleared": cache.invalidate_all()}

    key = parse_repository(repository)
    return {"repository": str(key), "cleared": int(cache.invalidate(key))}
