"""
Tag lookup commands for committagger.

    committagger resolve torvalds/linux 1da177e4c3f4 v2.6.12-rc2
    committagger tags torvalds/linux --pretty
    committagger commits torvalds/linux --ref master --pretty
"""

import asyncio
from typing import Optional, Tuple

import click

from ..cli_utils import load_cli_config, parse_repository, run_with_tagger, standard_command
from ..domain import is_valid_identifier
from ..exit_codes import USAGE_ERROR, CommandError, NoTagsFoundError
from ..render import render_commit_listing, render_resolved, render_tag_map

_log_level = click.option('--log-level', default=None,
                          type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
                          help='Override the configured log level')


@click.command('resolve')
@click.argument('repository')
@click.argument('identifiers', nargs=-1, required=True)
@click.option('--pretty', is_flag=True, help='Render a table instead of JSON')
@click.option('--strict', is_flag=True, help='Exit with code 64 when nothing matched')
@_log_level
@standard_command
def resolve_handler(repository: str, identifiers: Tuple[str, ...], pretty: bool,
                    strict: bool, log_level: Optional[str]):
    """
    Show the tags pointing at the given commits.

    IDENTIFIERS are full (40 characters) or abbreviated (7+ characters)
    commit ids. Commits without tags are left out of the output.

    \b
    Examples:
        committagger resolve octo/hello 3f2a91c
        committagger resolve octo/hello 3f2a91c 88be0d1 --pretty
    """
    key = parse_repository(repository)
    invalid = [i for i in identifiers if not is_valid_identifier(i)]
    if invalid:
        raise CommandError(f"Not a commit id: {', '.join(invalid)}", USAGE_ERROR)

    config = load_cli_config(log_level)
    result = run_with_tagger(
        config, lambda tagger: tagger.get_tags_for_commits(key.owner, key.name, identifiers)
    )

    if strict and not result:
        raise NoTagsFoundError()
    if pretty:
        render_resolved(result, title=str(key))
        return None
    return result


@click.command('tags')
@click.argument('repository')
@click.option('--pretty', is_flag=True, help='Render a table instead of JSON')
@click.option('--refresh', is_flag=True, help='Drop the cached tag map first')
@_log_level
@standard_command
def tags_handler(repository: str, pretty: bool, refresh: bool, log_level: Optional[str]):
    """
    Show the full commit -> tags map of a repository.

    Served from the cache when fresh, otherwise acquired from the tags
    pages (with the configured session cookie) or the REST API.
    """
    key = parse_repository(repository)
    config = load_cli_config(log_level)

    async def action(tagger):
        if refresh:
            await tagger.invalidate_repo_cache(key.owner, key.name)
        return await tagger.get_tag_map(key.owner, key.name)

    tag_map = run_with_tagger(config, action)

    if pretty:
        render_tag_map(tag_map, title=str(key))
        return None
    return tag_map


@click.command('commits')
@click.argument('repository')
@click.option('--ref', default=None, help='Branch, tag or commit (default branch if omitted)')
@click.option('--tagged-only', is_flag=True, help='Only list commits that carry tags')
@click.option('--pretty', is_flag=True, help='Render a table instead of JSON lines')
@_log_level
@standard_command
def commits_handler(repository: str, ref: Optional[str], tagged_only: bool, pretty: bool,
                    log_level: Optional[str]):
    """
    List the commits of a commit listing page with their tags.

    Reads https://github.com/OWNER/REPO/commits[/REF], collects the commit
    ids it links to and resolves them against the repository's tags.
    Outputs one JSON object per commit.
    """
    key = parse_repository(repository)
    config = load_cli_config(log_level)

    async def action(tagger):
        loop = asyncio.get_running_loop()
        identifiers = await loop.run_in_executor(
            None, tagger.page_client.fetch_commit_identifiers, key, ref
        )
        tags = await tagger.get_tags_for_commits(key.owner, key.name, identifiers)
        return identifiers, tags

    identifiers, tags = run_with_tagger(config, action)
    if tagged_only:
        identifiers = [i for i in identifiers if i in tags]

    if pretty:
        render_commit_listing(identifiers, tags, title=f"{key} {ref or ''}".strip())
        return None
    return [{"commit": i, "tags": tags.get(i, [])} for i in identifiers]
