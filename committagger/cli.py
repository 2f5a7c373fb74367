#!/usr/bin/env python3

import click

from committagger.commands.cache import cache_cmd
from committagger.commands.config import config_cmd
from committagger.commands.rate_limit import rate_limit_handler
from committagger.commands.resolve import commits_handler, resolve_handler, tags_handler


@click.group()
@click.version_option(package_name='committagger')
def cli():
    """committagger - Show which release tags point at your commits.

    Resolves full or abbreviated commit ids to GitHub tags, reading the
    repository's tags pages (with your session cookie, when configured) or
    the REST API, and caching the result for an hour.
    """
    pass


cli.add_command(resolve_handler, name='resolve')
cli.add_command(tags_handler, name='tags')
cli.add_command(commits_handler, name='commits')
cli.add_command(rate_limit_handler, name='rate-limit')

# Command groups
cli.add_command(cache_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
