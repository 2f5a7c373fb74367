"""
Common CLI utilities and decorators for consistent command behavior.
"""

import asyncio
import json
import logging
import sys
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import click

from .api import CommitTagger
from .config import configure_logging, load_config
from .domain import RepositoryKey
from .exit_codes import (
    INTERRUPTED, SUCCESS, USAGE_ERROR,
    CommandError, get_exit_code_for_exception,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


def emit(result: Any) -> None:
    """Print a result as single-line JSON (lists print one item per line)."""
    if isinstance(result, (list, tuple)):
        for item in result:
            print(json.dumps(item, ensure_ascii=False), flush=True)
    else:
        print(json.dumps(result, ensure_ascii=False), flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean JSON output on stdout for returned values
    - Errors reported as a JSON object with a matching exit code

    Commands that render their own output return None.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
            if result is not None:
                emit(result)
            sys.exit(SUCCESS)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            emit({"error": str(e), "type": type(e).__name__, "exit_code": e.exit_code})
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            emit({"error": str(e), "type": type(e).__name__})
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def parse_repository(value: str) -> RepositoryKey:
    """Parse an OWNER/REPO argument or fail with a usage error."""
    try:
        return RepositoryKey.parse(value)
    except ValueError as e:
        raise CommandError(str(e), USAGE_ERROR) from e


def load_cli_config(log_level: str = None):
    """Load configuration and set up logging for a command."""
    config = load_config()
    configure_logging(config, log_level)
    return config


def run_with_tagger(config, action: Callable[[CommitTagger], Awaitable[T]]) -> T:
    """
    Run an async action against a CommitTagger built from config,
    closing it afterwards.
    """
    async def runner() -> T:
        async with CommitTagger(config) as tagger:
            return await action(tagger)

    return asyncio.run(runner())
