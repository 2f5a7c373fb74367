"""
committagger - Map commits to the release tags that point at them.

Quick Start:
    import asyncio
    import committagger

    async def main():
        async with committagger.create() as tagger:
            # Full or abbreviated commit ids
            tags = await tagger.get_tags_for_commits("octo", "hello", ["3f2a91c"])
            print(tags)   # {"3f2a91c": ["v1.2.0"]}

    asyncio.run(main())

How tags are acquired (first non-empty result wins, then cached for an hour):
    1. github.com tags pages, read with the viewer's session cookie
       (embedded JSON first, anchor scraping as a fallback)
    2. GitHub REST API /repos/{owner}/{repo}/tags (optional token)

Domain Objects:
    RepositoryKey - owner/name identity
    TagEntry - (tag name, commit id) pair
    TagMap - full commit id -> tag names

Services:
    TagService - cache check, source fallback, resolution
"""

__version__ = "0.3.0"

from .api import CommitTagger, create

from .domain import (
    RepositoryKey,
    TagEntry,
    TagMap,
    CacheEntry,
    AcquisitionOutcome,
    AcquisitionResult,
)

from .services import TagService
from .resolver import resolve_identifiers

from .config import load_config, save_config

__all__ = [
    "__version__",
    "CommitTagger",
    "create",
    "RepositoryKey",
    "TagEntry",
    "TagMap",
    "CacheEntry",
    "AcquisitionOutcome",
    "AcquisitionResult",
    "TagService",
    "resolve_identifiers",
    "load_config",
    "save_config",
]
