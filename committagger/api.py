"""
High-level Python API for committagger.

Example:
    import asyncio
    import committagger

    async def main():
        async with committagger.create() as tagger:
            tags = await tagger.get_tags_for_commits("octo", "hello", ["abc1234"])
            print(tags)   # {"abc1234": ["v1.0.0"]}

    asyncio.run(main())
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import load_config, merge_configs
from .domain import RepositoryKey, TagMap
from .infra import FileStore, GitHubClient, ListingPageClient, PageContextBridge, TagCache
from .services import PageContextSource, RestApiSource, TagService, TagSource

logger = logging.getLogger(__name__)


def build_cache(config: Dict[str, Any]) -> TagCache:
    cache_config = config.get("cache", {})
    return TagCache(
        FileStore(Path(cache_config["path"])),
        ttl_seconds=cache_config.get("ttl_seconds", 3600),
        key_prefix=cache_config.get("key_prefix", "tag_cache_"),
    )


def build_github_client(config: Dict[str, Any]) -> GitHubClient:
    github = config.get("github", {})
    return GitHubClient(
        token=github.get("token") or None,
        api_base=github.get("api_base", "https://api.github.com"),
        timeout=github.get("timeout_seconds", 30),
        use_gh_cli=github.get("use_gh_cli", False),
    )


def build_page_client(config: Dict[str, Any]) -> ListingPageClient:
    github = config.get("github", {})
    return ListingPageClient(
        session_cookie=github.get("session_cookie") or None,
        web_base=github.get("web_base", "https://github.com"),
        timeout=github.get("timeout_seconds", 30),
        max_pages=config.get("bridge", {}).get("max_pages", 50),
    )


def build_sources(config: Dict[str, Any], github_client: GitHubClient,
                  page_client: ListingPageClient) -> List[TagSource]:
    """Acquisition sources in fallback order: session pages, then REST."""
    sources: List[TagSource] = []
    bridge_config = config.get("bridge", {})
    if bridge_config.get("enabled", True):
        bridge = PageContextBridge(page_client, timeout=bridge_config.get("timeout_seconds", 8))
        sources.append(PageContextSource(bridge))
    sources.append(RestApiSource(github_client))
    return sources


class CommitTagger:
    """
    High-level API for committagger.

    Wires the cache, the GitHub clients and the tag service from
    configuration. Use as an async context manager so the page bridge is
    shut down cleanly.

    Example:
        async with CommitTagger() as tagger:
            await tagger.get_tags_for_commits("octo", "hello", ["abc1234"])
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize CommitTagger.

        Args:
            config: Configuration dict (loads from file if None)
        """
        self.config = config or load_config()
        self.cache = build_cache(self.config)
        self.github_client = build_github_client(self.config)
        self.page_client = build_page_client(self.config)
        self.tag_service = TagService(
            self.cache, build_sources(self.config, self.github_client, self.page_client)
        )

    async def __aenter__(self) -> 'CommitTagger':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.tag_service.close()

    async def get_tags_for_commits(self, owner: str, repo: str,
                                   identifiers: Iterable[str]) -> Dict[str, List[str]]:
        return await self.tag_service.get_tags_for_commits(owner, repo, identifiers)

    async def get_tag_map(self, owner: str, repo: str) -> TagMap:
        """Full tag map of a repository (cached or freshly acquired)."""
        return await self.tag_service.acquire(RepositoryKey(owner, repo))

    async def get_cached_tags(self, owner: str, repo: str) -> Optional[TagMap]:
        return await self.tag_service.get_cached_tags(owner, repo)

    async def cache_tag_map(self, owner: str, repo: str, tag_map: TagMap) -> None:
        await self.tag_service.cache_tag_map(owner, repo, tag_map)

    async def invalidate_repo_cache(self, owner: str, repo: str) -> None:
        await self.tag_service.invalidate_repo_cache(owner, repo)

    async def invalidate_all(self) -> int:
        return await self.tag_service.invalidate_all()


def create(config: Optional[Dict[str, Any]] = None, **overrides) -> CommitTagger:
    """
    Create a CommitTagger instance.

    Args:
        config: Configuration dict (loads from file if None)
        **overrides: Section dicts merged over the configuration,
            e.g. create(cache={"ttl_seconds": 60})

    Returns:
        Configured CommitTagger instance
    """
    config = config or load_config()
    if overrides:
        config = merge_configs(config, overrides)
    return CommitTagger(config)
