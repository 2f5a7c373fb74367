"""
Tag resolution service for committagger.

Orchestrates one resolution request:

    cache check -> acquire (sources in order) -> persist -> resolve

This is the resolution protocol used by the CLI and the Python API.
No acquisition failure escapes it: callers always get a (possibly empty)
mapping back.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..domain import AcquisitionResult, RepositoryKey, TagMap, count_tags
from ..infra.tag_cache import TagCache
from ..resolver import resolve_identifiers
from .sources import TagSource, describe

logger = logging.getLogger(__name__)


class TagService:
    """
    Resolve commit identifiers to tags with caching and source fallback.

    Sources are tried in order; the first non-empty result wins and is
    cached. Empty results are never cached, so a transient failure is
    retried on the next request. Concurrent requests for the same uncached
    repository share a single acquisition.

    Example:
        service = TagService(cache, [PageContextSource(bridge), RestApiSource(client)])
        tags = await service.get_tags_for_commits("octo", "hello", ["abc1234"])
    """

    def __init__(self, cache: TagCache, sources: Sequence[TagSource]):
        """
        Initialize TagService.

        Args:
            cache: Tag map cache
            sources: Acquisition sources in fallback order
        """
        self.cache = cache
        self.sources: List[TagSource] = list(sources)
        self._in_flight: Dict[RepositoryKey, asyncio.Task] = {}

    @staticmethod
    async def _in_executor(func, *args):
        """Run blocking cache file I/O off the event loop."""
        return await asyncio.get_running_loop().run_in_executor(None, func, *args)

    async def _read_cache(self, key: RepositoryKey) -> Optional[TagMap]:
        """Cached tag map, or None on miss. An unreadable cache counts as a miss."""
        try:
            return await self._in_executor(self.cache.get, key)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read cached tags for {key}: {e}")
            return None

    async def _run_sources(self, key: RepositoryKey) -> TagMap:
        """Walk the fallback chain; persist and return the first usable map."""
        last: Optional[AcquisitionResult] = None
        for source in self.sources:
            last = await source.acquire(key)
            if last.usable:
                logger.info(
                    f"Acquired {count_tags(last.tag_map)} tags for {key} via {source.name}"
                )
                try:
                    await self._in_executor(self.cache.set, key, last.tag_map)
                except OSError as e:
                    logger.warning(f"Could not cache tags for {key}: {e}")
                return last.tag_map
            logger.debug(f"Source {describe(last)} for {key}, trying next")

        logger.info(f"No tags acquired for {key} ({describe(last)})")
        return {}

    async def acquire(self, key: RepositoryKey) -> TagMap:
        """
        Get the full tag map of a repository, from cache or sources.

        Returns:
            TagMap, empty when every source came back empty or failed
        """
        cached = await self._read_cache(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._run_sources(key))
            self._in_flight[key] = task
            task.add_done_callback(lambda _t, k=key: self._in_flight.pop(k, None))
        return await asyncio.shield(task)

    async def get_tags_for_commits(
        self, owner: str, repo: str, identifiers: Iterable[str]
    ) -> Dict[str, List[str]]:
        """
        Resolve commit identifiers to the tags that point at them.

        Args:
            owner: Repository owner
            repo: Repository name
            identifiers: Full or abbreviated (7+ chars) commit identifiers

        Returns:
            identifier -> tag names, for identifiers that matched
        """
        tag_map = await self.acquire(RepositoryKey(owner, repo))
        return resolve_identifiers(tag_map, identifiers)

    async def get_cached_tags(self, owner: str, repo: str) -> Optional[TagMap]:
        """Cached full tag map, or None on miss/expiry."""
        return await self._read_cache(RepositoryKey(owner, repo))

    async def cache_tag_map(self, owner: str, repo: str, tag_map: TagMap) -> None:
        """Store a full tag map obtained elsewhere. Empty maps are ignored."""
        if not tag_map:
            logger.debug(f"Not caching empty tag map for {owner}/{repo}")
            return
        await self._in_executor(self.cache.set, RepositoryKey(owner, repo), tag_map)

    async def invalidate_repo_cache(self, owner: str, repo: str) -> None:
        """Forget the cached tag map of one repository."""
        await self._in_executor(self.cache.invalidate, RepositoryKey(owner, repo))

    async def invalidate_all(self) -> int:
        """Forget every cached tag map. Returns the number removed."""
        return await self._in_executor(self.cache.invalidate_all)

    async def close(self) -> None:
        for source in self.sources:
            await source.close()
