"""
Tag acquisition sources for committagger.

Each source wraps one way of obtaining a repository's full TagMap and
reports an AcquisitionResult instead of raising, so the tag service can
walk an ordered list of them.
"""

import asyncio
import logging
from typing import Optional

from ..domain import AcquisitionResult, RepositoryKey
from ..exceptions import AcquisitionError
from ..infra.github_client import GitHubClient
from ..infra.page_bridge import PageContextBridge

logger = logging.getLogger(__name__)


class TagSource:
    """Base class for acquisition sources."""

    name = "source"

    async def acquire(self, key: RepositoryKey) -> AcquisitionResult:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class PageContextSource(TagSource):
    """Tags listing pages read through the session-holding bridge."""

    name = "page"

    def __init__(self, bridge: PageContextBridge):
        self.bridge = bridge

    async def acquire(self, key: RepositoryKey) -> AcquisitionResult:
        tag_map = await self.bridge.fetch_tags(key)
        if tag_map is None:
            return AcquisitionResult.failed("page context fetch failed or timed out", self.name)
        return AcquisitionResult.from_tag_map(tag_map, self.name)

    async def close(self) -> None:
        await self.bridge.close()


class RestApiSource(TagSource):
    """Paginated GitHub REST tags endpoint."""

    name = "rest"

    def __init__(self, client: GitHubClient):
        self.client = client

    async def acquire(self, key: RepositoryKey) -> AcquisitionResult:
        loop = asyncio.get_running_loop()
        try:
            tag_map = await loop.run_in_executor(None, self.client.fetch_all_tags, key)
        except AcquisitionError as e:
            logger.error(f"Failed to fetch tags for {key}: {e}")
            return AcquisitionResult.failed(str(e), self.name)
        return AcquisitionResult.from_tag_map(tag_map, self.name)


def describe(result: Optional[AcquisitionResult]) -> str:
    if result is None:
        return "no sources configured"
    detail = f" ({result.error})" if result.error else ""
    return f"{result.source}: {result.outcome.value}{detail}"
