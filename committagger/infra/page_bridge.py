"""
Page-context bridge for committagger.

Hands tag listing requests to a responder that holds the viewer's session
(ListingPageClient) and waits for the matching answer with a timeout:

    bridge --BridgeRequest(request_id)--> inbox --> responder task
    bridge <--BridgeResponse(request_id)-- _deliver <--'

A timeout is reported as a failure (None), never raised, so callers can move
on to the REST API. Late answers for abandoned requests are dropped.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..domain import RepositoryKey, TagMap
from .page_client import ListingPageClient

logger = logging.getLogger(__name__)

# Seconds to wait for the responder before falling back
PAGE_FETCH_TIMEOUT = 8.0


@dataclass(frozen=True)
class BridgeRequest:
    request_id: str
    owner: str
    repo: str


@dataclass(frozen=True)
class BridgeResponse:
    request_id: str
    success: bool
    tag_map: TagMap = field(default_factory=dict)


class PageContextBridge:
    """
    Request/response channel to the session-holding page client.

    The responder task is started on first use and serves requests one at a
    time, in arrival order.

    Example:
        bridge = PageContextBridge(ListingPageClient(session_cookie="..."))
        tag_map = await bridge.fetch_tags(RepositoryKey("octo", "hello"))
        await bridge.close()
    """

    def __init__(self, client: ListingPageClient, timeout: float = PAGE_FETCH_TIMEOUT):
        """
        Initialize PageContextBridge.

        Args:
            client: Page client the responder uses to read listing pages
            timeout: Seconds to wait for a response before giving up
        """
        self.client = client
        self.timeout = timeout
        self._pending: Dict[str, asyncio.Future] = {}
        self._inbox: Optional[asyncio.Queue] = None
        self._responder: Optional[asyncio.Task] = None

    def _ensure_responder(self) -> asyncio.Queue:
        if self._responder is None or self._responder.done():
            self._inbox = asyncio.Queue()
            self._responder = asyncio.get_running_loop().create_task(self._serve(self._inbox))
        return self._inbox

    async def _serve(self, inbox: asyncio.Queue) -> None:
        """Responder loop: answer each request with a BridgeResponse."""
        loop = asyncio.get_running_loop()
        while True:
            request: BridgeRequest = await inbox.get()
            key = RepositoryKey(request.owner, request.repo)
            try:
                tag_map = await loop.run_in_executor(None, self.client.fetch_all_tags, key)
                response = BridgeResponse(request.request_id, True, tag_map)
            except Exception as e:
                logger.warning(f"Page context fetch failed for {key}: {e}")
                response = BridgeResponse(request.request_id, False)
            finally:
                inbox.task_done()
            self._deliver(response)

    def _deliver(self, response: BridgeResponse) -> None:
        """Resolve the waiter with the matching request id, if still waiting."""
        future = self._pending.pop(response.request_id, None)
        if future is None:
            logger.debug(f"Dropping response for unknown request {response.request_id}")
            return
        if not future.done():
            future.set_result(response)

    async def fetch_tags(self, key: RepositoryKey) -> Optional[TagMap]:
        """
        Ask the responder for the full tag map of a repository.

        Returns:
            TagMap on success (possibly empty), None on failure or timeout
        """
        inbox = self._ensure_responder()
        request = BridgeRequest(uuid.uuid4().hex, key.owner, key.name)
        future = asyncio.get_running_loop().create_future()
        self._pending[request.request_id] = future

        await inbox.put(request)
        try:
            response: BridgeResponse = await asyncio.wait_for(future, self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Page context fetch for {key} timed out after {self.timeout}s")
            return None
        finally:
            self._pending.pop(request.request_id, None)

        return response.tag_map if response.success else None

    async def close(self) -> None:
        """Stop the responder and abandon pending requests."""
        for future in self._pending.values():
            future.cancel()
        self._pending.clear()

        if self._responder is not None:
            self._responder.cancel()
            try:
                await self._responder
            except asyncio.CancelledError:
                pass
            self._responder = None
            self._inbox = None
