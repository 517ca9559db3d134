import asyncio
import logging
from typing import Dict, Optional

from app.cache.link_cache import LinkCache
from app.cache.store import SqliteStore
from app.fetch.base import BaseFetcher, FailureKind, FetchFailure
from app.fetch.html_analyzer import parse_head, truncate_to_head
from app.fetch.scraper import HttpxFetcher
from app.schemas import LinkMetadata
from app.services.resolver import resolve

logger = logging.getLogger(__name__)

class LinkNotFoundError(Exception):
    """The URL could not be fetched with HTTP 200, or its head was empty"""

    def __init__(self, url: str, kind: FailureKind, reason: str = ""):
        super().__init__(f"No link metadata for {url}: {reason or kind.value}")
        self.url = url
        self.kind = kind
        self.reason = reason

class LinkPreviewService:
    """
    Main pipeline for link preview requests.

    1. Check the cache; a hit is returned verbatim, negative records included
    2. On a miss: fetch -> truncate to head -> parse -> resolve
    3. Cache the outcome, success or failure, for the TTL window
    4. Failures raise LinkNotFoundError after the empty record is cached

    Concurrent requests for the same URL share a single resolution.
    """

    def __init__(self, fetcher: BaseFetcher, cache: LinkCache):
        self.fetcher = fetcher
        self.cache = cache
        self._inflight: Dict[str, asyncio.Task] = {}

    async def get_metadata(self, url: str) -> LinkMetadata:
        cached = self.cache.get(url)
        if cached is not None:
            logger.info("CACHE HIT for %s", url)
            return cached

        key = self.cache.cache_key(url)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve_uncached(url))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._settle(key, t))
        else:
            logger.debug("Joining in-flight resolution for %s", url)
        return await asyncio.shield(task)

    def _settle(self, key: str, task: asyncio.Task) -> None:
        """Drop the in-flight entry and mark the outcome as seen even if every waiter left"""
        self._inflight.pop(key, None)
        if not task.cancelled():
            task.exception()

    async def _resolve_uncached(self, url: str) -> LinkMetadata:
        logger.info("PROCESSING %s - fetching HTML...", url)
        outcome = await self.fetcher.fetch(url)
        if isinstance(outcome, FetchFailure):
            raise self._negative(url, outcome.kind, outcome.reason)

        if outcome.truncated:
            logger.debug("Response for %s cut at the size ceiling", url)
        head = truncate_to_head(outcome.body)
        if not head:
            raise self._negative(url, FailureKind.EMPTY_CONTENT, "empty document head")

        metadata = resolve(parse_head(head))
        self.cache.put(url, metadata)
        logger.info("CACHED RESULT for %s", url)
        return metadata

    def _negative(self, url: str, kind: FailureKind, reason: str) -> LinkNotFoundError:
        """Cache the empty record for url and build the error to raise"""
        logger.warning("Link metadata unavailable for %s (%s): %s", url, kind.value, reason)
        self.cache.put(url, LinkMetadata())
        return LinkNotFoundError(url, kind, reason)

_service: Optional[LinkPreviewService] = None

def get_link_service() -> LinkPreviewService:
    """Process-wide service over the sqlite cache and the httpx fetcher"""
    global _service
    if _service is None:
        _service = LinkPreviewService(HttpxFetcher(), LinkCache(SqliteStore()))
    return _service
