import hashlib
import logging
from typing import Optional

from pydantic import ValidationError

from app.cache.store import CacheStore
from app.core.config import settings
from app.schemas import LinkMetadata

logger = logging.getLogger(__name__)

class LinkCache:
    """LinkMetadata records keyed by a hash of the requested URL"""

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: Optional[float] = None,
        prefix: Optional[str] = None,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_HOURS * 3600
        self.prefix = prefix if prefix is not None else settings.CACHE_KEY_PREFIX

    def cache_key(self, url: str) -> str:
        return self.prefix + hashlib.md5(url.encode("utf-8")).hexdigest()

    def get(self, url: str) -> Optional[LinkMetadata]:
        payload = self.store.get(self.cache_key(url))
        if payload is None:
            return None
        try:
            return LinkMetadata.model_validate_json(payload)
        except ValidationError:
            logger.warning("Corrupted cache entry for %s, treating as miss", url)
            return None

    def put(self, url: str, metadata: LinkMetadata) -> None:
        self.store.put(self.cache_key(url), metadata.model_dump_json(), self.ttl_seconds)
