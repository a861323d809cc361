"""Cache Manager: the single public surface of the work-item cache.

Wires the entry store, access tracker, evictor and preloader together and
implements the CacheService interface. Construct one per owning process
and pass it to the commands that need it; all collaborators (file system,
clock, preload strategy) are injected.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

# Domain Layer Imports
from workcache.domain.interfaces.cache import CacheService, Fetcher
from workcache.domain.interfaces.clock import Clock
from workcache.domain.interfaces.filesystem import FileSystem
from workcache.domain.interfaces.preload_strategy import PreloadStrategy
from workcache.domain.models.cache import AccessRecord, CacheStats, FileInfo
from workcache.domain.models.common import (
    ACCESS_LOG_NAME,
    GENERAL,
    METADATA_DIR,
    VALUE_CATEGORIES,
    WORKITEMS,
    CacheKey,
    Category,
)

# Infrastructure Layer Imports
from workcache.infrastructure.cache.access_tracker import AccessTracker
from workcache.infrastructure.cache.entry_store import EntryStore
from workcache.infrastructure.cache.evictor import DEFAULT_MAX_SIZE_BYTES, Evictor
from workcache.infrastructure.cache.preload_strategies import AdjacentIdStrategy
from workcache.infrastructure.cache.preloader import (
    DEFAULT_MAX_QUEUED_TRIGGERS,
    DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
    Preloader,
)
from workcache.infrastructure.clock import SystemClock
from workcache.infrastructure.filesystem.local_fs import LocalFileSystem

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 60 * 60  # 1 hour


class CacheManager(CacheService):
    """Local cache for work items and query results.

    Example::

        async with CacheManager(Path(".workcache")) as cache:
            item = await cache.get("42", "workitems")
            if item is None:
                item = await api.fetch_work_item(42)
                await cache.set("42", item, "workitems")
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        max_age: float = DEFAULT_MAX_AGE_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE_BYTES,
        file_system: Optional[FileSystem] = None,
        clock: Optional[Clock] = None,
        preload_strategy: Optional[PreloadStrategy] = None,
        max_queued_triggers: int = DEFAULT_MAX_QUEUED_TRIGGERS,
    ):
        """Initializes the cache manager.

        Args:
            cache_dir: Root directory of the cache.
            max_age: Default TTL in seconds.
            max_size: Size budget in bytes across all categories.
            file_system: Storage backend (local disk if None).
            clock: Time source (system clock if None).
            preload_strategy: Predicts related keys (adjacent ids if None).
            max_queued_triggers: Bound of the background preload queue.
        """
        if max_age < 0:
            raise ValueError(f"max_age must be non-negative, got {max_age}")
        self.cache_dir = Path(cache_dir)
        self.max_age = max_age
        self.max_size = max_size
        self.fs = file_system or LocalFileSystem()
        self.clock = clock or SystemClock()

        self.store = EntryStore(self.cache_dir, self.fs, self.clock, default_ttl=max_age)
        self.tracker = AccessTracker(self.cache_dir / METADATA_DIR / ACCESS_LOG_NAME, self.fs, self.clock)
        self.evictor = Evictor(self.store, max_size=max_size)
        self.preloader = Preloader(
            self.store,
            self.clock,
            strategy=preload_strategy or AdjacentIdStrategy(),
            max_queued_triggers=max_queued_triggers,
        )

        self.hits = 0
        self.misses = 0
        logger.info(f"CacheManager created. dir={self.cache_dir}, max_age={max_age}s, max_size={max_size} bytes")

    async def __aenter__(self) -> "CacheManager":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # --- CacheService Interface Implementation ---

    async def init(self) -> None:
        """Creates the directory layout and loads the persisted access log."""
        await self.fs.make_dirs(self.cache_dir)
        await self.store.init()
        await self.tracker.load()

    async def get(self, key: CacheKey, category: Category = GENERAL) -> Optional[Any]:
        """Returns the cached value, or None if it is missing, expired or unreadable."""
        key = CacheKey(str(key))
        value = await self.store.read(key, category)
        if value is None:
            self.misses += 1
            logger.debug(f"Cache miss for {category}:{key}")
            return None

        self.hits += 1
        logger.debug(f"Cache hit for {category}:{key}")
        self.track_access(key, category)
        self.trigger_preload(key, category)
        return value

    async def set(
        self,
        key: CacheKey,
        value: Any,
        category: Category = GENERAL,
        ttl: Optional[float] = None,
    ) -> None:
        """Stores a value, then enforces the size budget before returning."""
        key = CacheKey(str(key))
        await self.store.write(key, category, value, ttl=ttl)
        await self.evictor.enforce_size()

    async def preload(
        self,
        items: Sequence[Any],
        fetcher: Optional[Fetcher],
        category: Category = WORKITEMS,
    ) -> List[Any]:
        return await self.preloader.preload(items, fetcher, category, cache=self)

    async def delete(self, key: CacheKey, category: Category = GENERAL) -> bool:
        key = CacheKey(str(key))
        self.preloader.discard_pending(key, category)
        return await self.store.delete(key, category)

    async def clear(self) -> None:
        """Removes the whole cache tree and re-creates an empty layout."""
        await self.fs.remove_tree(self.cache_dir)
        self.tracker.clear()
        self.preloader.clear_pending()
        await self.init()
        logger.info(f"Cleared cache at: {self.cache_dir}")

    async def get_stats(self) -> CacheStats:
        """Walks every category and summarizes size, age and usage."""
        entries = await self.store.list_entries()
        stats = CacheStats(
            total_files=len(entries),
            total_size=sum(entry.size for entry in entries),
            max_size=self.max_size,
            hits=self.hits,
            misses=self.misses,
            pending_preloads=self.preloader.pending_count,
            generated_at=self.clock.now(),
        )
        if entries:
            oldest = min(entries, key=lambda e: e.mtime)
            newest = max(entries, key=lambda e: e.mtime)
            stats.oldest_file = FileInfo(path=str(oldest.path), mtime=oldest.mtime)
            stats.newest_file = FileInfo(path=str(newest.path), mtime=newest.mtime)
        return stats

    # --- Maintenance ---

    async def prune_expired(self) -> int:
        """Removes every expired entry. Returns how many were removed."""
        removed = 0
        for entry in await self.store.list_entries():
            if await self.store.is_expired(entry) and await self.store.discard(entry):
                removed += 1
        if removed:
            logger.info(f"Pruned {removed} expired cache entries.")
        return removed

    async def enforce_size(self) -> int:
        return await self.evictor.enforce_size()

    # --- Access tracking & preloading ---

    def track_access(self, key: CacheKey, category: Category) -> AccessRecord:
        return self.tracker.track_access(CacheKey(str(key)), category)

    def trigger_preload(self, key: CacheKey, category: Category) -> bool:
        return self.preloader.trigger_preload(CacheKey(str(key)), category)

    async def save_access_log(self) -> None:
        await self.tracker.save()

    def pending_preloads(self, category: Category = WORKITEMS) -> List[CacheKey]:
        return self.preloader.pending(category)

    async def preload_pending(self, fetcher: Fetcher, category: Category = WORKITEMS) -> List[Any]:
        """Fetches and stores every key currently marked for preload in ``category``.

        Marks are cleared as keys get stored, so a failing fetcher leaves them
        in place for the next attempt.
        """
        keys = self.preloader.pending(category)
        if not keys:
            return []
        logger.info(f"Preloading {len(keys)} pending {category} items")
        return await self.preload(keys, fetcher, category)

    async def wait_for_preloads(self) -> None:
        await self.preloader.wait_for_preloads()

    async def close(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Drains background preload work and persists the access log."""
        await self.preloader.shutdown(timeout)
        await self.tracker.save()
        logger.debug("CacheManager closed.")
