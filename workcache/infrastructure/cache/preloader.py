"""Opportunistic preloading of likely-next work items.

Two paths:

* ``trigger_preload`` runs on every cache hit. It asks the strategy for
  related keys and hands them to a bounded background queue; a worker task
  marks the ones not yet cached as *pending*. Nothing is fetched here and
  errors never reach the caller of ``get``.
* ``preload`` is the explicit batch path. It splits a batch into cached and
  uncached items, calls the fetcher once for the uncached ones and stores
  the results. Fetcher errors propagate.
"""

import asyncio
import inspect
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from workcache.domain.exceptions import PreloadItemError
from workcache.domain.interfaces.cache import CacheService, Fetcher
from workcache.domain.interfaces.clock import Clock
from workcache.domain.interfaces.preload_strategy import PreloadStrategy
from workcache.domain.models.common import CacheKey, Category
from workcache.infrastructure.cache.entry_store import EntryStore
from workcache.infrastructure.cache.preload_strategies import AdjacentIdStrategy

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUEUED_TRIGGERS = 100
DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 5.0


def item_key(item: Any) -> CacheKey:
    """Derives the cache key of a preload item (a key, a mapping or an object with an id)."""
    if isinstance(item, Mapping):
        item_id = item.get("id")
    elif isinstance(item, (str, int)) and not isinstance(item, bool):
        item_id = item
    else:
        item_id = getattr(item, "id", None)
    if item_id is None:
        raise PreloadItemError(item)
    return CacheKey(str(item_id))


class Preloader:
    """Schedules background preload marking and runs batch preloads."""

    def __init__(
        self,
        store: EntryStore,
        clock: Clock,
        strategy: Optional[PreloadStrategy] = None,
        max_queued_triggers: int = DEFAULT_MAX_QUEUED_TRIGGERS,
    ):
        self.store = store
        self.clock = clock
        self.strategy = strategy or AdjacentIdStrategy()
        self.max_queued_triggers = max_queued_triggers
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._pending: Dict[Tuple[Category, CacheKey], float] = {}

    # --- Background marking ---

    def _ensure_worker(self) -> asyncio.Queue:
        """Starts the worker on the running loop if needed. Raises RuntimeError without a loop."""
        loop = asyncio.get_running_loop()
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.max_queued_triggers)
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._run(self._queue))
        return self._queue

    def trigger_preload(self, key: CacheKey, category: Category) -> bool:
        """Queues background marking for keys related to ``key``.

        Fire-and-forget: returns immediately and never raises.

        Returns:
            True if a marking job was queued.
        """
        try:
            candidates = self.strategy.candidates(key, category)
        except Exception as e:
            logger.warning(f"Preload strategy failed for {category}:{key}: {e}")
            return False
        if not candidates:
            return False

        try:
            queue = self._ensure_worker()
            queue.put_nowait((category, candidates))
        except RuntimeError:
            logger.debug(f"No running event loop; skipping preload for {category}:{key}")
            return False
        except asyncio.QueueFull:
            logger.debug(f"Preload queue full; dropping trigger for {category}:{key}")
            return False
        logger.debug(f"Queued preload check for {len(candidates)} keys around {category}:{key}")
        return True

    async def _run(self, queue: asyncio.Queue) -> None:
        while True:
            category, candidates = await queue.get()
            try:
                await self._mark_missing(category, candidates)
            except Exception as e:
                logger.warning(f"Background preload marking failed for {category}: {e}")
            finally:
                queue.task_done()

    async def _mark_missing(self, category: Category, candidates: Sequence[CacheKey]) -> None:
        for candidate in candidates:
            if not await self.store.contains(candidate, category):
                self._pending[(category, candidate)] = self.clock.now()
                logger.debug(f"Marked {category}:{candidate} for preload")

    async def wait_for_preloads(self) -> None:
        """Waits until every queued trigger has been processed."""
        if self._queue is None:
            return
        await self._ensure_worker().join()

    async def shutdown(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Drains the queue (best effort, within ``timeout``) and stops the worker."""
        if self._queue is not None and self._worker is not None and not self._worker.done():
            try:
                await asyncio.wait_for(self._queue.join(), timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Preload queue not drained within {timeout}s; dropping {self._queue.qsize()} triggers."
                )
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        self._queue = None

    # --- Pending marks ---

    def pending(self, category: Category) -> List[CacheKey]:
        """Keys marked for preload in ``category``, oldest mark first."""
        marks = [(ts, key) for (cat, key), ts in self._pending.items() if cat == category]
        return [key for _, key in sorted(marks)]

    def discard_pending(self, key: CacheKey, category: Category) -> None:
        self._pending.pop((category, key), None)

    def clear_pending(self) -> None:
        self._pending.clear()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # --- Batch preload ---

    async def preload(
        self,
        items: Sequence[Any],
        fetcher: Optional[Fetcher],
        category: Category,
        cache: CacheService,
    ) -> List[Any]:
        """Returns values for ``items``, fetching the uncached ones in a single call.

        Args:
            items: Keys, mappings with an ``id`` or objects with an ``id`` attribute.
            fetcher: Receives the uncached items and returns their values in the
                same order. May be sync or async. ``None`` results are skipped.
            category: Category to read from and populate.
            cache: The cache used for lookups and writes.

        Returns:
            The cached values followed by the freshly fetched ones.

        Raises:
            PreloadItemError: If an item has no usable id.
            Exception: Whatever the fetcher raises.
        """
        results: List[Any] = []
        uncached: List[Any] = []

        for item in items:
            key = item_key(item)
            value = await cache.get(key, category)
            if value is not None:
                self.discard_pending(key, category)
                results.append(value)
            else:
                uncached.append(item)

        if not uncached or fetcher is None:
            return results

        logger.debug(f"Fetching {len(uncached)} uncached {category} items ({len(results)} cached)")
        fetched = fetcher(uncached)
        if inspect.isawaitable(fetched):
            fetched = await fetched
        fresh = list(fetched) if fetched is not None else []
        if len(fresh) != len(uncached):
            logger.warning(f"Fetcher returned {len(fresh)} results for {len(uncached)} requested {category} items")

        for item, value in zip(uncached, fresh):
            if value is None:
                continue
            key = item_key(item)
            await cache.set(key, value, category)
            self.discard_pending(key, category)
            results.append(value)
        return results
