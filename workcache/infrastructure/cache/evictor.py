"""Size-budget enforcement for the entry store.

Removes least-recently-modified entries until the total on-disk size is
back under the budget. Eviction is best-effort: it logs failures and never
raises, so it can't fail the `set` that triggered it.
"""

import logging

from workcache.infrastructure.cache.entry_store import EntryStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_BYTES = 100 * 1024 * 1024  # 100 MB


class Evictor:
    """Keeps an EntryStore under a byte budget, oldest entries first."""

    def __init__(self, store: EntryStore, max_size: int = DEFAULT_MAX_SIZE_BYTES):
        if max_size < 0:
            raise ValueError(f"max_size must be non-negative, got {max_size}")
        self.store = store
        self.max_size = max_size

    async def enforce_size(self) -> int:
        """Evicts entries until the store fits the budget.

        Returns:
            The number of entries removed.
        """
        try:
            entries = await self.store.list_entries()
        except OSError as e:
            logger.error(f"Cache cleanup error while listing entries: {e}", exc_info=True)
            return 0

        total_size = sum(entry.size for entry in entries)
        if total_size <= self.max_size:
            return 0

        logger.info(f"Cache size {total_size} bytes exceeds budget of {self.max_size} bytes; evicting.")
        evicted = 0
        for entry in sorted(entries, key=lambda e: (e.mtime, str(e.path))):
            if total_size <= self.max_size:
                break
            if await self.store.discard(entry):
                total_size -= entry.size
                evicted += 1
                logger.debug(f"Evicted {entry.path} ({entry.size} bytes)")

        if total_size > self.max_size:
            logger.warning(f"Cache still over budget after eviction pass: {total_size} bytes")
        logger.info(f"Evicted {evicted} cache entries; {total_size} bytes remain.")
        return evicted
