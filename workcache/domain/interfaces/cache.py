"""Interface for the work-item cache.

Defines the contract calling commands rely on: storing, retrieving,
batch-preloading and inspecting cached work-item data.
"""

import abc
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

# Import relevant domain models
from ..models.cache import CacheStats
from ..models.common import CacheKey, Category, GENERAL, WORKITEMS

# A fetcher receives the items that were not cached and returns their values
# in the same order. It may be a plain function or a coroutine function.
Fetcher = Callable[[List[Any]], Union[Sequence[Any], Awaitable[Sequence[Any]]]]


class CacheService(abc.ABC):
    """Abstract Base Class for cache operations."""

    @abc.abstractmethod
    async def init(self) -> None:
        """Prepares the backing storage. Must run before any other operation."""
        pass

    @abc.abstractmethod
    async def get(self, key: CacheKey, category: Category = GENERAL) -> Optional[Any]:
        """Retrieves an item from the cache asynchronously.

        Args:
            key: The cache key to retrieve.
            category: The partition the key lives in.

        Returns:
            The cached item if found and not expired, otherwise None.
            Never raises for missing or unreadable entries.
        """
        pass

    @abc.abstractmethod
    async def set(
        self,
        key: CacheKey,
        value: Any,
        category: Category = GENERAL,
        ttl: Optional[float] = None,
    ) -> None:
        """Stores an item asynchronously.

        Args:
            key: The cache key to store the item under.
            value: A JSON-serializable value.
            category: The partition to store in.
            ttl: Time-to-live in seconds (manager default if None).

        Raises:
            OSError: If the value cannot be written.
        """
        pass

    @abc.abstractmethod
    async def preload(
        self,
        items: Sequence[Any],
        fetcher: Fetcher,
        category: Category = WORKITEMS,
    ) -> List[Any]:
        """Returns values for all items, fetching the uncached ones in one batch.

        Args:
            items: Keys, or objects/mappings carrying an ``id``.
            fetcher: Called once with the uncached items.
            category: The partition to look in and populate.

        Returns:
            Cached values followed by freshly fetched ones.
        """
        pass

    @abc.abstractmethod
    async def delete(self, key: CacheKey, category: Category = GENERAL) -> bool:
        """Deletes a single item. Returns True if something was removed."""
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Removes everything and re-initializes the storage layout."""
        pass

    @abc.abstractmethod
    async def get_stats(self) -> CacheStats:
        """Computes usage statistics for the cache."""
        pass
