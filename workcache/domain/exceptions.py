"""Exceptions raised by the cache layer.

Cache misses and read corruption are never exceptions; these cover the
cases where the caller has to be told something went wrong.
"""

from typing import Any, Iterable


class CacheError(Exception):
    """Base class for cache errors."""


class UnknownCategoryError(CacheError, ValueError):
    """Raised when writing to a category the store does not manage."""

    def __init__(self, category: str, known: Iterable[str]):
        self.category = category
        self.known = tuple(known)
        super().__init__(f"Unknown cache category '{category}'. Expected one of: {', '.join(self.known)}")


class PreloadItemError(CacheError, ValueError):
    """Raised when a preload item carries no usable id."""

    def __init__(self, item: Any):
        self.item = item
        super().__init__(f"Cannot derive a cache key from preload item: {item!r}")
