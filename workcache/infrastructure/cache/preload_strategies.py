"""Concrete preload strategies.

The default assumes work-item ids are small sequential integers that tend
to be read in roughly ascending order, so the neighbours of a hit are the
best guess for the next request.
"""

import re
from typing import Iterable, List, Tuple

from workcache.domain.interfaces.preload_strategy import PreloadStrategy
from workcache.domain.models.common import CacheKey, Category, WORKITEMS

NUMERIC_KEY = re.compile(r"[0-9]+")
DEFAULT_PRELOAD_WINDOW = 2


class AdjacentIdStrategy(PreloadStrategy):
    """Suggests the ids within ``window`` of a purely numeric key."""

    def __init__(self, window: int = DEFAULT_PRELOAD_WINDOW, categories: Iterable[Category] = (WORKITEMS,)):
        if window < 0:
            raise ValueError(f"window must be non-negative, got {window}")
        self.window = window
        self.categories: Tuple[Category, ...] = tuple(categories)

    def candidates(self, key: CacheKey, category: Category) -> List[CacheKey]:
        if category not in self.categories or not NUMERIC_KEY.fullmatch(str(key)):
            return []
        item_id = int(key)
        return [
            CacheKey(str(i))
            for i in range(item_id - self.window, item_id + self.window + 1)
            if i != item_id and i > 0
        ]


class NoPreloadStrategy(PreloadStrategy):
    """Disables preloading."""

    def candidates(self, key: CacheKey, category: Category) -> List[CacheKey]:
        return []
