"""Interface for preload strategies.

A strategy predicts which keys are likely to be requested next after a
cache hit. The Preloader only marks those keys as pending; fetching is
left to the batch preload path.
"""

import abc
from typing import List

from ..models.common import CacheKey, Category


class PreloadStrategy(abc.ABC):
    """Abstract Base Class for predicting related keys."""

    @abc.abstractmethod
    def candidates(self, key: CacheKey, category: Category) -> List[CacheKey]:
        """Returns keys worth preloading after ``key`` was hit.

        Args:
            key: The key that was just read from the cache.
            category: The category it was read from.

        Returns:
            Candidate keys, possibly empty. Must not include ``key`` itself.
        """
        pass
