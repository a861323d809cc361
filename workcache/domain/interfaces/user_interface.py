"""Interface for reporting to the user.

Defines the contract for displaying values, statistics, errors and
informational messages, allowing different UI implementations.
"""

import abc
from typing import Any, List

from ..models.cache import CacheStats


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays a cached value to the user.

        Args:
            output: The value to render.
            **kwargs: Additional arguments for formatting (e.g. title).
        """
        pass

    @abc.abstractmethod
    def display_stats(self, stats: CacheStats) -> None:
        """Displays a cache statistics snapshot."""
        pass

    @abc.abstractmethod
    def display_keys(self, title: str, keys: List[str]) -> None:
        """Displays a list of cache keys under a title."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def confirm(self, question: str) -> bool:
        """Asks the user a yes/no question."""
        pass
