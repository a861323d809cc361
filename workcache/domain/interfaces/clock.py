"""Interface for time sources.

TTL expiry, eviction order and the access window all compare against the
same clock, so tests can swap in a fake one.
"""

import abc


class Clock(abc.ABC):
    """Abstract Base Class for wall-clock time."""

    @abc.abstractmethod
    def now(self) -> float:
        """Returns the current time in seconds since the epoch.

        Must be comparable with the modification times reported by the
        FileSystem the cache runs on.
        """
        pass
