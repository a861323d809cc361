"""Concrete Clock implementations."""

import time

from workcache.domain.interfaces.clock import Clock


class SystemClock(Clock):
    """Wall-clock time, matching the mtimes reported by the local disk."""

    def now(self) -> float:
        return time.time()
