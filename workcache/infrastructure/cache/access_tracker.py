"""Rolling 24-hour access history per cached key.

The history is an input signal for preloading only; it is never consulted
for expiry or eviction. Old timestamps are pruned lazily whenever a key is
tracked again, not proactively.
"""

import bisect
import json
import logging
from pathlib import Path
from typing import Dict, List

from workcache.domain.interfaces.clock import Clock
from workcache.domain.interfaces.filesystem import FileSystem
from workcache.domain.models.cache import AccessRecord
from workcache.domain.models.common import AccessKey, CacheKey, Category, make_access_key

logger = logging.getLogger(__name__)

ACCESS_WINDOW_SECONDS = 24 * 60 * 60  # 24 hours
MILLISECONDS_PER_SECOND = 1000.0


class AccessTracker:
    """In-memory access log, persisted to a JSON file on demand."""

    def __init__(
        self,
        log_path: Path,
        file_system: FileSystem,
        clock: Clock,
        window: float = ACCESS_WINDOW_SECONDS,
    ):
        self.log_path = Path(log_path)
        self.fs = file_system
        self.clock = clock
        self.window = window
        self._log: Dict[AccessKey, List[float]] = {}

    def track_access(self, key: CacheKey, category: Category) -> AccessRecord:
        """Records an access now and drops timestamps more than a window older than the newest one."""
        access_key = make_access_key(key, category)
        timestamps = self._log.get(access_key, [])
        bisect.insort(timestamps, self.clock.now())
        # The newest entry may be ahead of the clock if the log came from another host
        cutoff = timestamps[-1] - self.window
        recent = [t for t in timestamps if t > cutoff]
        self._log[access_key] = recent
        return AccessRecord(access_key=access_key, timestamps=list(recent))

    def accesses(self, key: CacheKey, category: Category) -> List[float]:
        return list(self._log.get(make_access_key(key, category), []))

    def clear(self) -> None:
        self._log.clear()

    def __len__(self) -> int:
        return len(self._log)

    async def load(self) -> None:
        """Loads the persisted log. A missing or corrupt file leaves the tracker empty."""
        try:
            data = json.loads(await self.fs.read_text(self.log_path))
        except FileNotFoundError:
            logger.debug(f"No access log at {self.log_path}; starting empty.")
            self._log = {}
            return
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load access log {self.log_path}: {e}. Starting empty.")
            self._log = {}
            return

        try:
            if isinstance(data, dict):
                self._log = {AccessKey(str(k)): sorted(float(t) for t in v) for k, v in data.items()}
            else:
                # Older logs are a list of [key, timestamps] pairs in epoch milliseconds
                self._log = {
                    AccessKey(str(k)): sorted(float(t) / MILLISECONDS_PER_SECOND for t in v)
                    for k, v in data
                }
        except (TypeError, ValueError) as e:
            logger.warning(f"Access log {self.log_path} has an unexpected layout: {e}. Starting empty.")
            self._log = {}
            return
        logger.debug(f"Loaded access log with {len(self._log)} keys from {self.log_path}")

    async def save(self) -> None:
        """Writes the full access log. Errors propagate."""
        await self.fs.write_text(self.log_path, json.dumps(self._log))
        logger.debug(f"Saved access log with {len(self._log)} keys to {self.log_path}")
