"""Domain models for the cache bounded context.

Entries, access records and the derived statistics snapshot.
"""

import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from workcache.domain.models.common import AccessKey, CacheKey, Category

BYTES_PER_MB = 1024 * 1024


@dataclass
class CacheEntry:
    """A cached value as seen by callers.

    ``stored_at`` is derived from the file modification time and is never
    written into the payload itself.
    """
    category: Category
    key: CacheKey
    payload: Any
    stored_at: float
    ttl: Optional[float] = None

    def is_expired(self, now: float, default_ttl: float) -> bool:
        """Checks the entry age against its TTL (or the default one)."""
        ttl = self.ttl if self.ttl is not None else default_ttl
        return now - self.stored_at > ttl


@dataclass(frozen=True)
class EntryFile:
    """An entry file found while enumerating the store."""
    path: Path
    category: Category
    digest: str
    size: int
    mtime: float


@dataclass
class AccessRecord:
    """Time-windowed access history for one (category, key) pair."""
    access_key: AccessKey
    timestamps: List[float] = field(default_factory=list)

    @property
    def last_access(self) -> Optional[float]:
        return self.timestamps[-1] if self.timestamps else None

    def __len__(self) -> int:
        return len(self.timestamps)


@dataclass(frozen=True)
class FileInfo:
    """Path and modification time of a single cache file."""
    path: str
    mtime: float


@dataclass
class CacheStats:
    """Snapshot of cache usage, computed on demand by a directory walk."""
    total_files: int = 0
    total_size: int = 0
    max_size: int = 0
    oldest_file: Optional[FileInfo] = None
    newest_file: Optional[FileInfo] = None
    hits: int = 0
    misses: int = 0
    pending_preloads: int = 0
    generated_at: float = field(default_factory=time.time)

    @property
    def total_size_mb(self) -> float:
        return round(self.total_size / BYTES_PER_MB, 2)

    @property
    def utilization_percent(self) -> int:
        if self.max_size <= 0:
            return 0
        # Half-up, so 50.5% shows as 51
        return int(self.total_size / self.max_size * 100 + 0.5)

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage of all lookups."""
        total = self.hits + self.misses
        return round(self.hits / total * 100, 2) if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_size_mb"] = self.total_size_mb
        data["utilization_percent"] = self.utilization_percent
        data["hit_rate"] = self.hit_rate
        return data
