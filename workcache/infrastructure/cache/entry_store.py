"""Durable key/value storage partitioned by category.

Each value lives in ``<root>/<category>/<sha256(key)>.json``. The file
modification time is the entry's age; an optional TTL override is kept in
``<root>/metadata/<category>.<sha256(key)>.meta`` so expiry can be decided
without parsing the payload.

Reads fail open: any missing, expired, unreadable or corrupt entry is a
miss. Writes propagate their errors.
"""

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

# Domain Layer Imports
from workcache.domain.exceptions import UnknownCategoryError
from workcache.domain.interfaces.clock import Clock
from workcache.domain.interfaces.filesystem import FileSystem
from workcache.domain.models.cache import CacheEntry, EntryFile
from workcache.domain.models.common import (
    CacheKey,
    Category,
    METADATA_DIR,
    VALUE_CATEGORIES,
)

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".json"
META_SUFFIX = ".meta"


def hash_key(key: CacheKey) -> str:
    """Maps a cache key to a stable, filename-safe digest."""
    return hashlib.sha256(str(key).encode('utf-8', errors='surrogatepass')).hexdigest()


class EntryStore:
    """Stores JSON payloads on a FileSystem with mtime-based expiry."""

    def __init__(
        self,
        root: Path,
        file_system: FileSystem,
        clock: Clock,
        default_ttl: float,
        categories: Iterable[Category] = VALUE_CATEGORIES,
    ):
        self.root = Path(root)
        self.fs = file_system
        self.clock = clock
        self.default_ttl = default_ttl
        self.categories: Tuple[Category, ...] = tuple(categories)
        self.metadata_dir = self.root / METADATA_DIR

    # --- Paths ---

    def entry_path(self, key: CacheKey, category: Category) -> Path:
        return self.root / category / f"{hash_key(key)}{ENTRY_SUFFIX}"

    def meta_path(self, key: CacheKey, category: Category) -> Path:
        return self._meta_path_for_digest(category, hash_key(key))

    def _meta_path_for_digest(self, category: Category, digest: str) -> Path:
        return self.metadata_dir / f"{category}.{digest}{META_SUFFIX}"

    def _check_category(self, category: Category) -> None:
        if category not in self.categories:
            raise UnknownCategoryError(category, self.categories)

    async def init(self) -> None:
        """Creates the category and metadata directories."""
        for category in self.categories:
            await self.fs.make_dirs(self.root / category)
        await self.fs.make_dirs(self.metadata_dir)
        logger.debug(f"Entry store ready at {self.root} (categories: {', '.join(self.categories)})")

    # --- Metadata ---

    async def _read_ttl(self, meta_path: Path) -> Optional[float]:
        """Returns the recorded TTL override, or None if there is no usable record."""
        try:
            record = json.loads(await self.fs.read_text(meta_path))
            ttl = record["ttl"]
            return float(ttl) if ttl is not None else None
        except FileNotFoundError:
            return None
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning(f"Ignoring unreadable TTL record {meta_path}: {e}")
            return None

    async def _discard_quietly(self, *paths: Path) -> None:
        for path in paths:
            try:
                await self.fs.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to delete cache file {path}: {e}")

    # --- Reads ---

    async def _live_entry(self, key: CacheKey, category: Category) -> Optional[CacheEntry]:
        """Stats the entry and applies TTL expiry. The payload is not read."""
        if category not in self.categories:
            logger.warning(f"Lookup in unknown cache category '{category}' treated as a miss.")
            return None
        path = self.entry_path(key, category)
        try:
            stat = await self.fs.stat(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to stat cache file {path}: {e}")
            return None

        entry = CacheEntry(
            category=category,
            key=key,
            payload=None,
            stored_at=stat.mtime,
            ttl=await self._read_ttl(self.meta_path(key, category)),
        )
        if entry.is_expired(self.clock.now(), self.default_ttl):
            logger.debug(f"Cache entry expired for {category}:{key}. Removing file.")
            await self._discard_quietly(path, self.meta_path(key, category))
            return None
        return entry

    async def read_entry(self, key: CacheKey, category: Category) -> Optional[CacheEntry]:
        """Returns the live entry with its payload, or None on any miss."""
        entry = await self._live_entry(key, category)
        if entry is None:
            return None
        path = self.entry_path(key, category)
        try:
            entry.payload = json.loads(await self.fs.read_text(path))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read or parse cache file {path}: {e}. Removing.")
            await self._discard_quietly(path, self.meta_path(key, category))
            return None
        return entry

    async def read(self, key: CacheKey, category: Category) -> Optional[Any]:
        entry = await self.read_entry(key, category)
        return entry.payload if entry is not None else None

    async def contains(self, key: CacheKey, category: Category) -> bool:
        """Checks for a live entry without deserializing the payload."""
        return await self._live_entry(key, category) is not None

    # --- Writes ---

    async def write(
        self,
        key: CacheKey,
        category: Category,
        value: Any,
        ttl: Optional[float] = None,
    ) -> Path:
        """Writes a value (and its TTL record). Errors propagate to the caller."""
        self._check_category(category)
        if ttl is not None and ttl < 0:
            raise ValueError(f"ttl must be non-negative, got {ttl}")

        content = json.dumps(value, indent=2)
        path = self.entry_path(key, category)
        await self.fs.write_text(path, content)

        meta_path = self.meta_path(key, category)
        if ttl is not None:
            record = {"ttl": ttl, "created_at": self.clock.now()}
            await self.fs.write_text(meta_path, json.dumps(record))
        else:
            # A previous write may have left an override behind
            await self._discard_quietly(meta_path)
        logger.debug(f"Stored cache entry {category}:{key} ({len(content)} chars, ttl={ttl})")
        return path

    async def delete(self, key: CacheKey, category: Category) -> bool:
        """Removes an entry and its TTL record. Returns True if the entry existed."""
        if category not in self.categories:
            return False
        path = self.entry_path(key, category)
        existed = await self.fs.exists(path)
        await self._discard_quietly(path, self.meta_path(key, category))
        if existed:
            logger.debug(f"Deleted cache entry {category}:{key}")
        return existed

    # --- Enumeration ---

    async def list_entries(self) -> List[EntryFile]:
        """Enumerates entry files across every value category.

        Missing directories and files that vanish mid-walk are skipped.
        """
        entries: List[EntryFile] = []
        for category in self.categories:
            directory = self.root / category
            try:
                names = await self.fs.list_dir(directory)
            except FileNotFoundError:
                continue
            for name in names:
                if not name.endswith(ENTRY_SUFFIX):
                    continue
                path = directory / name
                try:
                    stat = await self.fs.stat(path)
                except OSError:
                    continue
                entries.append(EntryFile(
                    path=path,
                    category=category,
                    digest=name[:-len(ENTRY_SUFFIX)],
                    size=stat.size,
                    mtime=stat.mtime,
                ))
        return entries

    async def discard(self, entry: EntryFile) -> bool:
        """Best-effort removal of an enumerated entry and its TTL record.

        Returns True if the entry is gone afterwards (including when it was
        already removed), False if the removal failed.
        """
        try:
            await self.fs.remove(entry.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to delete cache file {entry.path}: {e}")
            return False
        await self._discard_quietly(self._meta_path_for_digest(entry.category, entry.digest))
        return True

    async def is_expired(self, entry: EntryFile) -> bool:
        """Checks an enumerated entry against its TTL (default TTL if none recorded)."""
        ttl = await self._read_ttl(self._meta_path_for_digest(entry.category, entry.digest))
        if ttl is None:
            ttl = self.default_ttl
        return self.clock.now() - entry.mtime > ttl
