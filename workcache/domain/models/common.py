"""Defines common Value Objects used across the cache contexts.

These objects represent simple values like cache keys and categories,
keeping signatures readable and consistent.
"""

from dataclasses import dataclass
from typing import NewType, Tuple

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
CacheKey = NewType("CacheKey", str)        # Caller-supplied key, e.g. a work item id
Category = NewType("Category", str)        # Namespace partition ('workitems', 'queries', 'general')
AccessKey = NewType("AccessKey", str)      # "<category>:<key>" used by the access log

# === Categories ===
WORKITEMS = Category("workitems")
QUERIES = Category("queries")
GENERAL = Category("general")

VALUE_CATEGORIES: Tuple[Category, ...] = (WORKITEMS, QUERIES, GENERAL)
METADATA_DIR = "metadata"
ACCESS_LOG_NAME = "access.log"


def make_access_key(key: CacheKey, category: Category) -> AccessKey:
    """Builds the access-log identifier for a (category, key) pair."""
    return AccessKey(f"{category}:{key}")


# === File System Context ===

@dataclass(frozen=True)
class FileStat:
    """Minimal stat result returned by FileSystem implementations."""
    size: int       # Bytes on disk
    mtime: float    # Last modification time (seconds)
