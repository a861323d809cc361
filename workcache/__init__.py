"""workcache: intelligent local cache for remote work-item data.

Keeps fetched issues, tasks and query results on disk with TTL expiry,
a size budget and adjacent-id preload hints.
"""

__version__ = "0.1.0"
