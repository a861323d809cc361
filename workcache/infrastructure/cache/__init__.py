"""Cache building blocks.

Entry store, access tracker, evictor and preloader composed by
workcache.core.cache_manager.CacheManager.
Bounded Context: Cache Management
"""
