"""Domain models and value objects for the cache context."""
