"""Infrastructure layer: Redis transport and the cache facade built on it."""
