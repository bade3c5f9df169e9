"""Infrastructure adapters: logging, database, redis, messaging, metrics."""
