"""Infrastructure: persistence, cache and external services."""
