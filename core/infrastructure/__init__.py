"""Infrastructure adapters - persistence, database, message bus and security."""
