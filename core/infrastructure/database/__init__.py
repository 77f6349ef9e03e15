"""SQLAlchemy database layer."""
