"""Usage storage backends (in-memory, SQLAlchemy, Redis)."""
