"""Infrastructure: cache services, SQLAlchemy query adapter, token verification."""
