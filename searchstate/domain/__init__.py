"""Domain layer: descriptors, enums, the emptiness rule, and exceptions.

No dependency on FastAPI, SQLAlchemy or Redis.
"""
