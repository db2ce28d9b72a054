"""Persistence adapters: SQLAlchemy query capability."""

from searchstate.infrastructure.persistence.search_query import SearchQuery

__all__ = ["SearchQuery"]
