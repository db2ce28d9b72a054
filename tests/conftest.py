"""Pytest configuration and fixtures for searchstate.

API tests run the app through httpx ASGITransport (no lifespan), so the
app fixture installs a MemoryCache on app.state directly. Engine tests use
RecordingQuery, a query capability that records what the engines asked for.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-search-state")
os.environ.setdefault("REDIS_ENABLED", "false")

from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from searchstate.application.services.parameter_store import ParameterStore
from searchstate.application.use_cases.search_session import SearchResource
from searchstate.core.config import get_settings
from searchstate.domain.enums import DatePart, SortDirection
from searchstate.infrastructure.cache.memory_cache import MemoryCache
from searchstate.main import create_app

get_settings.cache_clear()


class RecordingQuery:
    """Query capability that records conditions, orderings and pagination.

    fields limits has_field and has_relation ("relation.field" entries);
    None accepts every name.

    Conditions are tuples: ("equals", field, value), ("like", field, pattern),
    ("year"|"month", field, n), ("date", field, date), ("exists", relation, cond),
    and ("any", (cond, ...)) for OR groups.
    """

    def __init__(self, fields: set[str] | None = None) -> None:
        self.fields = fields
        self.predicates: list[Any] = []
        self.orderings: list[tuple[str, str]] = []
        self.page: tuple[int, int] | None = None

    def has_field(self, field: str) -> bool:
        return self.fields is None or field in self.fields

    def has_relation(self, relation: str, field: str | None = None) -> bool:
        name = relation if field is None else f"{relation}.{field}"
        return self.fields is None or name in self.fields

    def equals(self, field: str, value: Any) -> tuple:
        return ("equals", field, value)

    def like(self, field: str, value: str) -> tuple:
        return ("like", field, f"%{value}%")

    def date_part(self, field: str, part: DatePart, value: int) -> tuple:
        return (part.value, field, value)

    def date_equals(self, field: str, value: Any) -> tuple:
        return ("date", field, value)

    def related(self, relation: str, build: Any) -> tuple:
        return ("exists", relation, build(RecordingQuery()))

    def where(self, *conditions: Any) -> "RecordingQuery":
        self.predicates.extend(conditions)
        return self

    def where_any(self, conditions: list[Any]) -> "RecordingQuery":
        self.predicates.append(("any", tuple(conditions)))
        return self

    def order_by(self, field: str, direction: SortDirection) -> "RecordingQuery":
        self.orderings.append((field, direction.value))
        return self

    def paginate(self, limit: int, offset: int) -> "RecordingQuery":
        self.page = (limit, offset)
        return self


@pytest.fixture
def recording_query() -> type[RecordingQuery]:
    """The RecordingQuery class (call it, optionally with the known fields)."""
    return RecordingQuery


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def store(memory_cache: MemoryCache) -> ParameterStore:
    """Parameter store over an empty in-process cache, 1h TTL."""
    return ParameterStore(memory_cache, ttl_seconds=3600)


@pytest.fixture
def articles_resource() -> SearchResource:
    """Resource registered as 'articles' in the API app."""
    return SearchResource.from_config(
        "articles",
        filters={"status": "exact", "title": "text"},
        sorts={
            "title": "title",
            "default": lambda q, direction, params: q.order_by("published_at", direction),
        },
        defaults={"status": "active"},
    )


@pytest.fixture
def app(memory_cache: MemoryCache, articles_resource: SearchResource) -> FastAPI:
    application = create_app(resources=[articles_resource])
    application.state.cache = memory_cache
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
