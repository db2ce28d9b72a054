"""Tests for the SQLAlchemy query capability against in-memory SQLite."""

from datetime import date, datetime

import pytest
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from searchstate.application.services.filter_engine import apply_filters
from searchstate.application.services.sort_engine import apply_sort
from searchstate.application.use_cases.search_session import SearchResource
from searchstate.domain.descriptors import FilterSpec, SortSpec
from searchstate.domain.enums import DatePart, SortDirection
from searchstate.domain.exceptions import (
    ConfigurationException,
    DisallowedSortFieldException,
    UnknownFieldException,
)
from searchstate.infrastructure.persistence.search_query import SearchQuery


class Base(DeclarativeBase):
    pass


article_tags = Table(
    "article_tags",
    Base.metadata,
    Column("article_id", ForeignKey("articles.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(50))


class Article(Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20))
    published_at: Mapped[datetime] = mapped_column(DateTime)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"))

    author: Mapped[Author] = relationship()
    tags: Mapped[list[Tag]] = relationship(secondary=article_tags)


@pytest.fixture
def db():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        ada = Author(id=1, name="Ada")
        grace = Author(id=2, name="Grace")
        python = Tag(id=1, slug="python")
        news = Tag(id=2, slug="news")
        session.add_all(
            [
                Article(
                    id=1,
                    title="Testing in Python",
                    status="active",
                    published_at=datetime(2024, 3, 15, 10, 30),
                    author=ada,
                    tags=[python],
                ),
                Article(
                    id=2,
                    title="Release notes",
                    status="archived",
                    published_at=datetime(2023, 7, 1, 9, 0),
                    author=grace,
                    tags=[news],
                ),
                Article(
                    id=3,
                    title="50% off_sale",
                    status="active",
                    published_at=datetime(2024, 7, 20, 18, 0),
                    author=grace,
                    tags=[],
                ),
            ]
        )
        session.commit()
        yield session
    engine.dispose()


def _ids(db: Session, query: SearchQuery) -> list[int]:
    return [article.id for article in db.execute(query.statement).scalars().all()]


def _id_set(db: Session, query: SearchQuery) -> set[int]:
    return set(_ids(db, query))


class TestConditions:
    def test_has_field_only_for_mapped_columns(self) -> None:
        query = SearchQuery.for_model(Article)
        assert query.has_field("title")
        assert not query.has_field("author")
        assert not query.has_field("password")

    def test_has_relation_checks_target_columns(self) -> None:
        query = SearchQuery.for_model(Article)
        assert query.has_relation("author")
        assert query.has_relation("tags", "slug")
        assert not query.has_relation("tags", "name")
        assert not query.has_relation("title")

    def test_equals(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.equals("status", "active"))) == {1, 3}

    def test_equals_list_is_in(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.equals("id", [1, 2]))) == {1, 2}

    def test_like(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.like("title", "notes"))) == {2}

    @pytest.mark.parametrize(("text", "expected"), [("%", {3}), ("_", {3}), ("0% o", {3})])
    def test_like_wildcards_match_literally(self, db: Session, text, expected) -> None:
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.like("title", text))) == expected

    def test_case_insensitive_like(self, db: Session) -> None:
        query = SearchQuery.for_model(Article, case_insensitive=True)
        assert _id_set(db, query.where(query.like("title", "PYTHON"))) == {1}

    def test_date_parts(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.date_part("published_at", DatePart.YEAR, 2024))) == {1, 3}
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.date_part("published_at", DatePart.MONTH, 7))) == {2, 3}

    def test_date_equals_ignores_time(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        assert _id_set(db, query.where(query.date_equals("published_at", date(2024, 3, 15)))) == {1}

    def test_related_scalar_and_collection(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        query.where(query.related("author", lambda q: q.like("name", "Grace")))
        assert _id_set(db, query) == {2, 3}

        query = SearchQuery.for_model(Article)
        query.where(query.related("tags", lambda q: q.equals("slug", "python")))
        assert _id_set(db, query) == {1}

    def test_where_any(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        query.where_any([query.equals("id", 1), query.equals("id", 2)])
        assert _id_set(db, query) == {1, 2}

    def test_unknown_field_and_relation(self) -> None:
        query = SearchQuery.for_model(Article)
        with pytest.raises(UnknownFieldException) as exc:
            query.equals("password", "x")
        assert exc.value.details == {"field": "password", "target": "Article"}
        with pytest.raises(UnknownFieldException):
            query.related("editor", lambda q: q.equals("id", 1))


class TestOrderingAndPages:
    def test_order_by(self, db: Session) -> None:
        assert _ids(db, SearchQuery.for_model(Article).order_by("title", SortDirection.ASC)) == [3, 2, 1]
        assert _ids(db, SearchQuery.for_model(Article).order_by("published_at", SortDirection.DESC)) == [3, 1, 2]

    def test_paginate(self, db: Session) -> None:
        query = SearchQuery.for_model(Article).order_by("title", SortDirection.ASC).paginate(limit=1, offset=1)
        assert _ids(db, query) == [2]

    def test_count_ignores_order_and_pagination(self, db: Session) -> None:
        query = SearchQuery.for_model(Article)
        query.where(query.equals("status", "active"))
        query.order_by("title", SortDirection.ASC).paginate(limit=1, offset=0)
        assert db.execute(query.count_statement()).scalar_one() == 2


class TestEngines:
    """Filter and sort engines driving the SQLAlchemy query."""

    def test_text_filter_across_relation(self, db: Session) -> None:
        spec = FilterSpec.from_config(
            {
                "q": {
                    "columns": ["title", "author"],
                    "relations": {"author": {"relation": "author", "field": "name"}},
                },
                "status": "exact",
            }
        )
        query = apply_filters(SearchQuery.for_model(Article), {"q": "Ada", "status": "active"}, spec)
        assert _id_set(db, query) == {1}
        query = apply_filters(SearchQuery.for_model(Article), {"q": "notes", "status": "all"}, spec)
        assert _id_set(db, query) == {2}
        query = apply_filters(SearchQuery.for_model(Article), {"q": ["Ada", "notes"]}, spec)
        assert _id_set(db, query) == {1, 2}

    def test_date_and_relation_filters(self, db: Session) -> None:
        spec = FilterSpec.from_config(
            {
                "published_at": {"type": "date", "year": "year", "month": "month"},
                "tag": {"type": "relation", "relation": "tags", "field": "slug"},
            }
        )
        query = apply_filters(SearchQuery.for_model(Article), {"year": "2024", "month": "3"}, spec)
        assert _id_set(db, query) == {1}
        query = apply_filters(SearchQuery.for_model(Article), {"tag": "news"}, spec)
        assert _id_set(db, query) == {2}

    def test_fallback_sort_on_model_column(self, db: Session) -> None:
        query = apply_sort(SearchQuery.for_model(Article), {"sort": "title", "direction": "asc"}, SortSpec.from_config({}))
        assert _ids(db, query) == [3, 2, 1]

    def test_fallback_sort_on_unmapped_name_rejected(self) -> None:
        with pytest.raises(DisallowedSortFieldException):
            apply_sort(SearchQuery.for_model(Article), {"sort": "author"}, SortSpec.from_config({}))


class TestResourceFieldCheck:
    """SearchResource.check_fields against the mapped Article model."""

    def test_mapped_declaration_passes(self) -> None:
        resource = SearchResource.from_config(
            "articles",
            filters={
                "q": {
                    "columns": ["title", "author"],
                    "relations": {"author": {"relation": "author", "field": "name"}},
                },
                "status": "exact",
                "published_at": {"type": "date", "year": "year", "month": "month"},
                "tag": {"type": "relation", "relation": "tags", "field": "slug"},
            },
            sorts={"title": "title", "newest": {"field": "published_at"}},
        )
        assert resource.check_fields(SearchQuery.for_model(Article)) is resource

    def test_unmapped_columns_fail_at_startup(self) -> None:
        resource = SearchResource.from_config(
            "articles",
            filters={
                "state": "exact",
                "tag": {"type": "relation", "relation": "tags", "field": "label"},
                "period": {"type": "date", "column": "created_at"},
            },
        )
        with pytest.raises(ConfigurationException, match="state, tags.label, created_at"):
            resource.check_fields(SearchQuery.for_model(Article))
