"""Tests for sort_state, check_sort_key and apply_sort."""

import pytest

from searchstate.application.services.sort_engine import apply_sort, check_sort_key, sort_state
from searchstate.domain.descriptors import SortSpec
from searchstate.domain.enums import SortDirection
from searchstate.domain.exceptions import DisallowedSortFieldException


def _by_created(query, direction, params):
    return query.order_by("created_at", direction)


class TestSortState:
    def test_defaults(self) -> None:
        assert sort_state({}, SortSpec.from_config({})) == (None, SortDirection.DESC)

    def test_reads_configured_parameter_names(self) -> None:
        spec = SortSpec.from_config({}, sort_param="orderBy", direction_param="order")
        assert sort_state({"orderBy": " name ", "order": "ASC"}, spec) == ("name", SortDirection.ASC)

    def test_unknown_direction_uses_default(self) -> None:
        spec = SortSpec.from_config({}, default_direction="asc")
        assert sort_state({"direction": "sideways"}, spec) == (None, SortDirection.ASC)


class TestApplySort:
    def test_undeclared_field_used_as_column(self, recording_query) -> None:
        query = apply_sort(recording_query(), {"sort": "name", "direction": "asc"}, SortSpec.from_config({}))
        assert query.orderings == [("name", "asc")]

    def test_default_direction_is_desc(self, recording_query) -> None:
        query = apply_sort(recording_query(), {"sort": "name"}, SortSpec.from_config({}))
        assert query.orderings == [("name", "desc")]

    def test_declared_field(self, recording_query) -> None:
        spec = SortSpec.from_config({"newest": {"field": "created_at"}})
        query = apply_sort(recording_query(), {"sort": "newest", "direction": "desc"}, spec)
        assert query.orderings == [("created_at", "desc")]

    def test_declared_callback_receives_direction_and_params(self, recording_query) -> None:
        seen = []

        def rank(query, direction, params):
            seen.append((direction, params["boost"]))
            return query.order_by("score", direction).order_by("id", SortDirection.ASC)

        spec = SortSpec.from_config({"rank": rank})
        query = apply_sort(recording_query(), {"sort": "rank", "direction": "asc", "boost": "2"}, spec)
        assert query.orderings == [("score", "asc"), ("id", "asc")]
        assert seen == [(SortDirection.ASC, "2")]

    @pytest.mark.parametrize("params", [{}, {"sort": ""}, {"sort": "all"}, {"sort": "default"}])
    def test_default_entry_when_no_key(self, recording_query, params) -> None:
        spec = SortSpec.from_config({"default": _by_created})
        query = apply_sort(recording_query(), params, spec)
        assert query.orderings == [("created_at", "desc")]

    def test_no_default_means_no_ordering(self, recording_query) -> None:
        query = recording_query()
        assert apply_sort(query, {}, SortSpec.from_config({})) is query
        assert query.orderings == []

    def test_callback_returning_none_keeps_query(self, recording_query) -> None:
        spec = SortSpec.from_config({"default": lambda query, direction, params: None})
        query = recording_query()
        assert apply_sort(query, {}, spec) is query

    @pytest.mark.parametrize("key", ["name; drop table users", "users.name", "1name", "name desc"])
    def test_non_identifier_keys_rejected(self, recording_query, key) -> None:
        with pytest.raises(DisallowedSortFieldException) as exc:
            apply_sort(recording_query(), {"sort": key}, SortSpec.from_config({}))
        assert exc.value.error_code == "DISALLOWED_SORT_FIELD"

    def test_allowed_fields_restricts_fallback(self, recording_query) -> None:
        spec = SortSpec.from_config({}, allowed_fields=["name"])
        assert apply_sort(recording_query(), {"sort": "name"}, spec).orderings == [("name", "desc")]
        with pytest.raises(DisallowedSortFieldException):
            apply_sort(recording_query(), {"sort": "password_hash"}, spec)

    def test_allowed_fields_does_not_restrict_declared_keys(self, recording_query) -> None:
        spec = SortSpec.from_config({"newest": {"field": "created_at"}}, allowed_fields=["name"])
        query = apply_sort(recording_query(), {"sort": "newest"}, spec)
        assert query.orderings == [("created_at", "desc")]

    def test_unknown_model_field_rejected(self, recording_query) -> None:
        with pytest.raises(DisallowedSortFieldException):
            apply_sort(recording_query(fields={"name"}), {"sort": "missing"}, SortSpec.from_config({}))


class TestCheckSortKey:
    @pytest.mark.parametrize("params", [{}, {"sort": ""}, {"sort": "default"}, {"sort": "newest"}])
    def test_empty_default_and_declared_keys_pass(self, recording_query, params) -> None:
        spec = SortSpec.from_config({"newest": {"field": "created_at"}}, allowed_fields=["name"])
        check_sort_key(params, spec, recording_query(fields=set()))

    def test_without_query_only_shape_and_allow_list_are_checked(self) -> None:
        check_sort_key({"sort": "anything"}, SortSpec.from_config({}))
        with pytest.raises(DisallowedSortFieldException):
            check_sort_key({"sort": "name desc"}, SortSpec.from_config({}))
        with pytest.raises(DisallowedSortFieldException):
            check_sort_key({"sort": "email"}, SortSpec.from_config({}, allowed_fields=["name"]))

    def test_query_fields_are_checked(self, recording_query) -> None:
        spec = SortSpec.from_config({})
        check_sort_key({"sort": "name"}, spec, recording_query(fields={"name"}))
        with pytest.raises(DisallowedSortFieldException) as exc:
            check_sort_key({"sort": "bogus"}, spec, recording_query(fields={"name"}))
        assert exc.value.details == {"sort_key": "bogus"}
