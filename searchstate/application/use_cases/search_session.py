"""Search resources and the request-scoped search session.

A SearchResource is one controller's declaration (filters, sorts, defaults,
page size), validated once when it is built. A SearchSession binds a
resource to the parameter store and the cache key of the current user and
the resource name, and runs the whole flow for a listing request:

    params, query = await session.search(SearchQuery.for_model(Article), request_params)
    rows = (await db.execute(query.statement)).scalars().all()

At startup, ARTICLES.check_fields(SearchQuery.for_model(Article)) turns a
declaration that names unmapped columns into a ConfigurationException.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from searchstate.application.services.filter_engine import apply_filters
from searchstate.application.services.pagination import (
    apply_pagination,
    resolve_page,
    resolve_page_size,
)
from searchstate.application.services.parameter_resolution import (
    resolve_parameters,
    supplied_parameters,
)
from searchstate.application.services.sort_engine import (
    apply_sort,
    check_sort_key,
    sort_state,
)
from searchstate.core.constants import DIRECTION_PARAM, PAGINATION_PARAM, SORT_PARAM
from searchstate.domain.descriptors import (
    DateFilter,
    ExactFilter,
    FieldSort,
    FilterSpec,
    RelationFilter,
    SortSpec,
    TextFilter,
)
from searchstate.domain.enums import SortDirection
from searchstate.domain.exceptions import (
    ConfigurationException,
    DisallowedSortFieldException,
)
from searchstate.domain.values import SearchParameters

if TYPE_CHECKING:
    from searchstate.application.interfaces.query import QueryCapability
    from searchstate.application.services.parameter_store import ParameterStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResource:
    """Declared filters, sorts and defaults of one listing route.

    page_size None means the application default (settings).
    """

    name: str
    filters: FilterSpec = field(default_factory=FilterSpec)
    sorts: SortSpec = field(default_factory=SortSpec)
    defaults: Mapping[str, Any] = field(default_factory=dict)
    page_size: int | None = None

    @classmethod
    def from_config(
        cls,
        name: str,
        *,
        filters: Mapping[str, Any] | None = None,
        sorts: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
        page_size: int | None = None,
        allowed_sort_fields: Iterable[str] | None = None,
        sort_param: str = SORT_PARAM,
        direction_param: str = DIRECTION_PARAM,
        default_direction: str = SortDirection.DESC.value,
    ) -> SearchResource:
        """Parse and validate a resource declaration.

        Raises:
            ConfigurationException: Any filter or sort declaration is invalid.
        """
        if not name:
            raise ConfigurationException("Search resources need a non-empty name")
        if page_size is not None and (isinstance(page_size, bool) or page_size < 1):
            raise ConfigurationException(
                f"page_size of '{name}' must be a positive integer", name
            )
        return cls(
            name=name,
            filters=FilterSpec.from_config(filters),
            sorts=SortSpec.from_config(
                sorts,
                allowed_fields=allowed_sort_fields,
                sort_param=sort_param,
                direction_param=direction_param,
                default_direction=default_direction,
            ),
            defaults=dict(defaults or {}),
            page_size=page_size,
        )

    def declared_defaults(self, default_page_size: int) -> SearchParameters:
        """Defaults including the page size under "pagination" (declared defaults win)."""
        return {PAGINATION_PARAM: self.page_size or default_page_size, **self.defaults}

    def _field_references(self) -> Iterator[tuple[str | None, str]]:
        """(relation or None, column) pairs the filters and field sorts read."""
        for spec in self.filters:
            if isinstance(spec, TextFilter):
                for column in spec.columns:
                    related = spec.relations.get(column)
                    if related is None:
                        yield None, column
                    else:
                        yield related.relation, related.field
            elif isinstance(spec, ExactFilter):
                yield None, spec.column
            elif isinstance(spec, DateFilter):
                for column in dict.fromkeys((*spec.columns, spec.column or spec.field)):
                    yield spec.relations.get(column), column
            elif isinstance(spec, RelationFilter):
                yield spec.relation, spec.related_field
        for descriptor in (*self.sorts.entries.values(), self.sorts.default):
            if isinstance(descriptor, FieldSort):
                yield None, descriptor.field

    def check_fields(self, query: "QueryCapability") -> SearchResource:
        """Check that the model behind query maps every column this resource names.

        Meant for startup, next to the declaration. Custom filters and
        callback sorts are not inspected. Returns self.

        Raises:
            ConfigurationException: Some columns or relations are not mapped.
        """
        unmapped = []
        for relation, column in self._field_references():
            if relation is None:
                if not query.has_field(column):
                    unmapped.append(column)
            elif not query.has_relation(relation, column):
                unmapped.append(f"{relation}.{column}")
        if unmapped:
            raise ConfigurationException(
                f"Search resource '{self.name}' names unmapped fields: "
                + ", ".join(dict.fromkeys(unmapped)),
                self.name,
            )
        return self


class ResourceRegistry:
    """Search resources by name, the route name the search-state endpoints take."""

    def __init__(self, resources: Iterable[SearchResource] = ()) -> None:
        self._resources: dict[str, SearchResource] = {}
        for resource in resources:
            self.register(resource)

    def register(self, resource: SearchResource) -> None:
        if resource.name in self._resources:
            raise ConfigurationException(
                f"Search resource '{resource.name}' is already registered", resource.name
            )
        self._resources[resource.name] = resource

    def get(self, name: str) -> SearchResource | None:
        return self._resources.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._resources


class SearchSession:
    """Resolve, remember and apply the search parameters of one request."""

    def __init__(
        self,
        store: "ParameterStore",
        key: str,
        resource: SearchResource,
        default_page_size: int,
        max_page_size: int,
    ) -> None:
        self.store = store
        self.key = key
        self.resource = resource
        self.default_page_size = resource.page_size or default_page_size
        self.max_page_size = max_page_size

    @property
    def defaults(self) -> SearchParameters:
        return self.resource.declared_defaults(self.default_page_size)

    async def resolve(
        self,
        request_params: Mapping[str, Any] | None = None,
        *,
        query: "QueryCapability | None" = None,
        remember: bool = True,
    ) -> SearchParameters:
        """Return request > cache > default parameters for this request.

        When the request supplied any non-empty value and remember is True,
        the resolved parameters replace the cached entry so the next request
        on this route starts from them. A sort key is checked first (against
        query's fields when one is given): a rejected key from the request
        raises and nothing is written; a rejected key read back from the
        cache is dropped from the entry.

        Raises:
            DisallowedSortFieldException: The request's sort key is not allowed.
        """
        sorts = self.resource.sorts
        defaults = self.defaults
        cached = await self.store.get(self.key, defaults)
        supplied = supplied_parameters(request_params)
        resolved = resolve_parameters(request_params, cached, defaults)
        try:
            check_sort_key(resolved, sorts, query)
        except DisallowedSortFieldException:
            if sorts.sort_param in supplied:
                raise
            logger.warning(
                "Dropping remembered sort key %r for %s", resolved[sorts.sort_param], self.key
            )
            resolved.pop(sorts.sort_param)
            cached = await self.store.put(self.key, resolved)
        if remember and supplied and resolved != cached:
            await self.store.put(self.key, resolved)
            logger.debug("Remembered search parameters for %s", self.key)
        return resolved

    async def search(
        self,
        query: "QueryCapability",
        request_params: Mapping[str, Any] | None = None,
        *,
        paginate: bool = True,
    ) -> tuple[SearchParameters, "QueryCapability"]:
        """resolve() against query's fields, then apply(); returns (params, query)."""
        params = await self.resolve(request_params, query=query)
        return params, self.apply(query, params, paginate=paginate)

    def apply(
        self,
        query: "QueryCapability",
        params: Mapping[str, Any],
        *,
        paginate: bool = True,
    ) -> "QueryCapability":
        """Apply filters, sort and (optionally) pagination, in that order."""
        query = apply_filters(query, params, self.resource.filters)
        query = apply_sort(query, params, self.resource.sorts)
        if paginate:
            query = apply_pagination(
                query, params, self.default_page_size, self.max_page_size
            )
        return query

    def sort_state(self, params: Mapping[str, Any]) -> tuple[str | None, SortDirection]:
        """Resolved (sort key, direction) for rendering sort controls."""
        return sort_state(params, self.resource.sorts)

    def page_state(self, params: Mapping[str, Any]) -> tuple[int, int]:
        """Resolved (page, page size)."""
        return (
            resolve_page(params),
            resolve_page_size(params, self.default_page_size, self.max_page_size),
        )

    async def clear(self) -> None:
        """Forget the remembered parameters of this user on this route."""
        await self.store.clear(self.key)
