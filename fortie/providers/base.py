"""
Provider Base.

A provider represents one Fortnox resource. Subclasses only declare their
REST path, wrapper key and attribute lists, and expose the operations the
resource supports by combining the helpers below.

Listing setters (page, limit, sort_by, ...) return a copy of the provider
bound to new QueryOptions:

    invoices = fortie.invoices.filter("unpaid").sort_by("DueDate").limit(50)
    await invoices.all()
"""

import copy
import logging
from typing import Any, ClassVar, Mapping

from ..core.dispatcher import CancellationToken, Dispatcher
from ..core.query import QueryOptions
from ..core.request import FortieRequest, HttpMethod, RequestBuilder
from ..core.schema import AttributeSchema

logger = logging.getLogger(__name__)


class ProviderBase:
    """
    Base provider for all Fortnox resources.

    Class attributes:
        base_path: REST path of the resource, e.g. "pricelists"
        wrapper: Key the body is nested under, e.g. "PriceList"
        collection_key: Key holding the items of a listing, e.g. "PriceLists"
        attributes: Readable attributes
        writeable: Attributes accepted on create/update
        required_create: Attributes a create request must carry
        required_update: Attributes an update request must carry
        available_filters: Values accepted by ``filter``
    """

    base_path: ClassVar[str] = ""
    wrapper: ClassVar[str | None] = None
    collection_key: ClassVar[str | None] = None

    attributes: ClassVar[tuple[str, ...]] = ()
    writeable: ClassVar[tuple[str, ...]] = ()
    required_create: ClassVar[tuple[str, ...]] = ()
    required_update: ClassVar[tuple[str, ...]] = ()
    available_filters: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        dispatcher: Dispatcher,
        query: QueryOptions | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.schema = self.build_schema()
        self.query = query or QueryOptions.for_provider(
            readable=self.attributes,
            available_filters=self.available_filters,
        )

    @classmethod
    def build_schema(cls) -> AttributeSchema:
        return AttributeSchema.create(
            readable=cls.attributes,
            writeable=cls.writeable,
            required_create=cls.required_create,
            required_update=cls.required_update,
        )

    # --- Listing modifiers -------------------------------------------------

    def with_query(self, query: QueryOptions) -> "ProviderBase":
        """Return a copy of this provider bound to ``query``."""
        clone = copy.copy(self)
        clone.query = query
        return clone

    def page(self, page: int) -> "ProviderBase":
        return self.with_query(self.query.with_page(page))

    def offset(self, offset: int) -> "ProviderBase":
        return self.with_query(self.query.with_offset(offset))

    def limit(self, limit: int) -> "ProviderBase":
        return self.with_query(self.query.with_limit(limit))

    def unlimited(self) -> "ProviderBase":
        return self.with_query(self.query.with_unlimited())

    def timespan(self, timespan: Any) -> "ProviderBase":
        return self.with_query(self.query.with_timespan(timespan))

    def filter(self, filter: str | None) -> "ProviderBase":
        return self.with_query(self.query.with_filter(filter))

    def sort_by(self, sort_by: str) -> "ProviderBase":
        return self.with_query(self.query.with_sort_by(sort_by))

    def sort_order(self, sort_order: Any) -> "ProviderBase":
        return self.with_query(self.query.with_sort_order(sort_order))

    # --- Request helpers ---------------------------------------------------

    def request(self, method: "str | HttpMethod", *path: Any) -> RequestBuilder:
        """Start a request below this provider's base path."""
        return RequestBuilder().method(method).path(self.base_path, *path)

    async def send(
        self,
        request: FortieRequest,
        cancel_token: CancellationToken | None = None,
    ) -> Any:
        return await self.dispatcher.send(request, self.schema, cancel_token)

    async def _list(
        self,
        *path: Any,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        List resources using the current query options.

        With an unlimited query every page is fetched and the items under
        ``collection_key`` are concatenated into the first response.
        """
        query = self.query
        result = await self.send(self._list_request(query, path, params))

        if not query.is_unlimited or not self.collection_key or not isinstance(result, dict):
            return result

        items = list(result.get(self.collection_key) or [])
        total_pages = self._total_pages(result)
        page = query.page

        while page < total_pages:
            page += 1
            logger.debug(f"Fetching {self.base_path} page {page}/{total_pages}")
            page_result = await self.send(self._list_request(query.with_page(page), path, params))
            if isinstance(page_result, dict):
                items.extend(page_result.get(self.collection_key) or [])

        merged = dict(result)
        merged[self.collection_key] = items
        if isinstance(result.get("MetaInformation"), dict):
            merged["MetaInformation"] = {**result["MetaInformation"], "@CurrentPage": page}
        return merged

    def _list_request(
        self,
        query: QueryOptions,
        path: tuple[Any, ...],
        params: Mapping[str, Any] | None,
    ) -> FortieRequest:
        return (
            self.request(HttpMethod.GET, *path)
            .params(query.to_params())
            .params(params or {})
            .build()
        )

    @staticmethod
    def _total_pages(result: Mapping[str, Any]) -> int:
        meta = result.get("MetaInformation") or {}
        try:
            return int(meta.get("@TotalPages", 1))
        except (TypeError, ValueError):
            return 1

    async def _find(self, identifier: Any, params: Mapping[str, Any] | None = None) -> Any:
        request = self.request(HttpMethod.GET, identifier).params(params or {}).build()
        return await self.send(request)

    async def _create(self, data: Mapping[str, Any], params: Mapping[str, Any] | None = None) -> Any:
        request = (
            self.request(HttpMethod.POST)
            .wrapper(self.wrapper)
            .required(self.required_create)
            .data(data)
            .params(params or {})
            .build()
        )
        return await self.send(request)

    async def _update(
        self,
        identifier: Any,
        data: Mapping[str, Any],
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        request = (
            self.request(HttpMethod.PUT, identifier)
            .wrapper(self.wrapper)
            .required(self.required_update)
            .data(data)
            .params(params or {})
            .build()
        )
        return await self.send(request)

    async def _delete(self, identifier: Any) -> Any:
        return await self.send(self.request(HttpMethod.DELETE, identifier).build())
