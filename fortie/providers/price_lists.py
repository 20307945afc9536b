"""Price lists."""

from typing import Any, Mapping

from .base import ProviderBase


class PriceLists(ProviderBase):

    base_path = "pricelists"
    wrapper = "PriceList"
    collection_key = "PriceLists"

    attributes = (
        "Url",
        "Code",
        "Description",
        "Comments",
        "PreSelected",
    )

    writeable = (
        "Code",
        "Description",
        "Comments",
    )

    required_create = (
        "Code",
        "Description",
    )

    async def all(self) -> Any:
        """Retrieve a list of price lists."""
        return await self._list()

    async def find(self, code: str) -> Any:
        """Retrieve a single price list."""
        return await self._find(code)

    async def create(self, data: Mapping[str, Any]) -> Any:
        return await self._create(data)

    async def update(self, code: str, data: Mapping[str, Any]) -> Any:
        return await self._update(code, data)
