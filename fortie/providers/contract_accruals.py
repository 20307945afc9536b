"""Contract accruals."""

from typing import Any, Mapping

from .base import ProviderBase


class ContractAccruals(ProviderBase):

    base_path = "contractaccruals"
    wrapper = "ContractAccrual"
    collection_key = "ContractAccruals"

    attributes = (
        "Url",
        "AccrualAccount",
        "CostAccount",
        "Description",
        "AccrualRows",
        "DocumentNumber",
        "Period",
        "Times",
        "Total",
        "VATIncluded",
    )

    # Period and Times are computed by Fortnox
    writeable = (
        "AccrualAccount",
        "CostAccount",
        "Description",
        "AccrualRows",
        "DocumentNumber",
        "Total",
        "VATIncluded",
    )

    async def all(self) -> Any:
        return await self._list()

    async def find(self, document_number: int | str) -> Any:
        return await self._find(document_number)

    async def create(self, data: Mapping[str, Any]) -> Any:
        return await self._create(data)

    async def update(self, document_number: int | str, data: Mapping[str, Any]) -> Any:
        return await self._update(document_number, data)

    async def delete(self, document_number: int | str) -> Any:
        """Delete the contract accrual permanently."""
        return await self._delete(document_number)
