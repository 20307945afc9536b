"""
Chart of accounts.

Accounts belong to a financial year. Without ``financial_year`` Fortnox
uses the year of today's date.
"""

from typing import Any, Mapping

from .base import ProviderBase


class Accounts(ProviderBase):

    base_path = "accounts"
    wrapper = "Account"
    collection_key = "Accounts"

    attributes = (
        "Url",
        "Active",
        "BalanceBroughtForward",
        "BalanceCarriedForward",
        "CostCenter",
        "CostCenterSettings",
        "Description",
        "Number",
        "Project",
        "ProjectSettings",
        "SRU",
        "TransactionInformation",
        "TransactionInformationSettings",
        "VATCode",
        "Year",
    )

    writeable = (
        "Active",
        "BalanceBroughtForward",
        "CostCenter",
        "CostCenterSettings",
        "Description",
        "Number",
        "Project",
        "ProjectSettings",
        "SRU",
        "TransactionInformation",
        "TransactionInformationSettings",
        "VATCode",
    )

    required_create = (
        "Description",
        "Number",
    )

    @staticmethod
    def _year_params(financial_year: int | None) -> dict[str, Any]:
        return {"financialyear": financial_year}

    async def all(self, financial_year: int | None = None) -> Any:
        return await self._list(params=self._year_params(financial_year))

    async def find(self, number: int, financial_year: int | None = None) -> Any:
        return await self._find(number, params=self._year_params(financial_year))

    async def create(self, data: Mapping[str, Any], financial_year: int | None = None) -> Any:
        return await self._create(data, params=self._year_params(financial_year))

    async def update(
        self,
        number: int,
        data: Mapping[str, Any],
        financial_year: int | None = None,
    ) -> Any:
        return await self._update(number, data, params=self._year_params(financial_year))

    async def delete(self, number: int) -> Any:
        return await self._delete(number)
