"""
Customer invoices.

Besides CRUD, Fortnox exposes invoice actions as sub-resources:
``invoices/{DocumentNumber}/print`` returns the invoice as PDF, while
``bookkeep``, ``cancel`` and ``credit`` are bodiless PUTs.
"""

from typing import Any, Mapping

from ..core.request import HttpMethod
from .base import ProviderBase


class Invoices(ProviderBase):

    base_path = "invoices"
    wrapper = "Invoice"
    collection_key = "Invoices"

    attributes = (
        "Url",
        "UrlTaxReductionList",
        "Address1",
        "Address2",
        "AdministrationFee",
        "AdministrationFeeVAT",
        "Balance",
        "BasisTaxReduction",
        "Booked",
        "Cancelled",
        "City",
        "Comments",
        "ContractReference",
        "ContributionPercent",
        "ContributionValue",
        "Country",
        "CostCenter",
        "Credit",
        "CreditInvoiceReference",
        "Currency",
        "CurrencyRate",
        "CurrencyUnit",
        "CustomerName",
        "CustomerNumber",
        "DeliveryAddress1",
        "DeliveryAddress2",
        "DeliveryCity",
        "DeliveryCountry",
        "DeliveryDate",
        "DeliveryName",
        "DeliveryZipCode",
        "DocumentNumber",
        "DueDate",
        "EDIInformation",
        "EmailInformation",
        "ExternalInvoiceReference1",
        "ExternalInvoiceReference2",
        "Freight",
        "FreightVAT",
        "Gross",
        "HouseWork",
        "InvoiceDate",
        "InvoicePeriodEnd",
        "InvoicePeriodStart",
        "InvoiceReference",
        "InvoiceRows",
        "InvoiceType",
        "Language",
        "LastRemindDate",
        "Net",
        "NotCompleted",
        "OCR",
        "OfferReference",
        "OrderReference",
        "OrganisationNumber",
        "OurReference",
        "PaymentWay",
        "Phone1",
        "Phone2",
        "PriceList",
        "PrintTemplate",
        "Project",
        "Remarks",
        "Reminders",
        "RoundOff",
        "Sent",
        "TaxReduction",
        "TermsOfDelivery",
        "TermsOfPayment",
        "Total",
        "TotalToPay",
        "TotalVAT",
        "VATIncluded",
        "VoucherNumber",
        "VoucherSeries",
        "VoucherYear",
        "WayOfDelivery",
        "YourOrderNumber",
        "YourReference",
        "ZipCode",
    )

    writeable = (
        "Address1",
        "Address2",
        "AdministrationFee",
        "City",
        "Comments",
        "Country",
        "CostCenter",
        "Currency",
        "CurrencyRate",
        "CurrencyUnit",
        "CustomerName",
        "CustomerNumber",
        "DeliveryAddress1",
        "DeliveryAddress2",
        "DeliveryCity",
        "DeliveryCountry",
        "DeliveryDate",
        "DeliveryName",
        "DeliveryZipCode",
        "DocumentNumber",
        "DueDate",
        "EDIInformation",
        "EmailInformation",
        "ExternalInvoiceReference1",
        "ExternalInvoiceReference2",
        "Freight",
        "InvoiceDate",
        "InvoicePeriodEnd",
        "InvoicePeriodStart",
        "InvoiceRows",
        "InvoiceType",
        "Language",
        "NotCompleted",
        "OCR",
        "OrganisationNumber",
        "OurReference",
        "PaymentWay",
        "Phone1",
        "Phone2",
        "PriceList",
        "PrintTemplate",
        "Project",
        "Remarks",
        "TermsOfDelivery",
        "TermsOfPayment",
        "VATIncluded",
        "WayOfDelivery",
        "YourOrderNumber",
        "YourReference",
        "ZipCode",
    )

    required_create = (
        "CustomerNumber",
    )

    available_filters = (
        "cancelled",
        "fullypaid",
        "unpaid",
        "unpaidoverdue",
        "unbooked",
    )

    async def all(self) -> Any:
        """
        Retrieve a list of invoices.

        Narrow the listing with ``filter``, e.g.
        ``await fortie.invoices.filter("unpaid").all()``.
        """
        return await self._list()

    async def find(self, document_number: int | str) -> Any:
        return await self._find(document_number)

    async def create(self, data: Mapping[str, Any]) -> Any:
        return await self._create(data)

    async def update(self, document_number: int | str, data: Mapping[str, Any]) -> Any:
        return await self._update(document_number, data)

    async def print(self, document_number: int | str) -> bytes:
        """Render the invoice and return the PDF document."""
        request = self.request(HttpMethod.GET, document_number, "print").build()
        return await self.send(request)

    async def bookkeep(self, document_number: int | str) -> Any:
        return await self._action(document_number, "bookkeep")

    async def cancel(self, document_number: int | str) -> Any:
        return await self._action(document_number, "cancel")

    async def credit(self, document_number: int | str) -> Any:
        """Create a credit invoice for the given invoice."""
        return await self._action(document_number, "credit")

    async def _action(self, document_number: int | str, action: str) -> Any:
        return await self.send(self.request(HttpMethod.PUT, document_number, action).build())
