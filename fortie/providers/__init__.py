"""
Fortnox resource providers.

Each provider declares the REST path, wrapper key and attribute schema of
one resource and exposes its supported operations.
"""

from .accounts import Accounts
from .archive import Archive
from .base import ProviderBase
from .contract_accruals import ContractAccruals
from .invoices import Invoices
from .price_lists import PriceLists

__all__ = [
    "ProviderBase",
    "Accounts",
    "Archive",
    "ContractAccruals",
    "Invoices",
    "PriceLists",
]
