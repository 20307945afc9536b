"""
Fortie - asynchronous client for the Fortnox accounting API.
"""

from .client import Fortie
from .core import (
    CancellationToken,
    FortieError,
    FortieRequest,
    FortieSettings,
    MissingRequiredAttributeError,
    QueryOptions,
    RateLimitExceededError,
    RemoteServiceError,
    RequestBuilder,
    RequestCancelledError,
    TransportError,
    UnsupportedContentTypeError,
    load_settings,
)
from .logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    "Fortie",
    "CancellationToken",
    "FortieError",
    "FortieRequest",
    "FortieSettings",
    "MissingRequiredAttributeError",
    "QueryOptions",
    "RateLimitExceededError",
    "RemoteServiceError",
    "RequestBuilder",
    "RequestCancelledError",
    "TransportError",
    "UnsupportedContentTypeError",
    "load_settings",
    "setup_logging",
]
