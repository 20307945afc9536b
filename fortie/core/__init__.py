"""
Core dispatch pipeline shared by every Fortnox provider.

This module provides:
- Request descriptors and their fluent builder
- Attribute schemas and the outbound schema filter
- Response decoding by content type
- Error envelope normalization
- The aiohttp transport and the dispatch engine (rate-limit retry, error translation)
- Immutable listing query options
- Settings and the exception hierarchy
"""

from .config import (
    FortieSettings,
    get_settings,
    load_settings,
)
from .converters import (
    DateConverter,
    ValueConverter,
    safe_int,
)
from .decoder import (
    decode_body,
    decode_response,
    media_type,
    xml_to_tree,
)
from .dispatcher import (
    CancellationToken,
    Dispatcher,
    RateLimitPolicy,
    RetryPolicy,
)
from .envelope import (
    EnvelopeShape,
    ErrorInformation,
    parse_error_body,
    parse_error_payload,
)
from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    FortieError,
    MissingRequiredAttributeError,
    RateLimitExceededError,
    RemoteServiceError,
    RequestBuildError,
    RequestCancelledError,
    ResponseDecodeError,
    SchemaDefinitionError,
    TransportError,
    UnsupportedContentTypeError,
)
from .query import (
    QueryOptions,
    SortOrder,
)
from .request import (
    FortieRequest,
    HttpMethod,
    RequestBuilder,
)
from .schema import (
    AttributeSchema,
    filter_data,
)
from .transport import (
    HttpResponse,
    Transport,
)

__all__ = [
    "FortieSettings",
    "get_settings",
    "load_settings",
    "DateConverter",
    "ValueConverter",
    "safe_int",
    "decode_body",
    "decode_response",
    "media_type",
    "xml_to_tree",
    "CancellationToken",
    "Dispatcher",
    "RateLimitPolicy",
    "RetryPolicy",
    "EnvelopeShape",
    "ErrorInformation",
    "parse_error_body",
    "parse_error_payload",
    "ConfigurationError",
    "ErrorCategory",
    "FortieError",
    "MissingRequiredAttributeError",
    "RateLimitExceededError",
    "RemoteServiceError",
    "RequestBuildError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "SchemaDefinitionError",
    "TransportError",
    "UnsupportedContentTypeError",
    "QueryOptions",
    "SortOrder",
    "FortieRequest",
    "HttpMethod",
    "RequestBuilder",
    "AttributeSchema",
    "filter_data",
    "HttpResponse",
    "Transport",
]
