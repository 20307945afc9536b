"""
Exception Hierarchy for the Fortie client.

Every error raised by the library derives from FortieError and carries a
category plus a details mapping, so callers can log them in a structured
way with ``error.to_dict()``.

Only HTTP 429 is recovered inside the library (see dispatcher). Everything
else propagates to the caller unchanged.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Iterable


class ErrorCategory(str, Enum):
    """Error categories."""
    NETWORK = "network"
    VALIDATION = "validation"
    TRANSFORMATION = "transformation"
    CONFIGURATION = "configuration"
    EXTERNAL = "external"
    INTERNAL = "internal"


class FortieError(Exception):
    """Base exception for Fortie errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(FortieError):
    """Configuration errors (missing credentials, bad settings file)."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        details = {"config_key": config_key} if config_key else {}
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            details=details,
        )


class SchemaDefinitionError(FortieError):
    """A provider declares an inconsistent attribute schema."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            details={"fields": sorted(fields)},
        )


class RequestBuildError(FortieError):
    """A request descriptor could not be built."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, category=ErrorCategory.VALIDATION)


class MissingRequiredAttributeError(FortieError):
    """
    Raised before any network call when a required attribute is absent.

    ``required`` is the full required set of the operation, ``missing`` the
    subset that was not supplied (or was not writeable).
    """

    def __init__(
        self,
        required: Iterable[str],
        missing: Iterable[str] | None = None,
    ) -> None:
        self.required = tuple(required)
        self.missing = tuple(missing) if missing is not None else self.required
        super().__init__(
            message=f"Missing required attributes, required: {', '.join(self.required)}",
            category=ErrorCategory.VALIDATION,
            details={
                "required": list(self.required),
                "missing": list(self.missing),
            },
        )


class RemoteServiceError(FortieError):
    """
    Fortnox answered with an error envelope.

    Attributes:
        error: Error identifier reported by Fortnox
        message: Human-readable message reported by Fortnox
        code: Numeric Fortnox error code, None when not reported
        status: HTTP status code of the response
        response: The underlying HTTP response
    """

    def __init__(
        self,
        error: str | None,
        message: str | None,
        code: int | None = None,
        status: int | None = None,
        response: Any = None,
    ) -> None:
        self.error = error
        self.code = code
        self.status = status
        self.response = response
        super().__init__(
            message=message or error or "Unknown Fortnox error",
            category=ErrorCategory.EXTERNAL,
            details={"error": error, "code": code, "status": status},
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemoteServiceError):
            return NotImplemented
        return (self.error, self.message, self.code) == (other.error, other.message, other.code)

    __hash__ = Exception.__hash__


class RateLimitExceededError(FortieError):
    """HTTP 429 persisted after the configured number of retries."""

    def __init__(self, attempts: int, url: str | None = None) -> None:
        self.attempts = attempts
        super().__init__(
            message=f"Rate limit still exceeded after {attempts} retries",
            category=ErrorCategory.EXTERNAL,
            details={"attempts": attempts, "url": url},
        )


class RequestCancelledError(FortieError):
    """The cancellation token fired while a request was pending."""

    def __init__(self, url: str | None = None) -> None:
        super().__init__(
            message="Request cancelled",
            category=ErrorCategory.INTERNAL,
            details={"url": url},
        )


class UnsupportedContentTypeError(FortieError):
    """The response declares a content type the decoder has no rule for."""

    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(
            message=f"Unsupported response content type: {content_type!r}",
            category=ErrorCategory.TRANSFORMATION,
            details={"content_type": content_type},
        )


class ResponseDecodeError(FortieError):
    """The response body does not match its declared content type."""

    def __init__(self, message: str, content_type: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.TRANSFORMATION,
            details={"content_type": content_type},
        )


class TransportError(FortieError):
    """Network-level failure talking to Fortnox."""

    def __init__(self, message: str, url: str | None = None) -> None:
        details = {"url": url} if url else {}
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            details=details,
        )
