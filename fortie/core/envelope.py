"""
Error Envelope Parser.

Fortnox reports errors in more than one shape, and the casing of the keys
inside ``ErrorInformation`` varies between endpoints:

    {"ErrorInformation": {"error": 1, "message": "...", "code": 2000311}}
    {"ErrorInformation": {"Error": 1, "Message": "...", "Code": 2000311}}
    {"message": "..."}

Each shape is tried in turn and produces the same ErrorInformation value.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from .converters import safe_int
from .exceptions import RemoteServiceError


class EnvelopeShape(str, Enum):
    """Which error envelope variant matched."""
    LOWER_CASE = "lower_case"
    UPPER_CASE = "upper_case"
    MESSAGE_ONLY = "message_only"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ErrorInformation:
    """Normalized Fortnox error."""
    error: str | None
    message: str | None
    code: int | None
    shape: EnvelopeShape

    def to_exception(
        self,
        status: int | None = None,
        response: Any = None,
    ) -> RemoteServiceError:
        return RemoteServiceError(
            error=self.error,
            message=self.message,
            code=self.code,
            status=status,
            response=response,
        )


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _information_block(payload: dict[str, Any]) -> dict[str, Any] | None:
    for key in ("ErrorInformation", "errorInformation"):
        block = payload.get(key)
        if isinstance(block, dict):
            return block
    return None


def _parse_cased(
    payload: dict[str, Any],
    error_key: str,
    message_key: str,
    code_key: str,
    shape: EnvelopeShape,
) -> ErrorInformation | None:
    block = _information_block(payload)
    if block is None or not {error_key, message_key, code_key} & block.keys():
        return None
    return ErrorInformation(
        error=_as_text(block.get(error_key)),
        message=_as_text(block.get(message_key)),
        code=safe_int(block.get(code_key)),
        shape=shape,
    )


def _parse_lower_case(payload: dict[str, Any]) -> ErrorInformation | None:
    return _parse_cased(payload, "error", "message", "code", EnvelopeShape.LOWER_CASE)


def _parse_upper_case(payload: dict[str, Any]) -> ErrorInformation | None:
    return _parse_cased(payload, "Error", "Message", "Code", EnvelopeShape.UPPER_CASE)


def _parse_message_only(payload: dict[str, Any]) -> ErrorInformation | None:
    message = payload.get("message", payload.get("Message"))
    if message is None:
        return None
    message = _as_text(message)
    return ErrorInformation(
        error=message,
        message=message,
        code=None,
        shape=EnvelopeShape.MESSAGE_ONLY,
    )


_PARSERS: list[Callable[[dict[str, Any]], ErrorInformation | None]] = [
    _parse_lower_case,
    _parse_upper_case,
    _parse_message_only,
]


def parse_error_payload(payload: Any) -> ErrorInformation | None:
    """Match a decoded JSON payload against the known envelope shapes."""
    if not isinstance(payload, dict):
        return None

    for parser in _PARSERS:
        information = parser(payload)
        if information is not None:
            return information
    return None


def parse_error_body(body: bytes | str, status: int | None = None) -> ErrorInformation:
    """
    Normalize a raw error response body.

    Bodies that are not JSON, or JSON in no known shape, fall back to an
    UNRECOGNIZED value built from the HTTP status and the raw text.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body

    try:
        payload = json.loads(text) if text else None
    except ValueError:
        payload = None

    information = parse_error_payload(payload)
    if information is not None:
        return information

    return ErrorInformation(
        error=f"HTTP {status}" if status is not None else None,
        message=text.strip() or None,
        code=None,
        shape=EnvelopeShape.UNRECOGNIZED,
    )
