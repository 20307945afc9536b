"""
Request Descriptor.

A FortieRequest describes exactly one call against the Fortnox API. It is
built once through the fluent RequestBuilder and treated as read-only
afterwards, so the dispatcher can retry the identical descriptor.

Usage:
    from fortie.core import RequestBuilder

    request = (
        RequestBuilder()
        .method("PUT")
        .path("pricelists", "A1")
        .wrapper("PriceList")
        .required(["Code"])
        .data({"Code": "A1", "Description": "Standard"})
        .build()
    )
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping
from urllib.parse import quote, urlencode

from .exceptions import RequestBuildError


class HttpMethod(str, Enum):
    """HTTP methods used by the Fortnox API."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: "str | HttpMethod") -> "HttpMethod":
        """Accept enum members and case-insensitive method names."""
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise RequestBuildError(f"Unsupported HTTP method: {value!r}") from None

    @property
    def has_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT)


@dataclass(frozen=True)
class FortieRequest:
    """
    Immutable description of one outbound call.

    Attributes:
        method: HTTP method
        path: Path segments, joined with "/"
        params: Query parameters
        data: Body payload before filtering and wrapping
        wrapper: Key the filtered body is nested under
        required: Attributes that must survive filtering
        file_path: File to upload; takes precedence over data
    """
    method: HttpMethod
    path: tuple[str, ...] = ()
    params: Mapping[str, Any] = field(default_factory=dict)
    data: Mapping[str, Any] | None = None
    wrapper: str | None = None
    required: tuple[str, ...] = ()
    file_path: str | None = None

    @property
    def path_string(self) -> str:
        return "/".join(quote(segment, safe="") for segment in self.path)

    @property
    def url(self) -> str:
        """Relative URL including the query string."""
        if not self.params:
            return self.path_string
        return f"{self.path_string}?{urlencode(self.params)}"

    @property
    def is_upload(self) -> bool:
        return self.method.has_body and self.file_path is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "url": self.url,
            "wrapper": self.wrapper,
            "required": list(self.required),
            "file_path": self.file_path,
        }


class RequestBuilder:
    """
    Fluent builder for FortieRequest.

    Every method returns the builder itself; ``build()`` freezes the
    collected values into a FortieRequest.
    """

    def __init__(self) -> None:
        self._method: HttpMethod | None = None
        self._path: list[str] = []
        self._params: dict[str, Any] = {}
        self._data: dict[str, Any] | None = None
        self._wrapper: str | None = None
        self._required: list[str] = []
        self._file_path: str | None = None

    def method(self, method: "str | HttpMethod") -> "RequestBuilder":
        self._method = HttpMethod.parse(method)
        return self

    def path(self, *segments: Any) -> "RequestBuilder":
        """Append one or more path segments, skipping None."""
        for segment in segments:
            if segment is None:
                continue
            self._path.append(str(segment).strip("/"))
        return self

    def param(self, key: str, value: Any) -> "RequestBuilder":
        if value is not None:
            self._params[key] = value
        return self

    def params(self, params: Mapping[str, Any]) -> "RequestBuilder":
        for key, value in params.items():
            self.param(key, value)
        return self

    def data(self, data: Mapping[str, Any] | None) -> "RequestBuilder":
        self._data = dict(data) if data is not None else None
        return self

    def wrapper(self, wrapper: str | None) -> "RequestBuilder":
        self._wrapper = wrapper
        return self

    def required(self, required: Iterable[str] | None) -> "RequestBuilder":
        self._required = list(required or [])
        return self

    def file(self, file_path: str | None) -> "RequestBuilder":
        self._file_path = str(file_path) if file_path is not None else None
        return self

    def build(self) -> FortieRequest:
        if self._method is None:
            raise RequestBuildError("Request method must be set before building")

        return FortieRequest(
            method=self._method,
            path=tuple(self._path),
            params=dict(self._params),
            data=dict(self._data) if self._data is not None else None,
            wrapper=self._wrapper,
            required=tuple(self._required),
            file_path=self._file_path,
        )
