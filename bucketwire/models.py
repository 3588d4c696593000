"""Data models for the bucketwire request core."""

from dataclasses import dataclass, field, replace as _replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Mapping, Optional

import httpx

# Ports implied by the scheme when none is configured
DEFAULT_HTTP_PORT = 80
DEFAULT_HTTPS_PORT = 443

# Region used when neither the call nor the configuration names one
DEFAULT_REGION = "us-east-1"

ADDRESSING_STYLES = ("auto", "virtual", "path")

# Text, raw bytes, or a single-pass byte stream (file object or chunk iterator)
Payload = Any


class AddressingVendor(Enum):
    """Which signing and addressing family the client speaks."""

    STANDARD = "standard"
    OSS = "oss"


def as_utc(timestamp: datetime) -> datetime:
    """Return ``timestamp`` in UTC; naive values are taken to be UTC already."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def imply_port(use_ssl: bool) -> int:
    """Return the default port for the scheme selected by ``use_ssl``."""
    return DEFAULT_HTTPS_PORT if use_ssl else DEFAULT_HTTP_PORT


@dataclass(frozen=True)
class ClientConfig:
    """Connection and credential settings shared by every call of a client."""

    endpoint: str
    access_key: str = ""
    secret_key: str = ""
    session_token: Optional[str] = None
    use_ssl: bool = True
    port: Optional[int] = None
    region: Optional[str] = None
    vendor: AddressingVendor = AddressingVendor.STANDARD
    addressing_style: str = "auto"
    enable_trace: bool = False

    @property
    def anonymous(self) -> bool:
        """True when no credentials are configured; requests go out unsigned."""
        return not self.access_key and not self.secret_key

    @property
    def effective_port(self) -> int:
        return self.port if self.port is not None else imply_port(self.use_ssl)

    @property
    def scheme(self) -> str:
        return "https" if self.use_ssl else "http"


@dataclass
class Operation:
    """A logical storage operation as supplied by a caller."""

    method: str
    bucket: Optional[str] = None
    object_key: Optional[str] = None
    region: Optional[str] = None
    resource: Optional[str] = None
    queries: Optional[Mapping[str, Any]] = None
    headers: Optional[Mapping[str, str]] = None
    payload: Payload = ""


@dataclass(frozen=True)
class RequestUrl:
    """A resolved request target, kept in parts for signing and tracing."""

    scheme: str
    host: str
    port: int
    path: str = "/"
    query: str = ""

    @property
    def authority(self) -> str:
        """Host, with ``:port`` only when the port is not the scheme default."""
        if self.port == imply_port(self.scheme == "https"):
            return self.host
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        url = f"{self.scheme}://{self.authority}{self.path}"
        if self.query:
            url += "?" + self.query
        return url


@dataclass(frozen=True)
class Request:
    """An outgoing request whose body has not been materialized yet.

    The payload is fixed at construction. Signing and materialization
    produce new values through :meth:`replace` and :meth:`with_headers`
    instead of mutating this one.
    """

    method: str
    url: RequestUrl
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    payload: Payload = ""
    bucket: Optional[str] = None
    object_key: Optional[str] = None

    def replace(self, **changes: Any) -> "Request":
        """Return a copy with the given fields replaced.

        Headers are always copied so the two requests never share a mapping.
        """
        headers = changes.pop("headers", self.headers)
        return _replace(self, headers=httpx.Headers(headers), **changes)

    def with_headers(self, headers: Mapping[str, str]) -> "Request":
        """Return a copy with ``headers`` merged over the current ones."""
        merged = httpx.Headers(self.headers)
        merged.update(headers)
        return _replace(self, headers=merged)


@dataclass(frozen=True)
class MaterializedRequest:
    """A request whose payload has been turned into a byte stream."""

    request: Request
    body: Iterator[bytes]
    content_length: Optional[int] = None

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def url(self) -> RequestUrl:
        return self.request.url

    @property
    def headers(self) -> httpx.Headers:
        return self.request.headers


@dataclass(frozen=True)
class SigningContext:
    """Per-call inputs to a signer. Never stored beyond the call."""

    access_key: str
    secret_key: str
    timestamp: datetime
    region: str
    session_token: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))

    @property
    def anonymous(self) -> bool:
        return not self.access_key and not self.secret_key

    @classmethod
    def from_config(
        cls, config: ClientConfig, timestamp: datetime, region: str
    ) -> "SigningContext":
        return cls(
            access_key=config.access_key,
            secret_key=config.secret_key,
            timestamp=timestamp,
            region=region,
            session_token=config.session_token,
        )
