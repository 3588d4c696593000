"""Endpoint and URL resolution.

Decides where a request goes:

- OSS vendor mode always addresses ``{bucket}.{endpoint}``
- standard mode rewrites the well-known S3 placeholder endpoints to the
  regional endpoint, then picks virtual-host or path style addressing
"""

import ipaddress
import logging
import re
from typing import Any, Mapping, Optional
from urllib.parse import quote

from bucketwire.models import (
    DEFAULT_REGION,
    AddressingVendor,
    ClientConfig,
    RequestUrl,
)

logger = logging.getLogger(__name__)

# Endpoints a client may be configured with that stand for "S3, any region"
AMAZON_PLACEHOLDER_ENDPOINTS = frozenset({
    "s3.amazonaws.com",
    "s3.cn-north-1.amazonaws.com.cn",
})

# Regional S3 endpoints; regions missing here use s3.{region}.amazonaws.com
S3_REGION_ENDPOINTS = {
    "us-east-1": "s3.amazonaws.com",
    "us-east-2": "s3-us-east-2.amazonaws.com",
    "us-west-1": "s3-us-west-1.amazonaws.com",
    "us-west-2": "s3-us-west-2.amazonaws.com",
    "ca-central-1": "s3.ca-central-1.amazonaws.com",
    "eu-west-1": "s3-eu-west-1.amazonaws.com",
    "eu-west-2": "s3-eu-west-2.amazonaws.com",
    "sa-east-1": "s3-sa-east-1.amazonaws.com",
    "eu-central-1": "s3-eu-central-1.amazonaws.com",
    "ap-south-1": "s3-ap-south-1.amazonaws.com",
    "ap-southeast-1": "s3-ap-southeast-1.amazonaws.com",
    "ap-southeast-2": "s3-ap-southeast-2.amazonaws.com",
    "ap-northeast-1": "s3-ap-northeast-1.amazonaws.com",
    "cn-north-1": "s3.cn-north-1.amazonaws.com.cn",
    "ap-east-1": "s3.ap-east-1.amazonaws.com",
    "eu-north-1": "s3.eu-north-1.amazonaws.com",
}

# Maximum length of a full DNS name
MAX_HOST_LENGTH = 253

_BUCKET_LABEL_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")

# Characters left unescaped in paths and query values (AWS unreserved set)
_SEGMENT_SAFE = "~"
_QUERY_SAFE = "~"


def is_amazon_endpoint(host: str) -> bool:
    """Return True for hosts that serve S3 and accept virtual-host buckets."""
    return host.endswith(".amazonaws.com") or host.endswith(".amazonaws.com.cn")


def get_s3_endpoint(region: Optional[str]) -> str:
    """Return the concrete S3 endpoint for ``region``."""
    region = region or DEFAULT_REGION
    return S3_REGION_ENDPOINTS.get(region, f"s3.{region}.amazonaws.com")


def is_dns_compatible_bucket(bucket: Optional[str]) -> bool:
    """Return True if ``bucket`` can be used as a DNS label prefix."""
    if not bucket or not _BUCKET_LABEL_RE.match(bucket):
        return False
    if ".." in bucket or ".-" in bucket or "-." in bucket:
        return False
    try:
        ipaddress.IPv4Address(bucket)
    except ValueError:
        return True
    return False


def is_virtual_host_style(host: str, use_ssl: bool, bucket: Optional[str]) -> bool:
    """Decide between virtual-host and path style addressing.

    Pure function of its three inputs. Virtual-host style needs a DNS-safe
    bucket, a resulting host within DNS length limits, an S3 host, and, over
    TLS, a bucket without dots since wildcard certificates match one label.
    """
    if not is_dns_compatible_bucket(bucket):
        return False
    if len(f"{bucket}.{host}") > MAX_HOST_LENGTH:
        return False
    if use_ssl and "." in bucket:
        return False
    return is_amazon_endpoint(host)


def _encode_key_segment(segment: str) -> str:
    # dot segments would be collapsed by the HTTP client after signing
    if segment in (".", ".."):
        return "%2E" * len(segment)
    return quote(segment, safe=_SEGMENT_SAFE)


def encode_object_key(object_key: str) -> str:
    return "/".join(_encode_key_segment(segment) for segment in object_key.split("/"))


def _encode_query(key: str, value: Optional[str]) -> str:
    if value is None:
        return quote(key, safe=_QUERY_SAFE)
    return f"{quote(key, safe=_QUERY_SAFE)}={quote(str(value), safe=_QUERY_SAFE)}"


def encode_queries(queries: Optional[Mapping[str, Any]]) -> str:
    """URL-encode ``queries`` keeping insertion order.

    ``None`` values render as a bare key and lists or tuples as one
    ``key=value`` pair per member.
    """
    if not queries:
        return ""
    pairs = []
    for key, value in queries.items():
        if isinstance(value, (list, tuple)):
            pairs.extend(_encode_query(key, member) for member in value)
        else:
            pairs.append(_encode_query(key, value))
    return "&".join(pairs)


def build_query(resource: Optional[str], queries: Optional[Mapping[str, Any]]) -> str:
    """Join the sub-resource literal and the encoded queries with ``&``."""
    parts = []
    if resource:
        parts.append(resource.lstrip("?"))
    encoded = encode_queries(queries)
    if encoded:
        parts.append(encoded)
    return "&".join(parts)


def _use_virtual_host(config: ClientConfig, host: str, bucket: Optional[str]) -> bool:
    if config.addressing_style == "path":
        return False
    if config.addressing_style == "virtual":
        return is_dns_compatible_bucket(bucket)
    return is_virtual_host_style(host, config.use_ssl, bucket)


def resolve(
    config: ClientConfig,
    bucket: Optional[str],
    object_key: Optional[str],
    resource: Optional[str] = None,
    queries: Optional[Mapping[str, Any]] = None,
    region: Optional[str] = None,
) -> RequestUrl:
    """Resolve the URL an operation is sent to.

    Args:
        config: Client configuration (endpoint, TLS flag, port, vendor).
        bucket: Target bucket, or None/empty for a service-level call.
        object_key: Target object key, or None for bucket-level calls.
        resource: Sub-resource literal such as ``?location``.
        queries: Extra query parameters, encoded in insertion order.
        region: Target region used to rewrite placeholder endpoints;
            defaults to the configured region.

    Returns:
        The resolved RequestUrl. Identical inputs give identical URLs.
    """
    query = build_query(resource, queries)
    path_key = encode_object_key(object_key) if object_key else None

    if config.vendor is AddressingVendor.OSS:
        host = f"{bucket}.{config.endpoint}" if bucket else config.endpoint
        path = f"/{path_key}" if path_key else "/"
    else:
        host = config.endpoint.lower()
        path = "/"

        if host in AMAZON_PLACEHOLDER_ENDPOINTS:
            host = get_s3_endpoint(region or config.region)

        if _use_virtual_host(config, host, bucket):
            host = f"{bucket}.{host}"
            if path_key:
                path = f"/{path_key}"
        elif bucket:
            path = f"/{bucket}/{path_key}" if path_key else f"/{bucket}"

    url = RequestUrl(
        scheme=config.scheme,
        host=host,
        port=config.effective_port,
        path=path,
        query=query,
    )
    logger.debug("Resolved %s/%s to %s", bucket or "", object_key or "", url)
    return url
