"""Request assembly.

Builds the unsigned, unmaterialized Request for an operation.
"""

from typing import Any, Mapping, Optional

import httpx

from bucketwire.endpoints import resolve
from bucketwire.models import ClientConfig, Payload, Request


def build_request(
    config: ClientConfig,
    method: str,
    bucket: Optional[str] = None,
    object_key: Optional[str] = None,
    resource: Optional[str] = None,
    queries: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    payload: Payload = "",
    region: Optional[str] = None,
) -> Request:
    """Assemble a request for the given operation parameters.

    The ``host`` header is set to the URL authority before the caller's
    headers are merged on top, so a caller-supplied header wins on any
    collision. The payload is stored as-is and materialized at send time.
    """
    url = resolve(config, bucket, object_key, resource, queries, region=region)

    request_headers = httpx.Headers({"host": url.authority})
    if headers:
        request_headers.update(headers)

    return Request(
        method=method.upper(),
        url=url,
        headers=request_headers,
        payload="" if payload is None else payload,
        bucket=bucket or None,
        object_key=object_key or None,
    )
