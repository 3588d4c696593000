"""Storage client: resolves, signs and sends storage operations.

Every call goes through the same pipeline:

    resolve region -> build request -> sign -> materialize body -> trace -> send

:meth:`StorageClient.request` returns a buffered response and
:meth:`StorageClient.request_stream` a streamed one; both prepare the
request identically. Status codes are not interpreted here.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from bucketwire.body import finalize
from bucketwire.errors import TransportFailure
from bucketwire.models import ClientConfig, MaterializedRequest, Operation, SigningContext
from bucketwire.regions import BucketLocationLookup, RegionLookup, resolve_region
from bucketwire.request import build_request
from bucketwire.signers import StandardSigner, make_signer
from bucketwire.tracer import Tracer

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageClient:
    """Client for a single storage endpoint.

    The signer is chosen from ``config.vendor`` when the client is built
    and used for every call. The configuration is the only state shared
    between calls.

    Args:
        config: Endpoint, credential and vendor settings.
        http_client: httpx client used to send requests. One is created
            (and closed by :meth:`close`) when omitted.
        region_lookup: Collaborator resolving a bucket's region when the
            operation and the configuration name none. Defaults to
            GetBucketLocation through boto3.
        tracer: Request/response tracer; defaults to one enabled by
            ``config.enable_trace``.
        standard_signer: Signature-v4 collaborator override.
        clock: Source of the signing timestamp.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.Client] = None,
        region_lookup: Optional[RegionLookup] = None,
        tracer: Optional[Tracer] = None,
        standard_signer: Optional[StandardSigner] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.signer = make_signer(config, standard_signer)
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.Client()
        self.region_lookup = region_lookup or BucketLocationLookup(config)
        self.tracer = tracer or Tracer(enabled=config.enable_trace)
        self.clock = clock

    def prepare(self, operation: Operation) -> MaterializedRequest:
        """Resolve, sign and materialize ``operation`` without sending it.

        Raises:
            RegionResolutionFailure: If the bucket region cannot be found.
            MissingCredentials: If a secret key is needed but not set.
            UnsupportedPayloadType: If the payload has an unknown shape.
        """
        region = resolve_region(
            self.config, operation.bucket, operation.region, self.region_lookup
        )

        request = build_request(
            self.config,
            operation.method,
            bucket=operation.bucket,
            object_key=operation.object_key,
            resource=operation.resource,
            queries=operation.queries,
            headers=operation.headers,
            payload=operation.payload,
            region=region,
        )

        context = SigningContext.from_config(self.config, self.clock(), region)
        signed = self.signer.sign(request, context)
        return finalize(signed)

    def _send(self, operation: Operation, stream: bool) -> httpx.Response:
        prepared = self.prepare(operation)
        self.tracer.trace_request(prepared.request)

        http_request = self.http_client.build_request(
            prepared.method,
            str(prepared.url),
            headers=prepared.headers,
            content=prepared.body,
        )
        try:
            response = self.http_client.send(http_request, stream=stream)
        except (httpx.HTTPError, OSError) as e:
            # OSError covers file payloads failing mid-read
            raise TransportFailure(f"{prepared.method} {prepared.url} failed: {e}") from e

        logger.debug(
            "%s %s -> %s", prepared.method, prepared.url, response.status_code
        )
        self.tracer.trace_response(response, streamed=stream)
        return response

    def request(self, operation: Operation) -> httpx.Response:
        """Send ``operation`` and return the fully read response."""
        return self._send(operation, stream=False)

    def request_stream(self, operation: Operation) -> httpx.Response:
        """Send ``operation`` and return a response whose body is unread.

        The caller owns the response and must close it.
        """
        return self._send(operation, stream=True)

    def close(self) -> None:
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "StorageClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
