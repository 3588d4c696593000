"""Request signers.

Two interchangeable signers share the :class:`Signer` interface:

- :class:`SigV4Signer` sets the ``x-amz-*`` headers and delegates the
  signature-v4 derivation to an external collaborator (botocore by default)
- :class:`OssSigner` implements the OSS header canonicalization and HMAC
  signature itself

The signer is chosen once per client by :func:`make_signer`.
"""

import base64
import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from email.utils import formatdate
from typing import Callable, Optional, Protocol

from botocore.auth import SIGV4_TIMESTAMP, S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from bucketwire import __version__
from bucketwire.body import UNSIGNED_PAYLOAD, is_stream, payload_sha256
from bucketwire.errors import MissingCredentials
from bucketwire.models import AddressingVendor, ClientConfig, Request, SigningContext

logger = logging.getLogger(__name__)

USER_AGENT = f"bucketwire/{__version__} (python)"

OSS_HEADER_PREFIX = "x-oss-"


def make_date_long(context: SigningContext) -> str:
    """Compact UTC timestamp used by signature v4, e.g. 20240101T000000Z."""
    return context.timestamp.strftime(SIGV4_TIMESTAMP)


def make_http_date(context: SigningContext) -> str:
    """RFC 1123 date used by the OSS scheme, e.g. Tue, 01 Jan 2024 00:00:00 GMT."""
    return formatdate(context.timestamp.timestamp(), usegmt=True)


class Signer(ABC):
    """Turns an assembled request into a signed one."""

    @abstractmethod
    def sign(self, request: Request, context: SigningContext) -> Request:
        """Return a copy of ``request`` carrying the authentication headers."""
        pass


class StandardSigner(Protocol):
    """Contract of the signature-v4 collaborator."""

    def __call__(self, request: Request, context: SigningContext) -> str:
        ...


def botocore_sigv4(request: Request, context: SigningContext) -> str:
    """Compute a signature-v4 ``authorization`` value with botocore.

    The request must already carry ``x-amz-date`` and
    ``x-amz-content-sha256``; botocore reads the payload hash from the
    latter and the timestamp is taken from ``context`` rather than the clock.
    """
    credentials = Credentials(
        context.access_key, context.secret_key, context.session_token
    )
    auth = S3SigV4Auth(credentials, "s3", context.region)

    aws_request = AWSRequest(
        method=request.method,
        url=str(request.url),
        headers=dict(request.headers.items()),
    )
    aws_request.context["timestamp"] = make_date_long(context)

    canonical_request = auth.canonical_request(aws_request)
    string_to_sign = auth.string_to_sign(aws_request, canonical_request)
    signature = auth.signature(string_to_sign, aws_request)
    signed_headers = auth.signed_headers(auth.headers_to_sign(aws_request))

    return (
        f"AWS4-HMAC-SHA256 Credential={auth.scope(aws_request)}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


class SigV4Signer(Signer):
    """Signature-v4 signer for S3 compatible endpoints.

    Args:
        use_ssl: Whether requests travel over TLS. Payloads are only
            hashed for authenticated plain-HTTP requests.
        standard_signer: Collaborator producing the authorization value.
    """

    def __init__(
        self,
        use_ssl: bool,
        standard_signer: Optional[StandardSigner] = None,
        user_agent: str = USER_AGENT,
    ):
        self.use_ssl = use_ssl
        self.standard_signer = standard_signer or botocore_sigv4
        self.user_agent = user_agent

    def payload_hash(self, request: Request, context: SigningContext) -> str:
        if context.anonymous or self.use_ssl or is_stream(request.payload):
            return UNSIGNED_PAYLOAD
        return payload_sha256(request.payload)

    def sign(self, request: Request, context: SigningContext) -> Request:
        if not context.anonymous and not context.secret_key:
            raise MissingCredentials("secret key is required for signature v4")

        headers = {
            "user-agent": self.user_agent,
            "x-amz-date": make_date_long(context),
            "x-amz-content-sha256": self.payload_hash(request, context),
        }
        if context.session_token:
            headers["x-amz-security-token"] = context.session_token
        request = request.with_headers(headers)

        # Anonymous requests go out without an authorization header
        if context.anonymous:
            return request

        authorization = self.standard_signer(request, context)
        return request.with_headers({"authorization": authorization})


class OssSigner(Signer):
    """HMAC signer for the OSS authorization scheme.

    Args:
        digestmod: Hash used for the HMAC, SHA-1 by default.
    """

    def __init__(self, digestmod: Callable = hashlib.sha1):
        self.digestmod = digestmod

    def sign(self, request: Request, context: SigningContext) -> Request:
        headers = {"date": make_http_date(context)}
        if context.session_token:
            headers["x-oss-security-token"] = context.session_token
        request = request.with_headers(headers)

        if context.anonymous:
            return request
        if not context.secret_key:
            raise MissingCredentials("secret key is required for OSS signing")

        signature = self.make_signature(request, context.secret_key)
        return request.with_headers(
            {"authorization": f"OSS {context.access_key}:{signature}"}
        )

    def make_signature(self, request: Request, secret_key: str) -> str:
        string_to_sign = self.string_to_sign(request)
        logger.debug("Make signature: string to be signed = %r", string_to_sign)

        h = hmac.new(secret_key.encode("utf-8"), string_to_sign.encode("utf-8"), self.digestmod)
        return base64.b64encode(h.digest()).decode("ascii")

    def string_to_sign(self, request: Request) -> str:
        return "\n".join([
            request.method,
            request.headers.get("content-md5", ""),
            request.headers.get("content-type", ""),
            request.headers.get("date", ""),
            canonical_oss_headers(request) + canonical_oss_resource(request),
        ])


def canonical_oss_headers(request: Request) -> str:
    """Sorted ``key:value`` lines for every ``x-oss-`` header, or ``""``."""
    canon_headers = sorted(
        (key.lower(), value)
        for key, value in request.headers.items()
        if key.lower().startswith(OSS_HEADER_PREFIX)
    )
    return "".join(f"{key}:{value}\n" for key, value in canon_headers)


def canonical_oss_resource(request: Request) -> str:
    """Signed resource: ``/`` for service calls, else ``/{bucket}/{object}``.

    The sub-resource suffix of the URL is not part of the signed resource.
    """
    if not request.bucket:
        return "/"
    return f"/{request.bucket}/{request.object_key or ''}"


def make_signer(
    config: ClientConfig, standard_signer: Optional[StandardSigner] = None
) -> Signer:
    """Pick the signer matching ``config.vendor``."""
    if config.vendor is AddressingVendor.OSS:
        return OssSigner()
    return SigV4Signer(config.use_ssl, standard_signer=standard_signer)
