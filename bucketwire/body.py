"""Body materialization.

Turns a request payload into the byte stream handed to the transport:

- ``str``: UTF-8 encoded, sent as one chunk with a known length
- ``bytes``-like: sent as one chunk with a known length
- byte stream (file object or iterator of ``bytes``): passed through
  without a ``content-length``, so the transport falls back to chunked
  transfer encoding
"""

import hashlib
from collections.abc import Iterator as IteratorABC
from typing import Iterator, Optional

from bucketwire.errors import UnsupportedPayloadType
from bucketwire.models import MaterializedRequest, Payload, Request

# Read size used when draining file-like payloads
STREAM_CHUNK_SIZE = 64 * 1024

# Payload hash used whenever the payload is not hashed
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"


def is_stream(payload: Payload) -> bool:
    """Return True if ``payload`` is a single-pass byte stream."""
    if isinstance(payload, (str, bytes, bytearray, memoryview)):
        return False
    return hasattr(payload, "read") or isinstance(payload, IteratorABC)


def _read_chunks(fileobj) -> Iterator[bytes]:
    while True:
        chunk = fileobj.read(STREAM_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def materialize_payload(payload: Payload) -> tuple[Iterator[bytes], Optional[int]]:
    """Convert a payload into a chunk iterator and its length, if known.

    Args:
        payload: Text, bytes, a readable file object, or an iterator of bytes.

    Returns:
        Tuple of (chunk iterator, length in bytes or None for streams).

    Raises:
        UnsupportedPayloadType: If the payload is none of the above.
    """
    if isinstance(payload, str):
        data = payload.encode("utf-8")
        return iter([data]), len(data)

    if isinstance(payload, (bytes, bytearray, memoryview)):
        data = bytes(payload)
        return iter([data]), len(data)

    if hasattr(payload, "read"):
        return _read_chunks(payload), None

    if isinstance(payload, IteratorABC):
        return payload, None

    raise UnsupportedPayloadType(payload)


def finalize(request: Request) -> MaterializedRequest:
    """Materialize the body of ``request`` for sending.

    The source request is left untouched; when the length is known the
    returned request carries exactly one ``content-length`` header, so
    finalizing a text or bytes request twice gives the same headers.
    """
    body, length = materialize_payload(request.payload)
    if length is not None:
        request = request.with_headers({"content-length": str(length)})
    return MaterializedRequest(request=request, body=body, content_length=length)


def payload_sha256(payload: Payload) -> str:
    """Hex SHA-256 digest of a text or bytes payload.

    Streams cannot be hashed without consuming them; they raise
    ``UnsupportedPayloadType`` here and callers send them unsigned.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return hashlib.sha256(payload).hexdigest()
    raise UnsupportedPayloadType(payload)
