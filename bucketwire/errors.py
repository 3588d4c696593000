"""Error taxonomy for request resolution, signing and sending.

Every error carries the stage it was raised in so a caller can tell a bad
payload from a failed region lookup or a dropped connection.
"""

from typing import Optional


class BucketwireError(Exception):
    """Base class for errors raised while preparing or sending a request."""

    stage = "request"

    def __init__(self, message: str, stage: Optional[str] = None):
        if stage is not None:
            self.stage = stage
        super().__init__(f"[{self.stage}] {message}")


class UnsupportedPayloadType(BucketwireError):
    """Raised when a payload is not text, bytes, or a byte stream."""

    stage = "materialize"

    def __init__(self, payload: object):
        self.payload_type = type(payload).__name__
        super().__init__(f"unsupported body type: {self.payload_type}")


class MissingCredentials(BucketwireError):
    """Raised when signing needs a secret key that is not configured."""

    stage = "sign"


class RegionResolutionFailure(BucketwireError):
    """Raised when the bucket region lookup fails."""

    stage = "resolve"

    def __init__(self, bucket: str, reason: str):
        self.bucket = bucket
        super().__init__(f"could not resolve region for bucket '{bucket}': {reason}")


class TransportFailure(BucketwireError):
    """Raised when the underlying HTTP exchange fails."""

    stage = "send"
