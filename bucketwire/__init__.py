"""
bucketwire: signed request core for S3 and OSS compatible object storage.

Resolves the endpoint of a storage operation, signs it with either
signature v4 or the OSS HMAC scheme, and sends it with httpx.
"""

__version__ = "0.1.0"

from bucketwire.client import StorageClient
from bucketwire.errors import (
    BucketwireError,
    MissingCredentials,
    RegionResolutionFailure,
    TransportFailure,
    UnsupportedPayloadType,
)
from bucketwire.models import AddressingVendor, ClientConfig, Operation

__all__ = [
    "AddressingVendor",
    "BucketwireError",
    "ClientConfig",
    "MissingCredentials",
    "Operation",
    "RegionResolutionFailure",
    "StorageClient",
    "TransportFailure",
    "UnsupportedPayloadType",
    "__version__",
]
