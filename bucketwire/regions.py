"""Bucket region resolution.

The region of a bucket is decided per call:

1. an explicit region on the operation
2. the region in the client configuration
3. ``us-east-1`` for service-level calls
4. a lookup through a :class:`RegionLookup` collaborator

Lookups are not cached; concurrent calls for one bucket each ask again.
"""

import logging
from typing import Any, Optional, Protocol

import boto3
from botocore.client import Config

from bucketwire.errors import RegionResolutionFailure
from bucketwire.models import DEFAULT_REGION, ClientConfig

logger = logging.getLogger(__name__)

# GetBucketLocation answers that do not name the region directly
LEGACY_LOCATION_CONSTRAINTS = {
    None: "us-east-1",
    "": "us-east-1",
    "EU": "eu-west-1",
}


class RegionLookup(Protocol):
    def lookup_region(self, bucket: str) -> str:
        ...


def build_s3_client(config: ClientConfig):
    """Build a boto3 S3 client pointed at the configured endpoint.

    Args:
        config: Client configuration containing endpoint, credentials,
               region, and addressing style.

    Returns:
        A boto3 S3 client configured for the endpoint.
    """
    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": config.addressing_style},
    )

    return boto3.client(
        "s3",
        endpoint_url=f"{config.scheme}://{config.endpoint}:{config.effective_port}",
        aws_access_key_id=config.access_key or None,
        aws_secret_access_key=config.secret_key or None,
        aws_session_token=config.session_token,
        region_name=config.region or DEFAULT_REGION,
        config=boto_config,
    )


class BucketLocationLookup:
    """Region lookup backed by the S3 GetBucketLocation API.

    Args:
        config: Client configuration used to build the S3 client.
        s3_client: Optional prebuilt boto3 client (mainly for tests).
    """

    def __init__(self, config: ClientConfig, s3_client: Optional[Any] = None):
        self.config = config
        self._s3_client = s3_client

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = build_s3_client(self.config)
        return self._s3_client

    def lookup_region(self, bucket: str) -> str:
        response = self.s3_client.get_bucket_location(Bucket=bucket)
        constraint = response.get("LocationConstraint")
        return LEGACY_LOCATION_CONSTRAINTS.get(constraint, constraint)


def resolve_region(
    config: ClientConfig,
    bucket: Optional[str],
    override: Optional[str] = None,
    lookup: Optional[RegionLookup] = None,
) -> str:
    """Decide the signing region for a call.

    Raises:
        RegionResolutionFailure: If the lookup fails or none is available.
    """
    if override:
        return override
    if config.region:
        return config.region
    if not bucket:
        return DEFAULT_REGION
    if lookup is None:
        raise RegionResolutionFailure(bucket, "no region configured and no lookup available")

    try:
        region = lookup.lookup_region(bucket)
    except RegionResolutionFailure:
        raise
    except Exception as e:
        raise RegionResolutionFailure(bucket, str(e)) from e

    if not region:
        raise RegionResolutionFailure(bucket, "lookup returned no region")
    logger.debug("Resolved region for bucket %s: %s", bucket, region)
    return region
