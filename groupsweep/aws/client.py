"""boto3 client factory."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)

# botocore's own retries would hide throttling from the retry executor
NO_SDK_RETRIES = BotoConfig(retries={"max_attempts": 1, "mode": "standard"})


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
) -> Any:
    """Create a boto3 client with SDK-level retries disabled.

    Args:
        service_name: AWS service name (e.g. "ec2")
        region_name: AWS region (optional, falls back to the profile/env default)
        profile_name: AWS profile name (optional)

    Returns:
        boto3 client
    """
    session = boto3.Session(profile_name=profile_name, region_name=region_name)
    logger.debug(f"Creating {service_name} client (region={region_name}, profile={profile_name})")
    return session.client(service_name, config=NO_SDK_RETRIES)
