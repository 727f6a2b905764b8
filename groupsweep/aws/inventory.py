"""Resource group membership listing.

Lists the members of an AWS Resource Groups group, one resource class at a time.
"""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import ClientError

from groupsweep.aws.client import create_boto_client
from groupsweep.models.resource import ResourceClass, ResourceHandle

logger = logging.getLogger(__name__)

MISSING_ID_ERROR_CODES = {"InvalidInstanceID.NotFound", "InvalidCapacityReservationId.NotFound"}


class GroupInventory:
    """Lists resources belonging to a named resource group.

    Attributes:
        group_name: Resource group name or ARN
        region: AWS region
        aws_profile: AWS profile name (optional)
    """

    def __init__(self, group_name: str, region: str, aws_profile: Optional[str] = None) -> None:
        self.group_name = group_name
        self.region = region
        self.aws_profile = aws_profile

    def list_resources(self, resource_class: ResourceClass) -> list[ResourceHandle]:
        """List group members of one resource class.

        Args:
            resource_class: Class of resource to list

        Returns:
            Resource handles, empty if the group has none of this class
        """
        client = create_boto_client("resource-groups", region_name=self.region, profile_name=self.aws_profile)
        paginator = client.get_paginator("list_group_resources")

        arns: list[str] = []
        pages = paginator.paginate(
            Group=self.group_name,
            Filters=[{"Name": "resource-type", "Values": [resource_class.value]}],
        )
        for page in pages:
            for item in page.get("Resources", []):
                identifier = item.get("Identifier", {})
                if identifier.get("ResourceType") == resource_class.value:
                    arns.append(identifier["ResourceArn"])

        logger.debug(f"Found {len(arns)} {resource_class.label}(s) in group {self.group_name}")
        if not arns:
            return []

        ec2 = create_boto_client("ec2", region_name=self.region, profile_name=self.aws_profile)
        tags_by_id = self._lookup_tags(ec2, resource_class, [_id_from_arn(arn) for arn in arns])

        handles = []
        for arn in arns:
            resource_id = _id_from_arn(arn)
            if resource_id not in tags_by_id:
                # Group membership lags behind EC2; the resource is already gone
                logger.info(f"Skipping {resource_class.label} {resource_id}: no longer exists")
                continue
            tags = tags_by_id[resource_id]
            handles.append(
                ResourceHandle(
                    resource_id=resource_id,
                    name=tags.get("Name", resource_id),
                    resource_class=resource_class,
                    region=self.region,
                    arn=arn,
                    tags=tags,
                )
            )
        return handles

    def _lookup_tags(self, ec2, resource_class: ResourceClass, resource_ids: list[str]) -> dict[str, dict]:
        """Fetch tags for the given resources, keyed by resource id.

        EC2 rejects the whole describe call when any id is unknown, so on a
        not-found error each id is described on its own and the missing ones
        are left out of the result.
        """
        try:
            return self._describe_tags(ec2, resource_class, resource_ids)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in MISSING_ID_ERROR_CODES:
                raise
            if len(resource_ids) == 1:
                return {}

        tags_by_id: dict[str, dict] = {}
        for resource_id in resource_ids:
            tags_by_id.update(self._lookup_tags(ec2, resource_class, [resource_id]))
        return tags_by_id

    def _describe_tags(self, ec2, resource_class: ResourceClass, resource_ids: list[str]) -> dict[str, dict]:
        tags_by_id: dict[str, dict] = {}

        if resource_class == ResourceClass.INSTANCE:
            paginator = ec2.get_paginator("describe_instances")
            for page in paginator.paginate(InstanceIds=resource_ids):
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        if instance.get("State", {}).get("Name") == "terminated":
                            continue
                        tags_by_id[instance["InstanceId"]] = _tags_to_dict(instance.get("Tags", []))
        else:
            paginator = ec2.get_paginator("describe_capacity_reservations")
            for page in paginator.paginate(CapacityReservationIds=resource_ids):
                for reservation in page.get("CapacityReservations", []):
                    if reservation.get("State") in ("cancelled", "expired"):
                        continue
                    tags_by_id[reservation["CapacityReservationId"]] = _tags_to_dict(reservation.get("Tags", []))

        return tags_by_id


def _id_from_arn(arn: str) -> str:
    # arn:aws:ec2:us-east-1:123456789012:instance/i-0abc -> i-0abc
    return arn.rsplit("/", 1)[-1]


def _tags_to_dict(tags: list[dict]) -> dict:
    return {tag["Key"]: tag["Value"] for tag in tags}
