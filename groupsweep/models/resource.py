"""Resource handle model.

A deletable member of a resource group, as returned by the group inventory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ResourceClass(Enum):
    """Resource classes handled by a cleanup, in deletion order."""

    INSTANCE = "AWS::EC2::Instance"
    CAPACITY_RESERVATION = "AWS::EC2::CapacityReservation"

    @property
    def label(self) -> str:
        """Human-readable name used in progress messages."""
        return _LABELS[self]


_LABELS = {
    ResourceClass.INSTANCE: "EC2 instance",
    ResourceClass.CAPACITY_RESERVATION: "capacity reservation",
}

# Instances run inside reservations, so they must go first
DELETION_ORDER = (ResourceClass.INSTANCE, ResourceClass.CAPACITY_RESERVATION)


@dataclass(frozen=True)
class ResourceHandle:
    """Deletable resource handle.

    Attributes:
        resource_id: Provider-assigned identifier (e.g. i-0abc..., cr-0abc...)
        name: Display name (Name tag, falls back to resource_id)
        resource_class: Which class of resource this is
        region: AWS region
        arn: Resource ARN
        tags: Resource tags at listing time
    """

    resource_id: str
    name: str
    resource_class: ResourceClass
    region: str
    arn: str = ""
    tags: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def resource_type(self) -> str:
        return self.resource_class.value

    def __str__(self) -> str:
        if self.name and self.name != self.resource_id:
            return f"{self.resource_class.label} {self.name} ({self.resource_id})"
        return f"{self.resource_class.label} {self.resource_id}"
