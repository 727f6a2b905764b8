"""Deletion record model.

Outcome of deleting one resource group member.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class DeletionStatus(Enum):
    """Individual resource deletion status."""

    PLANNED = "planned"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Tracks the outcome for a single resource within a CleanupOperation.

    Validation rules:
        - status=succeeded: no error_code
        - status=failed: requires error_code
        - attempts must be >= 0 (0 for planned records)

    Attributes:
        record_id: Unique identifier for this record
        operation_id: Parent operation identifier
        resource_id: Resource identifier
        resource_name: Display name
        resource_type: AWS resource type (e.g. AWS::EC2::Instance)
        region: AWS region
        timestamp: When the outcome was recorded (UTC)
        status: Deletion outcome
        attempts: Delete attempts made
        resource_arn: Resource ARN (optional)
        error_code: Provider error code if failed (optional)
        error_message: Human-readable error if failed (optional)
        tags: Resource tags at deletion time (optional)
    """

    record_id: str
    operation_id: str
    resource_id: str
    resource_name: str
    resource_type: str
    region: str
    timestamp: datetime
    status: DeletionStatus
    attempts: int = 0
    resource_arn: str = ""
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    tags: Optional[dict] = field(default=None)

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_code:
                raise ValueError("Failed status requires error_code")
        elif self.status == DeletionStatus.SUCCEEDED:
            if self.error_code:
                raise ValueError("Succeeded status cannot have an error")

        if self.attempts < 0:
            raise ValueError("Attempts cannot be negative")

        if self.resource_arn and not self.resource_arn.startswith("arn:aws"):
            raise ValueError("Invalid ARN format")

        return True

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "resource_id": self.resource_id,
            "resource_name": self.resource_name,
            "resource_type": self.resource_type,
            "resource_arn": self.resource_arn,
            "region": self.region,
            "timestamp": self.timestamp.isoformat() + "Z",
            "status": self.status.value,
            "attempts": self.attempts,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "tags": self.tags,
        }
