"""Cleanup operation model.

Represents one run of the two-phase group cleanup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OperationMode(Enum):
    """Operation execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class OperationStatus(Enum):
    """Operation execution status with state transitions."""

    PLANNED = "planned"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CleanupOperation:
    """Cleanup operation entity.

    State transitions:
        planned (dry-run only)
        executing → completed (every phase finished)
        executing → failed (a terminal error aborted the run)

    A failed operation may have succeeded_count + failed_count < total_resources,
    since the chunks after the failing one are never started.

    Attributes:
        operation_id: Unique identifier for the operation
        resource_group: Name of the resource group being cleaned up
        region: AWS region
        timestamp: When the operation was initiated (UTC)
        mode: dry-run or execute
        status: Current execution status
        total_resources: Resources found across all phases
        succeeded_count: Number deleted (default: 0)
        failed_count: Number that failed terminally (default: 0)
        phase_counts: Resources found per resource type
        failed_phase: Resource type whose phase aborted the run (optional)
        aws_profile: AWS profile used for credentials (optional)
        settings: Retry/batch settings in effect (optional)
        started_at: When execution started (optional)
        completed_at: When execution completed (optional)
        duration_seconds: Total execution duration (optional)
    """

    operation_id: str
    resource_group: str
    region: str
    timestamp: datetime
    mode: OperationMode
    status: OperationStatus
    total_resources: int = 0
    succeeded_count: int = 0
    failed_count: int = 0
    phase_counts: dict[str, int] = field(default_factory=dict)
    failed_phase: Optional[str] = None
    aws_profile: Optional[str] = None
    settings: Optional[dict] = field(default=None)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - succeeded_count + failed_count <= total_resources
            - completed status accounts for every resource as succeeded
            - completed_at must be after started_at
            - dry-run mode must have planned status

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.succeeded_count + self.failed_count > self.total_resources:
            raise ValueError("Resource counts exceed total")

        if self.status == OperationStatus.COMPLETED and self.succeeded_count != self.total_resources:
            raise ValueError("Completed operation must account for every resource")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == OperationMode.DRY_RUN and self.status != OperationStatus.PLANNED:
            raise ValueError("Dry-run mode must have planned status")

        return True

    def finish(self, status: OperationStatus, completed_at: datetime) -> None:
        """Mark the operation finished and compute its duration."""
        self.status = status
        self.completed_at = completed_at
        if self.started_at:
            self.duration_seconds = (completed_at - self.started_at).total_seconds()
