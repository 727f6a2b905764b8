"""Audit storage for cleanup operations.

Stores and retrieves audit logs in YAML format.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from groupsweep.models.cleanup_operation import CleanupOperation
from groupsweep.models.deletion_record import DeletionRecord


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() + "Z" if value else None


class AuditStorage:
    """Audit log storage and retrieval.

    Stores cleanup operation audit logs as YAML files organized by year/month.

    Storage structure:
        ~/.groupsweep/audit-logs/
            2026/
                10/
                    operation-op_123.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.groupsweep/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".groupsweep" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_operation(self, operation: CleanupOperation, records: list[DeletionRecord]) -> Path:
        """Write an operation and its records to the audit log.

        Overwrites an existing log with the same operation ID.

        Args:
            operation: Cleanup operation to log
            records: Deletion records for this operation

        Returns:
            Path of the written audit file
        """
        year_month_dir = self.storage_dir / str(operation.timestamp.year) / f"{operation.timestamp.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "resource_group_cleanup",
                "created_at": _iso(datetime.utcnow()),
            },
            "operation": {
                "operation_id": operation.operation_id,
                "resource_group": operation.resource_group,
                "region": operation.region,
                "timestamp": _iso(operation.timestamp),
                "aws_profile": operation.aws_profile,
                "mode": operation.mode.value,
                "status": operation.status.value,
                "settings": operation.settings,
                "total_resources": operation.total_resources,
                "succeeded_count": operation.succeeded_count,
                "failed_count": operation.failed_count,
                "phase_counts": operation.phase_counts,
                "failed_phase": operation.failed_phase,
                "started_at": _iso(operation.started_at),
                "completed_at": _iso(operation.completed_at),
                "duration_seconds": operation.duration_seconds,
            },
            "records": [record.to_dict() for record in records],
        }

        audit_file = year_month_dir / f"operation-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.safe_dump(audit_data, f, default_flow_style=False, sort_keys=False)

        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve operation audit log by ID.

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/operation-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_operations(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[dict]:
        """Query operations within a date range, oldest first.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all

        Returns:
            List of operation audit logs matching criteria
        """
        results = []

        for audit_file in sorted(self.storage_dir.glob("*/*/operation-*.yaml")):
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            timestamp = datetime.fromisoformat(audit_data["operation"]["timestamp"].rstrip("Z"))

            if since and timestamp < since:
                continue
            if until and timestamp > until:
                continue

            results.append(audit_data)

        results.sort(key=lambda data: data["operation"]["timestamp"])
        return results
