"""Tests for AuditStorage class."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
import yaml

from groupsweep.cleanup.audit import AuditStorage
from groupsweep.models.cleanup_operation import CleanupOperation, OperationMode, OperationStatus
from groupsweep.models.deletion_record import DeletionRecord, DeletionStatus


def _operation(operation_id: str, timestamp: datetime, status: OperationStatus = OperationStatus.COMPLETED):
    return CleanupOperation(
        operation_id=operation_id,
        resource_group="ci-functional",
        region="us-east-1",
        timestamp=timestamp,
        mode=OperationMode.EXECUTE,
        status=status,
        total_resources=1,
        succeeded_count=1,
        phase_counts={"AWS::EC2::Instance": 1},
    )


def _record(operation_id: str) -> DeletionRecord:
    return DeletionRecord(
        record_id="rec_1",
        operation_id=operation_id,
        resource_id="i-1",
        resource_name="web-1",
        resource_type="AWS::EC2::Instance",
        region="us-east-1",
        timestamp=datetime(2026, 10, 1, 12, 0, 0),
        status=DeletionStatus.SUCCEEDED,
        attempts=2,
    )


class TestAuditStorage:
    """Test suite for AuditStorage."""

    @pytest.fixture
    def storage(self, tmp_path: Path) -> AuditStorage:
        return AuditStorage(storage_dir=str(tmp_path / "audit-logs"))

    def test_log_operation_writes_year_month_file(self, storage: AuditStorage) -> None:
        """Test audit files are organised by year and month."""
        path = storage.log_operation(_operation("op_1", datetime(2026, 10, 1, 12, 0)), [_record("op_1")])

        assert path == storage.storage_dir / "2026" / "10" / "operation-op_1.yaml"
        data = yaml.safe_load(path.read_text())
        assert data["metadata"]["log_type"] == "resource_group_cleanup"
        assert data["operation"]["resource_group"] == "ci-functional"
        assert data["operation"]["timestamp"] == "2026-10-01T12:00:00Z"
        assert data["records"][0]["attempts"] == 2
        assert data["records"][0]["resource_name"] == "web-1"

    def test_get_operation(self, storage: AuditStorage) -> None:
        """Test retrieving an operation by ID."""
        storage.log_operation(_operation("op_2", datetime(2026, 9, 5)), [])

        assert storage.get_operation("op_2")["operation"]["operation_id"] == "op_2"
        assert storage.get_operation("missing") is None

    def test_query_operations_date_range(self, storage: AuditStorage) -> None:
        """Test filtering operations by date range, oldest first."""
        storage.log_operation(_operation("op_b", datetime(2026, 10, 10)), [])
        storage.log_operation(_operation("op_a", datetime(2026, 8, 1)), [])
        storage.log_operation(_operation("op_c", datetime(2026, 11, 1)), [])

        all_ops = [d["operation"]["operation_id"] for d in storage.query_operations()]
        ranged = storage.query_operations(since=datetime(2026, 9, 1), until=datetime(2026, 10, 31))

        assert all_ops == ["op_a", "op_b", "op_c"]
        assert [d["operation"]["operation_id"] for d in ranged] == ["op_b"]
