"""Resource group cleaner.

Orchestrates the two-phase cleanup: every EC2 instance in the group is deleted
before any capacity reservation is touched. Supports preview (dry-run) and
execution modes and writes an audit log for both.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from groupsweep.aws.inventory import GroupInventory
from groupsweep.cleanup.audit import AuditStorage
from groupsweep.cleanup.batch import process_in_batches
from groupsweep.cleanup.deleter import ResourceDeleter
from groupsweep.cleanup.retry import RetryExecutor, Sleeper
from groupsweep.models.cleanup_operation import CleanupOperation, OperationMode, OperationStatus
from groupsweep.models.cleanup_settings import CleanupSettings
from groupsweep.models.delete_result import DeleteResult
from groupsweep.models.deletion_record import DeletionRecord, DeletionStatus
from groupsweep.models.resource import DELETION_ORDER, ResourceClass, ResourceHandle

logger = logging.getLogger(__name__)


class GroupCleaner:
    """Resource group cleanup orchestrator.

    Attributes:
        inventory: Lists the group's resources per class
        deleter: Performs the provider deletes
        audit_storage: Audit storage for operation logs
        settings: Retry and batch settings shared by both phases
    """

    def __init__(
        self,
        inventory: GroupInventory,
        deleter: ResourceDeleter,
        audit_storage: AuditStorage,
        settings: Optional[CleanupSettings] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.inventory = inventory
        self.deleter = deleter
        self.audit_storage = audit_storage
        self.settings = settings or CleanupSettings()
        self.sleep = sleep

    def preview(self) -> tuple[CleanupOperation, dict[ResourceClass, list[ResourceHandle]]]:
        """List what a cleanup would delete, without deleting anything.

        Returns:
            Planned CleanupOperation and the resources found per class
        """
        operation_id = f"op_{uuid.uuid4()}"
        found: dict[ResourceClass, list[ResourceHandle]] = {}
        records: list[DeletionRecord] = []

        for resource_class in DELETION_ORDER:
            resources = self.inventory.list_resources(resource_class)
            found[resource_class] = resources
            records.extend(
                self._record(operation_id, resource, DeletionStatus.PLANNED, attempts=0) for resource in resources
            )

        operation = self._new_operation(operation_id, OperationMode.DRY_RUN, OperationStatus.PLANNED)
        operation.phase_counts = {cls.value: len(resources) for cls, resources in found.items()}
        operation.total_resources = sum(operation.phase_counts.values())

        self.audit_storage.log_operation(operation, records)
        return operation, found

    async def execute(self) -> tuple[CleanupOperation, list[DeletionRecord]]:
        """Delete every instance, then every capacity reservation, in the group.

        Returns:
            Completed CleanupOperation and its deletion records

        Raises:
            TerminalDeleteError: If a resource could not be deleted; the run
                stops at the end of the batch containing it
        """
        operation_id = f"op_{uuid.uuid4()}"
        operation = self._new_operation(operation_id, OperationMode.EXECUTE, OperationStatus.EXECUTING)
        operation.started_at = datetime.utcnow()
        records: list[DeletionRecord] = []

        executor: RetryExecutor[ResourceHandle] = RetryExecutor(self.deleter.delete, self.settings, sleep=self.sleep)

        async def delete_and_record(resource: ResourceHandle) -> DeleteResult:
            try:
                result = await executor(resource)
            except Exception as e:
                operation.failed_count += 1
                records.append(
                    self._record(
                        operation_id,
                        resource,
                        DeletionStatus.FAILED,
                        attempts=getattr(e, "attempts", 0) or 1,
                        error_code=getattr(e, "error_code", None) or type(e).__name__,
                        error_message=str(e),
                    )
                )
                raise
            operation.succeeded_count += 1
            records.append(self._record(operation_id, resource, DeletionStatus.SUCCEEDED, attempts=result.attempts))
            return result

        for resource_class in DELETION_ORDER:
            resources = await asyncio.to_thread(self.inventory.list_resources, resource_class)
            operation.phase_counts[resource_class.value] = len(resources)
            operation.total_resources += len(resources)
            logger.info(f"Found {len(resources)} {resource_class.label}(s) in {self.inventory.group_name}")

            try:
                await process_in_batches(resources, delete_and_record, self.settings.batch_size)
            except Exception:
                operation.failed_phase = resource_class.value
                operation.finish(OperationStatus.FAILED, datetime.utcnow())
                self.audit_storage.log_operation(operation, records)
                raise

            logger.info(f"All {resource_class.label}s have been removed.")

        operation.finish(OperationStatus.COMPLETED, datetime.utcnow())
        self.audit_storage.log_operation(operation, records)
        return operation, records

    def run(self) -> tuple[CleanupOperation, list[DeletionRecord]]:
        """Blocking entry point for execute()."""
        return asyncio.run(self.execute())

    def _new_operation(self, operation_id: str, mode: OperationMode, status: OperationStatus) -> CleanupOperation:
        return CleanupOperation(
            operation_id=operation_id,
            resource_group=self.inventory.group_name,
            region=self.inventory.region,
            timestamp=datetime.utcnow(),
            mode=mode,
            status=status,
            aws_profile=self.deleter.aws_profile,
            settings=asdict(self.settings),
        )

    def _record(
        self,
        operation_id: str,
        resource: ResourceHandle,
        status: DeletionStatus,
        attempts: int,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> DeletionRecord:
        return DeletionRecord(
            record_id=f"rec_{uuid.uuid4()}",
            operation_id=operation_id,
            resource_id=resource.resource_id,
            resource_name=resource.name,
            resource_type=resource.resource_type,
            region=resource.region,
            timestamp=datetime.utcnow(),
            status=status,
            attempts=attempts,
            resource_arn=resource.arn,
            error_code=error_code,
            error_message=error_message,
            tags=resource.tags or None,
        )
