"""Resource group cleanup module.

Deletes the EC2 instances and capacity reservations of a resource group in
rate-limit aware batches.

Classes:
    GroupCleaner: Main orchestrator for cleanup operations
    ResourceDeleter: Provider delete calls and error classification
    RetryExecutor: Exponential backoff on rate-limited deletes
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

from groupsweep.cleanup.audit import AuditStorage
from groupsweep.cleanup.cleaner import GroupCleaner
from groupsweep.cleanup.deleter import ResourceDeleter
from groupsweep.cleanup.retry import RetryExecutor

__all__ = [
    "GroupCleaner",
    "ResourceDeleter",
    "RetryExecutor",
    "AuditStorage",
]
