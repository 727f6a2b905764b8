"""AWS resource deletion strategies.

Maps each resource class to its deletion call and completion check, and turns
provider errors into typed DeleteResults for the retry executor.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from groupsweep.aws.client import create_boto_client
from groupsweep.cleanup.errors import RateLimitedError, TerminalDeleteError
from groupsweep.models.delete_result import DeleteResult
from groupsweep.models.resource import ResourceClass, ResourceHandle

logger = logging.getLogger(__name__)

THROTTLING_ERROR_CODES = frozenset(
    [
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestLimitExceeded",
        "RequestThrottled",
        "RequestThrottledException",
        "TooManyRequestsException",
        "SlowDown",
    ]
)

NOT_FOUND_ERROR_CODES = frozenset(
    [
        "InvalidInstanceID.NotFound",
        "InvalidCapacityReservationId.NotFound",
    ]
)

TOO_MANY_REQUESTS = 429


def is_throttling_error(error_code: str, http_status: Optional[int] = None) -> bool:
    """Whether a provider error means we were rate limited."""
    return error_code in THROTTLING_ERROR_CODES or http_status == TOO_MANY_REQUESTS


class ResourceDeleter:
    """AWS resource deletion.

    Each delete blocks (in a worker thread) until AWS reports the resource
    gone, not merely until the request is accepted.
    """

    # resource class -> (service, method, id_field)
    DELETION_METHODS = {
        ResourceClass.INSTANCE: ("ec2", "terminate_instances", "InstanceIds"),
        ResourceClass.CAPACITY_RESERVATION: ("ec2", "cancel_capacity_reservation", "CapacityReservationId"),
    }

    def __init__(
        self,
        aws_profile: Optional[str] = None,
        waiter_delay: int = 15,
        waiter_max_attempts: int = 40,
    ) -> None:
        """Initialize resource deleter.

        Args:
            aws_profile: AWS profile name (optional)
            waiter_delay: Seconds between completion checks
            waiter_max_attempts: Completion checks before giving up
        """
        self.aws_profile = aws_profile
        self.waiter_delay = waiter_delay
        self.waiter_max_attempts = waiter_max_attempts

    async def delete(self, resource: ResourceHandle) -> DeleteResult:
        """Delete a resource and wait for completion.

        Args:
            resource: Resource to delete

        Returns:
            DeleteResult: succeeded, rate_limited or failed
        """
        return await asyncio.to_thread(self.delete_sync, resource)

    def delete_sync(self, resource: ResourceHandle) -> DeleteResult:
        """Blocking form of delete()."""
        if resource.resource_class not in self.DELETION_METHODS:
            return DeleteResult.failure(
                TerminalDeleteError(
                    f"Unsupported resource type: {resource.resource_type}",
                    resource=resource,
                    error_code="UnsupportedResourceType",
                )
            )

        service, method, id_field = self.DELETION_METHODS[resource.resource_class]

        try:
            client = create_boto_client(
                service_name=service,
                region_name=resource.region,
                profile_name=self.aws_profile,
            )

            params = self._build_deletion_params(id_field, resource.resource_id)
            getattr(client, method)(**params)
            self._wait_until_deleted(client, resource)

            return DeleteResult.success()

        except ClientError as e:
            return self._classify_client_error(e, resource)

        except WaiterError as e:
            last_error = (e.last_response or {}).get("Error", {})
            error_code = last_error.get("Code", "WaiterError")
            if is_throttling_error(error_code):
                return DeleteResult.rate_limited(
                    RateLimitedError(f"Throttled waiting for {resource}: {e}", resource=resource, error_code=error_code)
                )
            return DeleteResult.failure(
                TerminalDeleteError(f"Gave up waiting for {resource}: {e}", resource=resource, error_code=error_code)
            )

        except BotoCoreError as e:
            logger.error(f"Failed to delete {resource}: {e}")
            return DeleteResult.failure(
                TerminalDeleteError(f"Unexpected error: {e}", resource=resource, error_code=type(e).__name__)
            )

    def _classify_client_error(self, error: ClientError, resource: ResourceHandle) -> DeleteResult:
        error_code = error.response.get("Error", {}).get("Code", "Unknown")
        error_message = error.response.get("Error", {}).get("Message", str(error))
        http_status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

        if error_code in NOT_FOUND_ERROR_CODES:
            logger.info(f"{resource} already deleted")
            return DeleteResult.success()

        if is_throttling_error(error_code, http_status):
            logger.debug(f"Throttled deleting {resource}: {error_code}")
            return DeleteResult.rate_limited(
                RateLimitedError(f"{error_code}: {error_message}", resource=resource, error_code=error_code)
            )

        logger.error(f"Failed to delete {resource}: {error_code} - {error_message}")
        return DeleteResult.failure(
            TerminalDeleteError(f"{error_code}: {error_message}", resource=resource, error_code=error_code)
        )

    def _build_deletion_params(self, id_field: str, resource_id: str) -> dict[str, Any]:
        # Plural form indicates list
        if id_field.endswith("s"):
            return {id_field: [resource_id]}
        return {id_field: resource_id}

    def _wait_until_deleted(self, client: Any, resource: ResourceHandle) -> None:
        if resource.resource_class == ResourceClass.INSTANCE:
            waiter = client.get_waiter("instance_terminated")
            waiter.wait(
                InstanceIds=[resource.resource_id],
                WaiterConfig={"Delay": self.waiter_delay, "MaxAttempts": self.waiter_max_attempts},
            )
            return

        # No botocore waiter exists for capacity reservations
        for _ in range(self.waiter_max_attempts):
            response = client.describe_capacity_reservations(CapacityReservationIds=[resource.resource_id])
            reservations = response.get("CapacityReservations", [])
            if not reservations or reservations[0].get("State") in ("cancelled", "expired"):
                return
            time.sleep(self.waiter_delay)

        raise WaiterError(
            name="CapacityReservationCancelled",
            reason="Max attempts exceeded",
            last_response={},
        )
