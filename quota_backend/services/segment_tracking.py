"""
Segment Tracking Service

Keeps quota_allocations and segment_tracking current as survey completes
arrive, and rolls line items up into the project summary cards.

Metric Rules:
    - completion_rate = current_count / quota_count (0.0 when quota_count <= 0)
    - cost_tracking = current_count * cost_per_complete, rounded to cents
    - allocation status: 'completed' when completed_count == quota_count,
      'overquota' when completed_count > quota_count, otherwise unchanged.
      A paused allocation stays paused however many completes arrive.

Concurrency:
    record_completes() locks the allocation row with SELECT ... FOR UPDATE
    inside a transaction so concurrent increments serialise.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Union
from uuid import uuid4

from quota_backend.core.database import execute_query, execute_query_one, get_db_pool
from quota_backend.models.enums import AllocationStatus
from quota_backend.models.schemas import (
    LineItemQuotaRow,
    QuotaAllocationResponse,
    QuotaSummary,
    SegmentTrackingResponse,
)
from quota_backend.services.errors import AllocationNotFoundError
from quota_backend.sql import (
    get_insert_tracking_query,
    get_line_items_by_project_query,
    get_lock_allocation_query,
    get_segment_count_by_project_query,
    get_update_allocation_progress_query,
    get_update_tracking_query,
)


# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Pure Metric Functions
# =============================================================================


def completion_rate(current: int, quota: int) -> float:
    """Fraction of the quota completed; 0.0 for an empty or negative quota."""
    if quota <= 0:
        return 0.0
    return current / quota


def cost_tracking(current: int, cost_per_complete: Optional[float]) -> float:
    """Spend so far, rounded to cents. A missing cost counts as zero."""
    return round(current * float(cost_per_complete or 0.0), 2)


def next_allocation_status(
    status: Union[AllocationStatus, str, None],
    completed: int,
    quota: int,
) -> AllocationStatus:
    """
    Status of an allocation after its completed count changes.

    A NULL status is treated as active.

    Examples:
        >>> next_allocation_status('active', 50, 50)
        <AllocationStatus.COMPLETED: 'completed'>
        >>> next_allocation_status('paused', 60, 50)
        <AllocationStatus.PAUSED: 'paused'>
    """
    status = AllocationStatus(status or AllocationStatus.ACTIVE)
    if status is AllocationStatus.PAUSED:
        return status
    if completed > quota:
        return AllocationStatus.OVERQUOTA
    if completed == quota:
        return AllocationStatus.COMPLETED
    return status


def summarise_line_items(line_items: Iterable[LineItemQuotaRow], segment_count: int) -> QuotaSummary:
    """
    Project totals across line items.

    Args:
        line_items: Quota, completed and cost per complete of each line item.
        segment_count: Number of segments in the project's configuration.

    Returns:
        QuotaSummary with the overall completion rate as a fraction and the
        total cost rounded to cents.
    """
    total_quota = 0
    total_completed = 0
    total_cost = 0.0

    for item in line_items:
        completed = item.completed or 0
        total_quota += item.quota or 0
        total_completed += completed
        total_cost += completed * float(item.cost_per_complete or 0.0)

    return QuotaSummary(
        total_quota=total_quota,
        total_completed=total_completed,
        completion_rate=completion_rate(total_completed, total_quota),
        total_cost=round(total_cost, 2),
        segment_count=segment_count,
    )


# =============================================================================
# Database Operations
# =============================================================================


async def record_completes(
    allocation_id: str,
    count: int = 1,
    responded_at: Optional[datetime] = None,
) -> QuotaAllocationResponse:
    """
    Record survey completes against an allocation.

    Increments completed_count, recomputes the allocation status and writes
    the allocation's tracking row (inserting it if it is missing).

    Args:
        allocation_id: Allocation receiving the completes.
        count: Number of completes, at least 1.
        responded_at: Time of the latest response; defaults to now (UTC).

    Returns:
        The updated allocation with its tracking row.

    Raises:
        ValueError: If count is below 1.
        AllocationNotFoundError: If the allocation does not exist.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    responded_at = responded_at or datetime.now(timezone.utc)

    pool = await get_db_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            locked = await conn.fetchrow(get_lock_allocation_query(), allocation_id)
            if locked is None:
                raise AllocationNotFoundError(f"Allocation not found: {allocation_id}")

            quota_count = locked["quota_count"]
            completed = (locked["completed_count"] or 0) + count
            status = next_allocation_status(locked["status"], completed, quota_count)
            rate = completion_rate(completed, quota_count)
            cost = cost_tracking(completed, locked["cost_per_complete"])

            allocation_record = await conn.fetchrow(
                get_update_allocation_progress_query(),
                allocation_id,
                completed,
                status.value,
            )
            tracking_record = await conn.fetchrow(
                get_update_tracking_query(),
                allocation_id,
                completed,
                rate,
                cost,
                responded_at,
            )
            if tracking_record is None:
                tracking_record = await conn.fetchrow(
                    get_insert_tracking_query(),
                    str(uuid4()),
                    str(locked["project_id"]),
                    str(locked["segment_id"]),
                    allocation_id,
                    completed,
                    rate,
                    cost,
                    responded_at,
                )

    if status.value != locked["status"]:
        logger.info(f"Allocation {allocation_id} moved from {locked['status']} to {status.value}")
    logger.info(f"Recorded {count} complete(s) for allocation {allocation_id}: {completed}/{quota_count}")

    return QuotaAllocationResponse.from_record(
        allocation_record,
        tracking=SegmentTrackingResponse.from_record(tracking_record),
    )


async def get_project_summary(project_id: str) -> QuotaSummary:
    """Summary cards for a project: line item totals and segment count."""
    line_item_records = await execute_query(get_line_items_by_project_query(), project_id)
    count_record = await execute_query_one(get_segment_count_by_project_query(), project_id)
    segment_count = count_record["count"] if count_record is not None else 0

    return summarise_line_items(
        (LineItemQuotaRow.from_record(record) for record in line_item_records),
        segment_count,
    )
