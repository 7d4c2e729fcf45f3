"""
FastAPI router module for quota allocations and live segment tracking.

Key Endpoints:
- POST /tracking/line-items/{line_item_id}/allocations - Allocate a line item's quota
- GET /tracking/line-items/{line_item_id}/allocations - Allocations with segment + tracking
- POST /tracking/allocations/{allocation_id}/completes - Record survey completes
- GET /tracking/projects/{project_id}/segments - Tracking rows of a project
- GET /tracking/projects/{project_id}/summary - Summary card totals

Dependencies:
- quota_backend/services/quota_persistence.py: allocation writes and reads
- quota_backend/services/segment_tracking.py: completes and summaries
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from quota_backend.models.schemas import (
    QuotaAllocationResponse,
    QuotaAllocationsCreateRequest,
    QuotaSummary,
    RecordCompletesRequest,
    SegmentTrackingDetail,
)
from quota_backend.services.errors import QuotaError
from quota_backend.services.quota_persistence import (
    create_quota_allocations,
    get_quota_allocations,
    get_segment_tracking,
)
from quota_backend.services.segment_tracking import get_project_summary, record_completes


# Logger for this module
logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Line Item Allocations
# =============================================================================


@router.post(
    "/line-items/{line_item_id}/allocations",
    response_model=List[QuotaAllocationResponse],
    status_code=201,
)
async def allocate_line_item(
    line_item_id: str,
    request: QuotaAllocationsCreateRequest,
) -> List[QuotaAllocationResponse]:
    """
    Allocate a line item's quota across quota segments.

    Each allocation starts active with no completes and a zeroed tracking row.

    Raises:
        HTTPException 404: If the line item does not exist.
        HTTPException 500: If the allocations could not be stored.
    """
    try:
        return await create_quota_allocations(line_item_id, request.allocations)

    except QuotaError as e:
        logger.warning(f"Allocation rejected for line item {line_item_id}: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating allocations for line item {line_item_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to create quota allocations"
        )


@router.get("/line-items/{line_item_id}/allocations", response_model=List[QuotaAllocationResponse])
async def list_line_item_allocations(line_item_id: str) -> List[QuotaAllocationResponse]:
    try:
        return await get_quota_allocations(line_item_id)
    except Exception as e:
        logger.error(f"Error fetching allocations for line item {line_item_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch quota allocations"
        )


# =============================================================================
# Completes
# =============================================================================


@router.post("/allocations/{allocation_id}/completes", response_model=QuotaAllocationResponse)
async def add_completes(
    allocation_id: str,
    request: RecordCompletesRequest,
) -> QuotaAllocationResponse:
    """
    Record completes against an allocation.

    Example Request:
        POST /tracking/allocations/{allocation_id}/completes
        {"count": 3}

    Raises:
        HTTPException 404: If the allocation does not exist.
        HTTPException 500: If the update fails.
    """
    try:
        return await record_completes(allocation_id, request.count, request.responded_at)

    except QuotaError as e:
        logger.warning(e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error recording completes for allocation {allocation_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to record completes"
        )


# =============================================================================
# Project Tracking
# =============================================================================


@router.get("/projects/{project_id}/segments", response_model=List[SegmentTrackingDetail])
async def list_project_tracking(project_id: str) -> List[SegmentTrackingDetail]:
    try:
        return await get_segment_tracking(project_id)
    except Exception as e:
        logger.error(f"Error fetching segment tracking for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch segment tracking"
        )


@router.get("/projects/{project_id}/summary", response_model=QuotaSummary)
async def project_summary(project_id: str) -> QuotaSummary:
    """Totals for the summary cards: quota, completes, completion rate, cost, segments."""
    try:
        return await get_project_summary(project_id)
    except Exception as e:
        logger.error(f"Error building quota summary for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to build quota summary"
        )
