"""
FastAPI router module for quota planning and quota configurations.

Key Endpoints:
- GET /quotas/modes - Complexity level and sample multiplier of every quota mode
- POST /quotas/plan - Plan a quota design without storing it
- POST /quotas/projects/{project_id}/configuration - Plan and store a project's design
- GET /quotas/projects/{project_id}/configuration - Stored design with segments,
  allocations and tracking
- GET /quotas/configurations/{config_id}/segments - Segments of a configuration

Request bodies keep the dashboard's quota form field names (geography,
geographyDetail, quotaMode, targetSampleSize).

Dependencies:
- quota_backend/services/quota_planner.py: build_quota_plan, COMPLEXITY_TABLE
- quota_backend/services/quota_persistence.py: storage and nested reads
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from quota_backend.core.config import Settings
from quota_backend.core.dependencies import SettingsDep
from quota_backend.models.schemas import (
    QuotaConfigurationCreateRequest,
    QuotaConfigurationDetail,
    QuotaConfigurationWithSegments,
    QuotaModeInfo,
    QuotaPlan,
    QuotaPlanRequest,
    QuotaSegmentResponse,
)
from quota_backend.services.errors import QuotaConfigurationNotFoundError, QuotaError
from quota_backend.services.quota_persistence import (
    get_quota_configuration,
    get_quota_segments,
    persist_generator_cells,
    persist_quota_plan,
)
from quota_backend.services.quota_planner import COMPLEXITY_TABLE, build_quota_plan


# =============================================================================
# Module Configuration
# =============================================================================

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


def _plan_from_request(request: QuotaPlanRequest, settings: Settings) -> QuotaPlan:
    return build_quota_plan(
        request.geography,
        request.quotaMode,
        request.geographyDetail,
        request.targetSampleSize or settings.default_target_sample_size,
    )


# =============================================================================
# GET /quotas/modes
# =============================================================================


@router.get("/modes", response_model=List[QuotaModeInfo])
async def list_quota_modes() -> List[QuotaModeInfo]:
    """
    List every quota mode with its complexity.

    Returns:
        One entry per mode: level, sample size multiplier and advice.
    """
    return [
        QuotaModeInfo(mode=mode, **info.model_dump())
        for mode, info in COMPLEXITY_TABLE.items()
    ]


# =============================================================================
# POST /quotas/plan
# =============================================================================


@router.post("/plan", response_model=QuotaPlan)
async def plan_quotas(request: QuotaPlanRequest, settings: SettingsDep) -> QuotaPlan:
    """
    Plan a quota design for the dashboard's quota form.

    Nothing is stored. Unknown modes or geographies are rejected with 422 by
    request validation.

    Example Request:
        POST /quotas/plan
        {
            "geography": "National",
            "quotaMode": "non-interlocking",
            "targetSampleSize": 1000
        }

    Example Response (abridged):
        {
            "quota_mode": "non-interlocking",
            "quota_structure": {"total_cells": 23, ...},
            "complexity": {"level": "low", "multiplier": 1.0, ...},
            "recommended_sample_size": 1000,
            "cells": [...]
        }
    """
    try:
        return _plan_from_request(request, settings)
    except Exception as e:
        logger.error(f"Error planning quotas: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to plan quotas"
        )


# =============================================================================
# Project Quota Configuration
# =============================================================================


@router.post(
    "/projects/{project_id}/configuration",
    response_model=QuotaConfigurationWithSegments,
    status_code=201,
)
async def create_quota_configuration(
    project_id: str,
    request: QuotaConfigurationCreateRequest,
    settings: SettingsDep,
) -> QuotaConfigurationWithSegments:
    """
    Plan and store a project's quota configuration.

    When the request carries cells from the external quota generator those
    are stored as the segments; otherwise the locally expanded cells are.

    Raises:
        HTTPException 500: If the configuration could not be stored.
    """
    try:
        if request.cells:
            stored = await persist_generator_cells(
                project_id,
                request.geography,
                request.geographyDetail,
                request.quotaMode,
                request.cells,
            )
        else:
            plan = _plan_from_request(request, settings)
            stored = await persist_quota_plan(project_id, plan)

        return stored

    except QuotaError as e:
        logger.warning(f"Quota configuration rejected for project {project_id}: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error storing quota configuration for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to create quota configuration"
        )


@router.get("/projects/{project_id}/configuration", response_model=QuotaConfigurationDetail)
async def read_quota_configuration(project_id: str) -> QuotaConfigurationDetail:
    """
    Latest quota configuration of a project.

    Segments are nested with their allocations, and each allocation with its
    tracking row.

    Raises:
        HTTPException 404: If the project has no quota configuration.
        HTTPException 500: If the database read fails.
    """
    try:
        configuration = await get_quota_configuration(project_id)
        if configuration is None:
            raise QuotaConfigurationNotFoundError(
                f"No quota configuration found for project {project_id}"
            )
        return configuration

    except QuotaError as e:
        logger.warning(e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching quota configuration for project {project_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch quota configuration"
        )


@router.get("/configurations/{config_id}/segments", response_model=List[QuotaSegmentResponse])
async def list_quota_segments(config_id: str) -> List[QuotaSegmentResponse]:
    """Segments of a quota configuration."""
    try:
        return await get_quota_segments(config_id)
    except Exception as e:
        logger.error(f"Error fetching segments for configuration {config_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch quota segments"
        )
