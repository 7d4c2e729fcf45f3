"""
FastAPI router module proxying the external Quota Generator API.

The dashboard sends the user's generator API key in the x-api-key header and
an optional survey id in x-survey-id; both are forwarded upstream.

Key Endpoints:
- POST /quota-generator/generate - Generate quotas; returns the raw result plus
  its rows normalised to quota cells
- GET /quota-generator/quotas - Saved quotas (for a survey when x-survey-id is set)
- GET /quota-generator/quotas/{quota_id} - One saved quota

The handlers are plain functions because requests is blocking; FastAPI runs
them in its threadpool.
"""

import logging
from typing import Annotated, Any, Dict, Iterator, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from quota_backend.core.dependencies import SettingsDep
from quota_backend.models.schemas import GeneratedQuotasResponse
from quota_backend.services.errors import QuotaGeneratorError
from quota_backend.services.quota_generator_client import (
    QuotaGeneratorClient,
    cells_from_generator_rows,
    extract_generator_rows,
)


# Logger for this module
logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Client Dependency
# =============================================================================


def get_quota_generator_client(
    settings: SettingsDep,
    x_api_key: Annotated[Optional[str], Header()] = None,
) -> Iterator[QuotaGeneratorClient]:
    """
    Client for the caller's API key, closed once the request is handled.

    Raises:
        HTTPException 401: The x-api-key header is missing or blank.
    """
    try:
        client = QuotaGeneratorClient(
            x_api_key,
            base_url=settings.quota_generator_api_url,
            timeout=settings.quota_generator_timeout,
        )
    except QuotaGeneratorError as e:
        logger.warning("Quota generator request rejected: no API key provided")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    with client:
        yield client


QuotaGeneratorClientDep = Annotated[QuotaGeneratorClient, Depends(get_quota_generator_client)]


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/generate", response_model=GeneratedQuotasResponse)
def generate_quotas(
    client: QuotaGeneratorClientDep,
    payload: Annotated[Dict[str, Any], Body()],
    x_survey_id: Annotated[Optional[str], Header()] = None,
) -> GeneratedQuotasResponse:
    """
    Forward a quota generation request.

    Raises:
        HTTPException 401: Missing or rejected API key.
        HTTPException 404: Survey not found for the given x-survey-id.
        HTTPException 502: Quota generator unreachable or returned unusable rows.
        HTTPException 500: Unexpected failure.
    """
    try:
        result = client.generate_quotas(payload, survey_id=x_survey_id)
        cells = cells_from_generator_rows(extract_generator_rows(result))
        return GeneratedQuotasResponse(result=result, cells=cells)

    except QuotaGeneratorError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating quotas: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get("/quotas", response_model=List[Any])
def list_saved_quotas(
    client: QuotaGeneratorClientDep,
    x_survey_id: Annotated[Optional[str], Header()] = None,
) -> List[Any]:
    try:
        return client.list_saved_quotas(survey_id=x_survey_id)

    except QuotaGeneratorError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing saved quotas: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get("/quotas/{quota_id}")
def get_saved_quota(quota_id: str, client: QuotaGeneratorClientDep) -> Any:
    try:
        return client.get_saved_quota(quota_id)

    except QuotaGeneratorError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching saved quota {quota_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
