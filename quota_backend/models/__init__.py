"""
Package initialization file for backend models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py so
other modules can import them from quota_backend.models directly.

Usage:
    from quota_backend.models import (
        QuotaMode,
        GeographyScope,
        QuotaStructure,
        QuotaCell,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from quota_backend.models.enums import (
    GeographyScope,
    QuotaMode,
    ComplexityLevel,
    QuotaCategory,
    AllocationStatus,
    LineItemStatus,
    ChannelType,
)


# =============================================================================
# Schemas
# =============================================================================

from quota_backend.models.schemas import (
    # -------------------------------------------------------------------------
    # Planner output
    # -------------------------------------------------------------------------
    QuotaCategorySummary,
    QuotaStructure,
    QuotaCell,
    ComplexityInfo,
    QuotaModeInfo,
    GeographySelection,
    QuotaPlan,

    # -------------------------------------------------------------------------
    # Planner requests
    # -------------------------------------------------------------------------
    QuotaPlanRequest,
    QuotaConfigurationCreateRequest,

    # -------------------------------------------------------------------------
    # Persisted entities
    # -------------------------------------------------------------------------
    RecordModel,
    QuotaConfigurationResponse,
    QuotaSegmentResponse,
    SegmentTrackingResponse,
    QuotaAllocationResponse,
    QuotaSegmentWithAllocations,
    QuotaConfigurationDetail,
    QuotaConfigurationWithSegments,
    SegmentTrackingDetail,

    # -------------------------------------------------------------------------
    # Allocation & tracking requests
    # -------------------------------------------------------------------------
    QuotaAllocationCreate,
    QuotaAllocationsCreateRequest,
    RecordCompletesRequest,

    # -------------------------------------------------------------------------
    # Summary & proxy
    # -------------------------------------------------------------------------
    LineItemQuotaRow,
    QuotaSummary,
    GeneratedQuotasResponse,
)


__all__ = [
    # Enums
    "GeographyScope",
    "QuotaMode",
    "ComplexityLevel",
    "QuotaCategory",
    "AllocationStatus",
    "LineItemStatus",
    "ChannelType",
    # Planner output
    "QuotaCategorySummary",
    "QuotaStructure",
    "QuotaCell",
    "ComplexityInfo",
    "QuotaModeInfo",
    "GeographySelection",
    "QuotaPlan",
    # Planner requests
    "QuotaPlanRequest",
    "QuotaConfigurationCreateRequest",
    # Persisted entities
    "RecordModel",
    "QuotaConfigurationResponse",
    "QuotaSegmentResponse",
    "SegmentTrackingResponse",
    "QuotaAllocationResponse",
    "QuotaSegmentWithAllocations",
    "QuotaConfigurationDetail",
    "QuotaConfigurationWithSegments",
    "SegmentTrackingDetail",
    # Allocation & tracking requests
    "QuotaAllocationCreate",
    "QuotaAllocationsCreateRequest",
    "RecordCompletesRequest",
    # Summary & proxy
    "LineItemQuotaRow",
    "QuotaSummary",
    "GeneratedQuotasResponse",
]
