"""
Pydantic request/response models for the Survey Quota backend.

This module provides type-safe validation and serialization for:
- the quota planner's outputs (structure, cells, complexity, full plan)
- planner and configuration requests sent by the dashboard
- persisted quota configurations, segments, allocations and tracking rows
- tracking summaries and quota generator proxy responses

Request bodies that mirror the dashboard's quota form keep its camelCase
field names (geographyDetail, quotaMode, targetSampleSize). Everything read
from or written to the database uses the table's snake_case column names.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from quota_backend.models.enums import (
    AllocationStatus,
    ComplexityLevel,
    GeographyScope,
    QuotaCategory,
    QuotaMode,
)


# =============================================================================
# Planner Output Models
# =============================================================================


class QuotaCategorySummary(BaseModel):
    """
    One category entry of a quota structure.

    cell_count is the full cross-product size for composite categories
    (e.g. 288 for Age/Gender/State/Location) even though only base
    categories are expanded into cells.
    """
    model_config = ConfigDict(frozen=True)

    category: QuotaCategory = Field(
        ...,
        description="Demographic dimensions combined by this group of cells"
    )
    cell_count: int = Field(
        ...,
        ge=0,
        description="Number of quota cells declared for this category"
    )
    description: str = Field(
        ...,
        description="Human readable breakdown, e.g. '12 age/gender × 3 locations = 36 combinations'"
    )
    warning: Optional[str] = Field(
        default=None,
        description="Fielding difficulty warning shown next to the category"
    )
    panel_code_format: Optional[str] = Field(
        default=None,
        description="Shape of the panel provider's targeting code for composite cells"
    )


class QuotaStructure(BaseModel):
    """
    Shape of a quota design: categories and their cell counts.

    Invariant: total_cells == sum(category.cell_count for category in categories).
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "total_cells": 15,
                "categories": [
                    {"category": "Age/Gender", "cell_count": 12, "description": "12 age/gender combinations"},
                    {"category": "Location", "cell_count": 3, "description": "Metro/Regional/Remote within state"},
                ],
            }
        }
    )

    total_cells: int = Field(..., ge=0, description="Total number of quota cells")
    categories: List[QuotaCategorySummary] = Field(
        default_factory=list,
        description="Category entries in declaration order"
    )


class QuotaCell(BaseModel):
    """
    A single weighted quota cell.

    This is the canonical interchange shape: cells expanded by the local
    planner and rows returned by the external quota generator are both
    normalised into it before persistence.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "category": "State",
                "name": "New South Wales",
                "population_percent": 32.0,
                "target_count": 320,
                "code": "STATE_NEW_SOUTH_WALES",
                "panel_code": "STATE_NSW",
            }
        }
    )

    category: QuotaCategory = Field(..., description="Category of the cell")
    name: str = Field(..., min_length=1, description="Cell label, e.g. '18-24 Male'")
    population_percent: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Population share represented by the cell"
    )
    target_count: int = Field(..., ge=0, description="Target number of completes")
    code: str = Field(..., description="Segment code derived from category and name")
    panel_code: Optional[str] = Field(
        default=None,
        description="Panel provider targeting code from the reference tables"
    )


class ComplexityInfo(BaseModel):
    """Complexity level, sample multiplier and advice for a quota mode."""
    model_config = ConfigDict(frozen=True)

    level: ComplexityLevel
    multiplier: float = Field(..., ge=1.0)
    description: str


class QuotaModeInfo(ComplexityInfo):
    """Complexity table row tagged with its mode, for GET /quotas/modes."""
    mode: QuotaMode


class GeographySelection(BaseModel):
    """Geography of a plan; state or electorate is set depending on scope."""
    model_config = ConfigDict(frozen=True)

    scope: GeographyScope
    state: Optional[str] = None
    electorate: Optional[str] = None

    @property
    def detail(self) -> Optional[str]:
        return self.state or self.electorate


class QuotaPlan(BaseModel):
    """
    Complete planner output for one (geography, mode, sample size) request.

    recommended_sample_size is the target inflated by the mode's
    sample-size multiplier, rounded half-up.
    """
    model_config = ConfigDict(frozen=True)

    geography: GeographySelection
    quota_mode: QuotaMode
    target_sample_size: int = Field(..., gt=0)
    quota_structure: QuotaStructure
    complexity: ComplexityInfo
    recommended_sample_size: int = Field(..., gt=0)
    cells: List[QuotaCell] = Field(default_factory=list)
    sample_size_recommendations: Dict[str, str] = Field(default_factory=dict)


# =============================================================================
# Planner Request Models
# =============================================================================


class QuotaPlanRequest(BaseModel):
    """
    Quota form submitted by the dashboard.

    Field names match the dashboard's form state.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "geography": "State",
                "geographyDetail": "NSW",
                "quotaMode": "age-gender-location",
                "targetSampleSize": 800,
            }
        }
    )

    geography: GeographyScope = Field(default=GeographyScope.NATIONAL)
    geographyDetail: Optional[str] = Field(
        default=None,
        description="State abbreviation for State scope, electorate name for electorate scopes"
    )
    quotaMode: QuotaMode = Field(default=QuotaMode.NON_INTERLOCKING)
    targetSampleSize: Optional[int] = Field(
        default=None,
        gt=0,
        description="Target completes; the configured default_target_sample_size when omitted"
    )


class QuotaConfigurationCreateRequest(QuotaPlanRequest):
    """
    Request to plan and persist a project's quota configuration.

    When cells is supplied (rows fetched from the external quota generator)
    those cells are stored as the segments instead of the locally expanded
    ones; the structure totals still come from the local planner.
    """
    cells: Optional[List[QuotaCell]] = Field(
        default=None,
        description="Pre-generated cells to persist instead of local expansion"
    )


# =============================================================================
# Persisted Entity Models
# =============================================================================


class RecordModel(BaseModel):
    """Base for models built from asyncpg records."""

    @classmethod
    def from_record(cls, record: Mapping[str, Any], **extra: Any):
        data = {
            key: str(value) if isinstance(value, UUID) else value
            for key, value in dict(record).items()
        }
        data.update(extra)
        return cls.model_validate(data)

    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Replace a NULL column with the field's default."""
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class QuotaConfigurationResponse(RecordModel):
    """Row of quota_configurations."""
    id: str
    project_id: str
    geography_scope: str
    geography_detail: Optional[str] = None
    quota_mode: str
    total_quotas: int
    sample_size_multiplier: Optional[float] = None
    complexity_level: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuotaSegmentResponse(RecordModel):
    """
    Row of quota_segments.

    panel_code is stored in the dynata_code column.
    """
    id: str
    quota_config_id: str
    category: str
    segment_name: str
    segment_code: str
    population_percent: Optional[float] = None
    panel_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("dynata_code", "panel_code"),
    )
    created_at: Optional[datetime] = None


class SegmentTrackingResponse(RecordModel):
    """Row of segment_tracking."""
    id: str
    project_id: str
    segment_id: str
    allocation_id: Optional[str] = None
    current_count: int = 0
    completion_rate: float = 0.0
    cost_tracking: float = 0.0
    performance_score: Optional[float] = None
    last_response_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Counters are nullable in segment_tracking
    @field_validator("current_count", "completion_rate", "cost_tracking", mode="before")
    @classmethod
    def null_counters_as_zero(cls, value: Any, info: ValidationInfo) -> Any:
        return cls.null_as_default(value, info)

    _null_counts = field_validator(
        "current_count", "completion_rate", "cost_tracking", mode="before"
    )(RecordModel.null_as_default.__func__)


class QuotaAllocationResponse(RecordModel):
    """Row of quota_allocations, optionally with its segment and tracking row."""
    id: str
    line_item_id: str
    segment_id: str
    quota_count: int
    completed_count: int = 0
    cost_per_complete: Optional[float] = None
    status: AllocationStatus = AllocationStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    segment: Optional[QuotaSegmentResponse] = None
    tracking: Optional[SegmentTrackingResponse] = None

    # completed_count and status are nullable in quota_allocations
    @field_validator("completed_count", "status", mode="before")
    @classmethod
    def null_progress_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        return cls.null_as_default(value, info)


class QuotaSegmentWithAllocations(QuotaSegmentResponse):
    allocations: List[QuotaAllocationResponse] = Field(default_factory=list)


class QuotaConfigurationDetail(QuotaConfigurationResponse):
    """Configuration with segments → allocations → tracking nested."""
    segments: List[QuotaSegmentWithAllocations] = Field(default_factory=list)


class QuotaConfigurationWithSegments(BaseModel):
    """Result of persisting a plan: the configuration and its new segments."""
    configuration: QuotaConfigurationResponse
    segments: List[QuotaSegmentResponse] = Field(default_factory=list)


class SegmentTrackingDetail(SegmentTrackingResponse):
    segment: Optional[QuotaSegmentResponse] = None
    allocation: Optional[QuotaAllocationResponse] = None


# =============================================================================
# Allocation & Tracking Request Models
# =============================================================================


class QuotaAllocationCreate(BaseModel):
    """One allocation of a line item's quota to a segment."""
    segment_id: str = Field(..., min_length=1)
    quota_count: int = Field(..., ge=0)
    cost_per_complete: Optional[float] = Field(default=None, ge=0.0)


class QuotaAllocationsCreateRequest(BaseModel):
    allocations: List[QuotaAllocationCreate] = Field(..., min_length=1)


class RecordCompletesRequest(BaseModel):
    """Completes arriving for one allocation."""
    count: int = Field(default=1, ge=1)
    responded_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of the latest response; defaults to now"
    )


# =============================================================================
# Summary & Proxy Models
# =============================================================================


class LineItemQuotaRow(RecordModel):
    """The line_items columns needed for project totals."""
    quota: Optional[int] = 0
    completed: Optional[int] = 0
    cost_per_complete: Optional[float] = None


class QuotaSummary(BaseModel):
    """Project-level totals shown on the dashboard's summary cards."""
    total_quota: int = 0
    total_completed: int = 0
    completion_rate: float = 0.0
    total_cost: float = 0.0
    segment_count: int = 0


class GeneratedQuotasResponse(BaseModel):
    """Quota generator result passed through, plus its rows as QuotaCells."""
    result: Any = None
    cells: List[QuotaCell] = Field(default_factory=list)
