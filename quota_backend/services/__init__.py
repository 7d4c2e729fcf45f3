"""
Backend Services Module

Business logic for the Survey Quota backend.

Services:
- reference_data: Australian age/gender, state and remoteness tables
- quota_planner: structural templates, cell expansion, complexity lookup,
  segment codes (pure, no I/O)
- quota_persistence: quota configurations, segments and allocations in PostgreSQL
- segment_tracking: completes, allocation status and project summaries
- quota_generator_client: proxy to the external Quota Generator API
- errors: domain exceptions translated to HTTP errors by the API layer

All services are designed to be consumed by the API layer (quota_backend/api/).
"""

# =============================================================================
# Reference Data
# =============================================================================

from quota_backend.services.reference_data import (
    AGE_BANDS,
    GENDERS,
    AGE_GENDER_SEGMENTS,
    AGE_GENDER_POPULATION_PERCENT,
    STATE_SEGMENTS,
    LOCATION_SEGMENTS,
    state_population_percent,
)

# =============================================================================
# Quota Planner
# =============================================================================

from quota_backend.services.quota_planner import (
    COMPLEXITY_TABLE,
    SAMPLE_SIZE_RECOMMENDATIONS,
    round_half_up,
    plan_quota_structure,
    expand_quota_cells,
    complexity_info,
    sample_size_multiplier,
    complexity_level,
    segment_code,
    build_geography,
    build_quota_plan,
)

# =============================================================================
# Persistence & Tracking
# =============================================================================

from quota_backend.services.quota_persistence import (
    persist_quota_plan,
    persist_generator_cells,
    get_quota_configuration,
    get_quota_segments,
    create_quota_allocations,
    get_quota_allocations,
    get_segment_tracking,
)

from quota_backend.services.segment_tracking import (
    completion_rate,
    cost_tracking,
    next_allocation_status,
    summarise_line_items,
    record_completes,
    get_project_summary,
)

# =============================================================================
# Quota Generator
# =============================================================================

from quota_backend.services.quota_generator_client import (
    QuotaGeneratorClient,
    extract_generator_rows,
    cells_from_generator_rows,
)

# =============================================================================
# Errors
# =============================================================================

from quota_backend.services.errors import (
    QuotaError,
    QuotaConfigurationNotFoundError,
    AllocationNotFoundError,
    LineItemNotFoundError,
    QuotaGeneratorError,
    QuotaGeneratorAuthError,
    QuotaGeneratorNotFoundError,
)


__all__ = [
    # Reference data
    "AGE_BANDS",
    "GENDERS",
    "AGE_GENDER_SEGMENTS",
    "AGE_GENDER_POPULATION_PERCENT",
    "STATE_SEGMENTS",
    "LOCATION_SEGMENTS",
    "state_population_percent",
    # Quota planner
    "COMPLEXITY_TABLE",
    "SAMPLE_SIZE_RECOMMENDATIONS",
    "round_half_up",
    "plan_quota_structure",
    "expand_quota_cells",
    "complexity_info",
    "sample_size_multiplier",
    "complexity_level",
    "segment_code",
    "build_geography",
    "build_quota_plan",
    # Persistence
    "persist_quota_plan",
    "persist_generator_cells",
    "get_quota_configuration",
    "get_quota_segments",
    "create_quota_allocations",
    "get_quota_allocations",
    "get_segment_tracking",
    # Tracking
    "completion_rate",
    "cost_tracking",
    "next_allocation_status",
    "summarise_line_items",
    "record_completes",
    "get_project_summary",
    # Quota generator
    "QuotaGeneratorClient",
    "extract_generator_rows",
    "cells_from_generator_rows",
    # Errors
    "QuotaError",
    "QuotaConfigurationNotFoundError",
    "AllocationNotFoundError",
    "LineItemNotFoundError",
    "QuotaGeneratorError",
    "QuotaGeneratorAuthError",
    "QuotaGeneratorNotFoundError",
]
