"""
Quota Persistence Service

Stores planned quota designs and line item allocations in the hosted
PostgreSQL database, and reads them back in the nested shapes the dashboard
renders.

Write paths:
- persist_quota_plan(): one quota_configurations row plus one quota_segments
  row per planned cell, in a single transaction
- persist_generator_cells(): same, with segments taken from the external
  quota generator's rows instead of the local expansion
- create_quota_allocations(): allocations plus a zeroed segment_tracking row
  for each, in a single transaction

Read paths:
- get_quota_configuration(): latest configuration → segments → allocations →
  tracking, or None
- get_quota_segments(), get_quota_allocations(), get_segment_tracking()

Dependencies:
- quota_backend/core/database.py: get_db_pool, execute_query
- quota_backend/sql/quota_queries.py: query builders
- quota_backend/services/quota_planner.py: structure and complexity lookups
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Union
from uuid import uuid4

from asyncpg import Connection

from quota_backend.core.database import execute_query, get_db_pool
from quota_backend.models.enums import GeographyScope, QuotaMode
from quota_backend.models.schemas import (
    QuotaAllocationCreate,
    QuotaAllocationResponse,
    QuotaCell,
    QuotaConfigurationDetail,
    QuotaConfigurationResponse,
    QuotaConfigurationWithSegments,
    QuotaPlan,
    QuotaSegmentResponse,
    QuotaSegmentWithAllocations,
    SegmentTrackingDetail,
    SegmentTrackingResponse,
)
from quota_backend.services.errors import LineItemNotFoundError
from quota_backend.services.quota_planner import (
    build_geography,
    complexity_info,
    plan_quota_structure,
)
from quota_backend.sql import (
    get_allocations_by_ids_query,
    get_allocations_by_line_item_query,
    get_allocations_by_segments_query,
    get_insert_allocation_query,
    get_insert_configuration_query,
    get_insert_segment_query,
    get_insert_tracking_query,
    get_latest_configuration_query,
    get_line_item_project_query,
    get_segments_by_configuration_query,
    get_segments_by_ids_query,
    get_tracking_by_allocations_query,
    get_tracking_by_project_query,
)


# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Internal Writers
# =============================================================================


async def _insert_configuration(
    conn: Connection,
    project_id: str,
    geography: GeographyScope,
    geography_detail: Optional[str],
    mode: QuotaMode,
    total_quotas: int,
    cells: Sequence[QuotaCell],
) -> QuotaConfigurationWithSegments:
    complexity = complexity_info(mode)

    config_record = await conn.fetchrow(
        get_insert_configuration_query(),
        str(uuid4()),
        project_id,
        geography.value,
        geography_detail,
        mode.value,
        total_quotas,
        complexity.multiplier,
        complexity.level.value,
    )
    configuration = QuotaConfigurationResponse.from_record(config_record)

    segments: List[QuotaSegmentResponse] = []
    for cell in cells:
        segment_record = await conn.fetchrow(
            get_insert_segment_query(),
            str(uuid4()),
            configuration.id,
            cell.category.value,
            cell.name,
            cell.code,
            cell.population_percent,
            cell.panel_code,
        )
        segments.append(QuotaSegmentResponse.from_record(segment_record))

    return QuotaConfigurationWithSegments(configuration=configuration, segments=segments)


async def _store_configuration(
    project_id: str,
    geography: GeographyScope,
    geography_detail: Optional[str],
    mode: QuotaMode,
    total_quotas: int,
    cells: Sequence[QuotaCell],
) -> QuotaConfigurationWithSegments:
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            stored = await _insert_configuration(
                conn, project_id, geography, geography_detail, mode, total_quotas, cells
            )

    logger.info(
        f"Stored quota configuration {stored.configuration.id} for project {project_id}: "
        f"mode={mode.value}, total_quotas={total_quotas}, segments={len(stored.segments)}"
    )
    return stored


# =============================================================================
# Quota Configurations
# =============================================================================


async def persist_quota_plan(project_id: str, plan: QuotaPlan) -> QuotaConfigurationWithSegments:
    """
    Persist a planned quota design for a project.

    total_quotas is the structure's total_cells, which counts composite
    cells that have no segment row. The multiplier and complexity level come
    from the complexity table for the plan's mode.

    Args:
        project_id: Owning project.
        plan: Output of build_quota_plan().

    Returns:
        The stored configuration and one segment per plan cell.
    """
    return await _store_configuration(
        project_id,
        plan.geography.scope,
        plan.geography.detail,
        plan.quota_mode,
        plan.quota_structure.total_cells,
        plan.cells,
    )


async def persist_generator_cells(
    project_id: str,
    geography: Union[GeographyScope, str],
    geography_detail: Optional[str],
    mode: Union[QuotaMode, str],
    cells: Sequence[QuotaCell],
) -> QuotaConfigurationWithSegments:
    """
    Persist cells returned by the external quota generator.

    The configuration's total_quotas still comes from the local structure
    for (mode, geography); the segments are the external rows.
    """
    geography = GeographyScope(geography)
    mode = QuotaMode(mode)
    structure = plan_quota_structure(geography, mode, geography_detail)

    return await _store_configuration(
        project_id,
        geography,
        build_geography(geography, geography_detail).detail,
        mode,
        structure.total_cells,
        cells,
    )


def _group_by(records: Sequence, key: str) -> Dict[str, list]:
    grouped: Dict[str, list] = defaultdict(list)
    for record in records:
        grouped[getattr(record, key)].append(record)
    return grouped


async def get_quota_configuration(project_id: str) -> Optional[QuotaConfigurationDetail]:
    """
    Latest quota configuration for a project with everything under it.

    Nesting: configuration → segments → allocations → tracking (one tracking
    row per allocation, None if missing).

    Returns:
        QuotaConfigurationDetail, or None when the project has no configuration.
    """
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        config_record = await conn.fetchrow(get_latest_configuration_query(), project_id)
        if config_record is None:
            return None

        segment_records = await conn.fetch(
            get_segments_by_configuration_query(), str(config_record["id"])
        )
        segment_ids = [str(record["id"]) for record in segment_records]

        allocation_records = []
        tracking_records = []
        if segment_ids:
            allocation_records = await conn.fetch(get_allocations_by_segments_query(), segment_ids)
            allocation_ids = [str(record["id"]) for record in allocation_records]
            if allocation_ids:
                tracking_records = await conn.fetch(
                    get_tracking_by_allocations_query(), allocation_ids
                )

    tracking_by_allocation = {
        tracking.allocation_id: tracking
        for tracking in (SegmentTrackingResponse.from_record(r) for r in tracking_records)
    }
    allocations = [
        QuotaAllocationResponse.from_record(
            record, tracking=tracking_by_allocation.get(str(record["id"]))
        )
        for record in allocation_records
    ]
    allocations_by_segment = _group_by(allocations, "segment_id")

    segments = [
        QuotaSegmentWithAllocations.from_record(
            record, allocations=allocations_by_segment.get(str(record["id"]), [])
        )
        for record in segment_records
    ]
    return QuotaConfigurationDetail.from_record(config_record, segments=segments)


# =============================================================================
# Quota Segments
# =============================================================================


async def get_quota_segments(config_id: str) -> List[QuotaSegmentResponse]:
    """Segments of a configuration, in insertion order."""
    records = await execute_query(get_segments_by_configuration_query(), config_id)
    return [QuotaSegmentResponse.from_record(record) for record in records]


# =============================================================================
# Quota Allocations
# =============================================================================


async def create_quota_allocations(
    line_item_id: str,
    allocations: Sequence[QuotaAllocationCreate],
) -> List[QuotaAllocationResponse]:
    """
    Allocate a line item's quota across segments.

    Each allocation starts active with zero completes and gets a zeroed
    segment_tracking row under the line item's project. Everything is
    written in one transaction.

    Raises:
        LineItemNotFoundError: If the line item does not exist.
    """
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        line_item = await conn.fetchrow(get_line_item_project_query(), line_item_id)
        if line_item is None:
            raise LineItemNotFoundError(f"Line item not found: {line_item_id}")
        project_id = str(line_item["project_id"])

        created: List[QuotaAllocationResponse] = []
        async with conn.transaction():
            for allocation in allocations:
                allocation_record = await conn.fetchrow(
                    get_insert_allocation_query(),
                    str(uuid4()),
                    line_item_id,
                    allocation.segment_id,
                    allocation.quota_count,
                    allocation.cost_per_complete,
                )
                tracking_record = await conn.fetchrow(
                    get_insert_tracking_query(),
                    str(uuid4()),
                    project_id,
                    allocation.segment_id,
                    str(allocation_record["id"]),
                    0,
                    0.0,
                    0.0,
                    None,
                )
                created.append(
                    QuotaAllocationResponse.from_record(
                        allocation_record,
                        tracking=SegmentTrackingResponse.from_record(tracking_record),
                    )
                )

    logger.info(f"Created {len(created)} quota allocations for line item {line_item_id}")
    return created


async def get_quota_allocations(line_item_id: str) -> List[QuotaAllocationResponse]:
    """Allocations of a line item, each with its segment and tracking row."""
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        allocation_records = await conn.fetch(get_allocations_by_line_item_query(), line_item_id)
        if not allocation_records:
            return []

        segment_ids = sorted({str(record["segment_id"]) for record in allocation_records})
        allocation_ids = [str(record["id"]) for record in allocation_records]
        segment_records = await conn.fetch(get_segments_by_ids_query(), segment_ids)
        tracking_records = await conn.fetch(get_tracking_by_allocations_query(), allocation_ids)

    segments = {str(r["id"]): QuotaSegmentResponse.from_record(r) for r in segment_records}
    tracking = {str(r["allocation_id"]): SegmentTrackingResponse.from_record(r) for r in tracking_records}

    return [
        QuotaAllocationResponse.from_record(
            record,
            segment=segments.get(str(record["segment_id"])),
            tracking=tracking.get(str(record["id"])),
        )
        for record in allocation_records
    ]


# =============================================================================
# Segment Tracking
# =============================================================================


async def get_segment_tracking(project_id: str) -> List[SegmentTrackingDetail]:
    """Tracking rows of a project, each with its segment and allocation."""
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        tracking_records = await conn.fetch(get_tracking_by_project_query(), project_id)
        if not tracking_records:
            return []

        segment_ids = sorted({str(r["segment_id"]) for r in tracking_records})
        allocation_ids = sorted({str(r["allocation_id"]) for r in tracking_records if r["allocation_id"]})
        segment_records = await conn.fetch(get_segments_by_ids_query(), segment_ids)
        allocation_records = []
        if allocation_ids:
            allocation_records = await conn.fetch(get_allocations_by_ids_query(), allocation_ids)

    segments = {str(r["id"]): QuotaSegmentResponse.from_record(r) for r in segment_records}
    allocations = {str(r["id"]): QuotaAllocationResponse.from_record(r) for r in allocation_records}

    return [
        SegmentTrackingDetail.from_record(
            record,
            segment=segments.get(str(record["segment_id"])),
            allocation=allocations.get(str(record["allocation_id"])) if record["allocation_id"] else None,
        )
        for record in tracking_records
    ]
