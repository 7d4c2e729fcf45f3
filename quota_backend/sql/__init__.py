"""
SQL Query Module for the Survey Quota backend.

Re-exports the query builders of quota_queries so services can import them
from quota_backend.sql directly.

Example usage:
    from quota_backend.sql import get_latest_configuration_query

    record = await conn.fetchrow(get_latest_configuration_query(), project_id)
"""

from quota_backend.sql.quota_queries import (
    get_insert_configuration_query,
    get_latest_configuration_query,
    get_insert_segment_query,
    get_segments_by_configuration_query,
    get_segments_by_ids_query,
    get_insert_allocation_query,
    get_allocations_by_line_item_query,
    get_allocations_by_segments_query,
    get_allocations_by_ids_query,
    get_lock_allocation_query,
    get_update_allocation_progress_query,
    get_insert_tracking_query,
    get_update_tracking_query,
    get_tracking_by_allocations_query,
    get_tracking_by_project_query,
    get_line_item_project_query,
    get_line_items_by_project_query,
    get_segment_count_by_project_query,
)


__all__ = [
    # Quota configurations
    "get_insert_configuration_query",
    "get_latest_configuration_query",
    # Quota segments
    "get_insert_segment_query",
    "get_segments_by_configuration_query",
    "get_segments_by_ids_query",
    # Quota allocations
    "get_insert_allocation_query",
    "get_allocations_by_line_item_query",
    "get_allocations_by_segments_query",
    "get_allocations_by_ids_query",
    "get_lock_allocation_query",
    "get_update_allocation_progress_query",
    # Segment tracking
    "get_insert_tracking_query",
    "get_update_tracking_query",
    "get_tracking_by_allocations_query",
    "get_tracking_by_project_query",
    # Line items
    "get_line_item_project_query",
    "get_line_items_by_project_query",
    "get_segment_count_by_project_query",
]
