"""
Parameterized SQL for the quota tables.

Tables (owned by the hosted database):
    quota_configurations: one quota design per project
    quota_segments: the cells of a configuration
    quota_allocations: a line item's quota against one segment
    segment_tracking: live counts for one allocation
    line_items: read for project summaries

All queries use asyncpg positional placeholders ($1, $2, ...). Identifier
lists are passed as text arrays and cast to uuid[] in SQL.
"""


# =============================================================================
# Quota Configurations
# =============================================================================


def get_insert_configuration_query() -> str:
    """
    Insert a quota configuration.

    Parameters:
        $1 id, $2 project_id, $3 geography_scope, $4 geography_detail,
        $5 quota_mode, $6 total_quotas, $7 sample_size_multiplier,
        $8 complexity_level
    """
    return """
        INSERT INTO quota_configurations (
            id, project_id, geography_scope, geography_detail, quota_mode,
            total_quotas, sample_size_multiplier, complexity_level,
            created_at, updated_at
        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, NOW(), NOW())
        RETURNING *
    """


def get_latest_configuration_query() -> str:
    """Latest configuration for a project. $1 project_id."""
    return """
        SELECT *
        FROM quota_configurations
        WHERE project_id = $1
        ORDER BY created_at DESC
        LIMIT 1
    """


# =============================================================================
# Quota Segments
# =============================================================================


def get_insert_segment_query() -> str:
    """
    Insert one quota segment.

    Parameters:
        $1 id, $2 quota_config_id, $3 category, $4 segment_name,
        $5 segment_code, $6 population_percent, $7 dynata_code
    """
    return """
        INSERT INTO quota_segments (
            id, quota_config_id, category, segment_name, segment_code,
            population_percent, dynata_code, created_at
        ) VALUES ($1, $2, $3, $4, $5, $6, $7, NOW())
        RETURNING *
    """


def get_segments_by_configuration_query() -> str:
    """
    Segments of a configuration. $1 quota_config_id.

    Segments written together share created_at, so within one write they come
    back ordered by segment_code rather than in planner order.
    """
    return """
        SELECT *
        FROM quota_segments
        WHERE quota_config_id = $1
        ORDER BY created_at, segment_code
    """


def get_segments_by_ids_query() -> str:
    """Segments by id. $1 text[] of segment ids."""
    return """
        SELECT *
        FROM quota_segments
        WHERE id = ANY($1::uuid[])
    """


# =============================================================================
# Quota Allocations
# =============================================================================


def get_insert_allocation_query() -> str:
    """
    Insert one allocation with status 'active' and no completes.

    Parameters:
        $1 id, $2 line_item_id, $3 segment_id, $4 quota_count,
        $5 cost_per_complete
    """
    return """
        INSERT INTO quota_allocations (
            id, line_item_id, segment_id, quota_count, completed_count,
            cost_per_complete, status, created_at, updated_at
        ) VALUES ($1, $2, $3, $4, 0, $5, 'active', NOW(), NOW())
        RETURNING *
    """


def get_allocations_by_line_item_query() -> str:
    """Allocations of a line item. $1 line_item_id."""
    return """
        SELECT *
        FROM quota_allocations
        WHERE line_item_id = $1
        ORDER BY created_at
    """


def get_allocations_by_segments_query() -> str:
    """Allocations against any of the given segments. $1 text[] of segment ids."""
    return """
        SELECT *
        FROM quota_allocations
        WHERE segment_id = ANY($1::uuid[])
        ORDER BY created_at
    """


def get_allocations_by_ids_query() -> str:
    """Allocations by id. $1 text[] of allocation ids."""
    return """
        SELECT *
        FROM quota_allocations
        WHERE id = ANY($1::uuid[])
    """


def get_lock_allocation_query() -> str:
    """
    Lock one allocation row for a complete increment. $1 allocation id.

    Joined to line_items for the project the tracking row belongs to.
    """
    return """
        SELECT a.*, li.project_id
        FROM quota_allocations a
        JOIN line_items li ON li.id = a.line_item_id
        WHERE a.id = $1
        FOR UPDATE OF a
    """


def get_update_allocation_progress_query() -> str:
    """$1 id, $2 completed_count, $3 status."""
    return """
        UPDATE quota_allocations
        SET completed_count = $2,
            status = $3,
            updated_at = NOW()
        WHERE id = $1
        RETURNING *
    """


# =============================================================================
# Segment Tracking
# =============================================================================


def get_insert_tracking_query() -> str:
    """
    Insert a tracking row for an allocation.

    Parameters:
        $1 id, $2 project_id, $3 segment_id, $4 allocation_id,
        $5 current_count, $6 completion_rate, $7 cost_tracking,
        $8 last_response_at
    """
    return """
        INSERT INTO segment_tracking (
            id, project_id, segment_id, allocation_id, current_count,
            completion_rate, cost_tracking, last_response_at,
            created_at, updated_at
        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, NOW(), NOW())
        RETURNING *
    """


def get_update_tracking_query() -> str:
    """
    Refresh the tracking row of an allocation.

    Parameters:
        $1 allocation_id, $2 current_count, $3 completion_rate,
        $4 cost_tracking, $5 last_response_at
    """
    return """
        UPDATE segment_tracking
        SET current_count = $2,
            completion_rate = $3,
            cost_tracking = $4,
            last_response_at = $5,
            updated_at = NOW()
        WHERE allocation_id = $1
        RETURNING *
    """


def get_tracking_by_allocations_query() -> str:
    """Tracking rows for the given allocations. $1 text[] of allocation ids."""
    return """
        SELECT *
        FROM segment_tracking
        WHERE allocation_id = ANY($1::uuid[])
    """


def get_tracking_by_project_query() -> str:
    """Tracking rows of a project. $1 project_id."""
    return """
        SELECT *
        FROM segment_tracking
        WHERE project_id = $1
        ORDER BY created_at
    """


# =============================================================================
# Line Items
# =============================================================================


def get_line_item_project_query() -> str:
    """Project of a line item. $1 line_item_id."""
    return """
        SELECT id, project_id
        FROM line_items
        WHERE id = $1
    """


def get_line_items_by_project_query() -> str:
    """Quota columns of a project's line items. $1 project_id."""
    return """
        SELECT id, quota, completed, cost_per_complete
        FROM line_items
        WHERE project_id = $1
    """


def get_segment_count_by_project_query() -> str:
    """Segments of the project's latest configuration. $1 project_id."""
    return """
        SELECT COUNT(*)
        FROM quota_segments s
        WHERE s.quota_config_id = (
            SELECT id
            FROM quota_configurations
            WHERE project_id = $1
            ORDER BY created_at DESC
            LIMIT 1
        )
    """
