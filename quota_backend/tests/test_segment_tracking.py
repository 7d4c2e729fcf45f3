"""
Segment Tracking Test Module

Tests for quota_backend/services/segment_tracking.py:
- completion rate, cost tracking and allocation status rules
- project summary totals
- record_completes against a mocked asyncpg pool
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from quota_backend.models.enums import AllocationStatus
from quota_backend.models.schemas import LineItemQuotaRow
from quota_backend.services.errors import AllocationNotFoundError
from quota_backend.services.segment_tracking import (
    completion_rate,
    cost_tracking,
    get_project_summary,
    next_allocation_status,
    record_completes,
    summarise_line_items,
)


# =============================================================================
# Pure Metric Functions
# =============================================================================


class TestCompletionRate:
    def test_fraction(self):
        assert completion_rate(25, 100) == 0.25

    def test_zero_quota(self):
        assert completion_rate(10, 0) == 0.0

    def test_over_quota_exceeds_one(self):
        assert completion_rate(120, 100) == 1.2


class TestCostTracking:
    def test_rounded_to_cents(self):
        assert cost_tracking(3, 4.333) == 13.0

    def test_missing_cost_counts_as_zero(self):
        assert cost_tracking(10, None) == 0.0


class TestNextAllocationStatus:
    @pytest.mark.parametrize("status,completed,quota,expected", [
        (AllocationStatus.ACTIVE, 10, 50, AllocationStatus.ACTIVE),
        (AllocationStatus.ACTIVE, 50, 50, AllocationStatus.COMPLETED),
        (AllocationStatus.ACTIVE, 51, 50, AllocationStatus.OVERQUOTA),
        (AllocationStatus.COMPLETED, 51, 50, AllocationStatus.OVERQUOTA),
        (AllocationStatus.PAUSED, 50, 50, AllocationStatus.PAUSED),
        (AllocationStatus.PAUSED, 60, 50, AllocationStatus.PAUSED),
        ("active", 1, 2, AllocationStatus.ACTIVE),
        (None, 1, 2, AllocationStatus.ACTIVE),
        (None, 2, 2, AllocationStatus.COMPLETED),
    ])
    def test_transitions(self, status, completed, quota, expected):
        assert next_allocation_status(status, completed, quota) is expected


class TestSummariseLineItems:
    def test_totals(self):
        summary = summarise_line_items(
            [
                LineItemQuotaRow(quota=200, completed=50, cost_per_complete=4.5),
                LineItemQuotaRow(quota=300, completed=100, cost_per_complete=3.0),
            ],
            segment_count=23,
        )

        assert summary.total_quota == 500
        assert summary.total_completed == 150
        assert summary.completion_rate == pytest.approx(0.3)
        assert summary.total_cost == 525.0
        assert summary.segment_count == 23

    def test_missing_values(self):
        summary = summarise_line_items(
            [LineItemQuotaRow(quota=100, completed=None, cost_per_complete=None)],
            segment_count=0,
        )

        assert summary.total_completed == 0
        assert summary.total_cost == 0.0

    def test_no_line_items(self):
        summary = summarise_line_items([], segment_count=5)

        assert summary.total_quota == 0
        assert summary.completion_rate == 0.0


# =============================================================================
# Database Operations
# =============================================================================


@pytest.mark.asyncio
class TestRecordCompletes:
    """record_completes with the pool patched at the service module."""

    @pytest.fixture
    def locked_allocation(self, allocation_record):
        return {**allocation_record, 'completed_count': 98, 'project_id': 'proj-1'}

    async def test_increments_and_completes(
        self, mock_db_pool, locked_allocation, allocation_record, tracking_record
    ):
        # Arrange
        conn = mock_db_pool.conn
        responded_at = datetime(2025, 3, 2, tzinfo=timezone.utc)
        conn.fetchrow.side_effect = [
            locked_allocation,
            {**allocation_record, 'completed_count': 100, 'status': 'completed'},
            {**tracking_record, 'current_count': 100, 'completion_rate': 1.0, 'cost_tracking': 450.0},
        ]

        # Act
        with patch('quota_backend.services.segment_tracking.get_db_pool',
                   new=AsyncMock(return_value=mock_db_pool)):
            result = await record_completes('alloc-1', count=2, responded_at=responded_at)

        # Assert
        assert result.status is AllocationStatus.COMPLETED
        assert result.completed_count == 100
        assert result.tracking.current_count == 100

        update_allocation = conn.fetchrow.call_args_list[1]
        assert update_allocation.args[1:] == ('alloc-1', 100, 'completed')

        update_tracking = conn.fetchrow.call_args_list[2]
        assert update_tracking.args[1:] == ('alloc-1', 100, 1.0, 450.0, responded_at)

        conn.transaction.assert_called_once()
        assert 'FOR UPDATE' in conn.fetchrow.call_args_list[0].args[0]

    async def test_inserts_missing_tracking_row(
        self, mock_db_pool, locked_allocation, allocation_record, tracking_record
    ):
        conn = mock_db_pool.conn
        conn.fetchrow.side_effect = [
            locked_allocation,
            {**allocation_record, 'completed_count': 99},
            None,
            {**tracking_record, 'current_count': 99},
        ]

        with patch('quota_backend.services.segment_tracking.get_db_pool',
                   new=AsyncMock(return_value=mock_db_pool)):
            result = await record_completes('alloc-1')

        assert conn.fetchrow.await_count == 4
        insert_args = conn.fetchrow.call_args_list[3].args
        assert 'INSERT INTO segment_tracking' in insert_args[0]
        assert insert_args[2:6] == ('proj-1', 'seg-1', 'alloc-1', 99)
        assert result.tracking.current_count == 99

    async def test_unknown_allocation(self, mock_db_pool):
        mock_db_pool.conn.fetchrow.return_value = None

        with patch('quota_backend.services.segment_tracking.get_db_pool',
                   new=AsyncMock(return_value=mock_db_pool)):
            with pytest.raises(AllocationNotFoundError) as exc_info:
                await record_completes('missing')

        assert exc_info.value.status_code == 404

    async def test_count_must_be_positive(self, mock_db_pool):
        with patch('quota_backend.services.segment_tracking.get_db_pool',
                   new=AsyncMock(return_value=mock_db_pool)):
            with pytest.raises(ValueError):
                await record_completes('alloc-1', count=0)

        mock_db_pool.acquire.assert_not_called()

    async def test_null_status_and_count_on_locked_row(
        self, mock_db_pool, allocation_record, tracking_record
    ):
        conn = mock_db_pool.conn
        conn.fetchrow.side_effect = [
            {**allocation_record, 'completed_count': None, 'status': None, 'project_id': 'proj-1'},
            {**allocation_record, 'completed_count': 3, 'status': 'active'},
            {**tracking_record, 'current_count': 3},
        ]

        with patch('quota_backend.services.segment_tracking.get_db_pool',
                   new=AsyncMock(return_value=mock_db_pool)):
            result = await record_completes('alloc-1', count=3)

        update_allocation = conn.fetchrow.call_args_list[1]
        assert update_allocation.args[1:] == ('alloc-1', 3, 'active')
        assert result.status is AllocationStatus.ACTIVE

    async def test_null_columns_in_returned_rows(
        self, mock_db_pool, allocation_record, tracking_record
    ):
        conn = mock_db_pool.conn
        conn.fetchrow.side_effect = [
            {**allocation_record, 'project_id': 'proj-1'},
            {**allocation_record, 'completed_count': None, 'status': None},
            {**tracking_record, 'current_count': None, 'completion_rate': None, 'cost_tracking': None},
        ]

        with patch('quota_backend.services.segment_tracking.get_db_pool',
                   new=AsyncMock(return_value=mock_db_pool)):
            result = await record_completes('alloc-1')

        assert result.completed_count == 0
        assert result.status is AllocationStatus.ACTIVE
        assert result.tracking.current_count == 0
        assert result.tracking.cost_tracking == 0.0


@pytest.mark.asyncio
class TestGetProjectSummary:
    async def test_summary_from_line_items(self):
        line_items = [
            {'id': 'li-1', 'quota': 400, 'completed': 100, 'cost_per_complete': 5.0},
            {'id': 'li-2', 'quota': 600, 'completed': 300, 'cost_per_complete': None},
        ]

        with patch('quota_backend.services.segment_tracking.execute_query',
                   new=AsyncMock(return_value=line_items)), \
             patch('quota_backend.services.segment_tracking.execute_query_one',
                   new=AsyncMock(return_value={'count': 23})):
            summary = await get_project_summary('proj-1')

        assert summary.total_quota == 1000
        assert summary.total_completed == 400
        assert summary.completion_rate == pytest.approx(0.4)
        assert summary.total_cost == 500.0
        assert summary.segment_count == 23
