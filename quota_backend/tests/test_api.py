"""
API Router Test Module

Calls the FastAPI handlers directly with services patched at the router
modules, covering request validation, default handling and the mapping of
domain errors onto HTTP status codes.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from quota_backend.api import quota_generator, quotas, tracking
from quota_backend.main import app, health_check, root
from quota_backend.models.enums import QuotaCategory, QuotaMode
from quota_backend.models.schemas import (
    QuotaConfigurationCreateRequest,
    QuotaPlanRequest,
    RecordCompletesRequest,
)
from quota_backend.services.errors import (
    AllocationNotFoundError,
    LineItemNotFoundError,
    QuotaGeneratorNotFoundError,
)


# =============================================================================
# Request Validation
# =============================================================================


class TestRequestValidation:
    def test_plan_request_defaults(self):
        request = QuotaPlanRequest()

        assert request.geography.value == 'National'
        assert request.quotaMode is QuotaMode.NON_INTERLOCKING
        assert request.targetSampleSize is None

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            QuotaPlanRequest(quotaMode='three-way-interlocking')

    @pytest.mark.parametrize("target", [0, -100])
    def test_non_positive_target_rejected(self, target):
        with pytest.raises(ValidationError):
            QuotaPlanRequest(targetSampleSize=target)

    def test_detail_is_trimmed(self):
        assert QuotaPlanRequest(geography='State', geographyDetail='  NSW ').geographyDetail == 'NSW'

    def test_completes_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            RecordCompletesRequest(count=0)


# =============================================================================
# Quotas Router
# =============================================================================


@pytest.mark.asyncio
class TestQuotasRouter:
    async def test_list_modes(self):
        modes = await quotas.list_quota_modes()

        assert len(modes) == len(QuotaMode)
        full = next(m for m in modes if m.mode is QuotaMode.FULL_INTERLOCKING)
        assert full.multiplier == 2.0

    async def test_plan_uses_configured_default_target(self, mock_settings):
        mock_settings.default_target_sample_size = 600

        plan = await quotas.plan_quotas(QuotaPlanRequest(), mock_settings)

        assert plan.target_sample_size == 600
        assert plan.quota_structure.total_cells == 23
        assert plan.cells[0].target_count == 50

    async def test_plan_with_explicit_target(self, mock_settings):
        request = QuotaPlanRequest(geography='State', geographyDetail='NSW', targetSampleSize=1200)

        plan = await quotas.plan_quotas(request, mock_settings)

        assert plan.target_sample_size == 1200
        assert plan.geography.state == 'NSW'
        assert plan.quota_structure.total_cells == 15

    async def test_create_configuration_from_plan(self, mock_settings):
        stored = Mock()
        with patch('quota_backend.api.quotas.persist_quota_plan',
                   new=AsyncMock(return_value=stored)) as persist:
            result = await quotas.create_quota_configuration(
                'proj-1', QuotaConfigurationCreateRequest(quotaMode='full-interlocking'), mock_settings
            )

        assert result is stored
        project_id, plan = persist.await_args.args
        assert project_id == 'proj-1'
        assert plan.quota_structure.total_cells == 288

    async def test_create_configuration_from_generator_cells(self, mock_settings):
        request = QuotaConfigurationCreateRequest(
            quotaMode='age-gender-state',
            cells=[{
                'category': 'Age/Gender/State',
                'name': '18-24 Male NSW',
                'population_percent': 2.9,
                'target_count': 29,
                'code': 'AGE_GENDER_STATE_18_24_MALE_NSW',
            }],
        )

        with patch('quota_backend.api.quotas.persist_generator_cells',
                   new=AsyncMock(return_value=Mock())) as persist:
            await quotas.create_quota_configuration('proj-1', request, mock_settings)

        args = persist.await_args.args
        assert args[0] == 'proj-1'
        assert args[3] is QuotaMode.AGE_GENDER_STATE
        assert args[4][0].category is QuotaCategory.AGE_GENDER_STATE

    async def test_create_configuration_database_failure(self, mock_settings):
        with patch('quota_backend.api.quotas.persist_quota_plan',
                   new=AsyncMock(side_effect=RuntimeError('db down'))):
            with pytest.raises(HTTPException) as exc_info:
                await quotas.create_quota_configuration(
                    'proj-1', QuotaConfigurationCreateRequest(), mock_settings
                )

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == 'Failed to create quota configuration'

    async def test_missing_configuration_is_404(self):
        with patch('quota_backend.api.quotas.get_quota_configuration',
                   new=AsyncMock(return_value=None)):
            with pytest.raises(HTTPException) as exc_info:
                await quotas.read_quota_configuration('proj-1')

        assert exc_info.value.status_code == 404


# =============================================================================
# Tracking Router
# =============================================================================


@pytest.mark.asyncio
class TestTrackingRouter:
    async def test_unknown_allocation_is_404(self):
        with patch('quota_backend.api.tracking.record_completes',
                   new=AsyncMock(side_effect=AllocationNotFoundError('Allocation not found: a1'))):
            with pytest.raises(HTTPException) as exc_info:
                await tracking.add_completes('a1', RecordCompletesRequest(count=2))

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == 'Allocation not found: a1'

    async def test_record_completes_arguments(self):
        with patch('quota_backend.api.tracking.record_completes',
                   new=AsyncMock(return_value=Mock())) as record:
            await tracking.add_completes('a1', RecordCompletesRequest(count=3))

        assert record.await_args.args == ('a1', 3, None)

    async def test_unknown_line_item_is_404(self):
        with patch('quota_backend.api.tracking.create_quota_allocations',
                   new=AsyncMock(side_effect=LineItemNotFoundError('Line item not found: li-9'))):
            with pytest.raises(HTTPException) as exc_info:
                await tracking.allocate_line_item(
                    'li-9', tracking.QuotaAllocationsCreateRequest(
                        allocations=[{'segment_id': 'seg-1', 'quota_count': 10}]
                    )
                )

        assert exc_info.value.status_code == 404

    async def test_summary_failure_is_500(self):
        with patch('quota_backend.api.tracking.get_project_summary',
                   new=AsyncMock(side_effect=RuntimeError('boom'))):
            with pytest.raises(HTTPException) as exc_info:
                await tracking.project_summary('proj-1')

        assert exc_info.value.status_code == 500


# =============================================================================
# Quota Generator Router
# =============================================================================


class TestQuotaGeneratorRouter:
    def test_missing_api_key_is_401(self, mock_settings):
        dependency = quota_generator.get_quota_generator_client(mock_settings, None)

        with pytest.raises(HTTPException) as exc_info:
            next(dependency)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == 'API key is required'

    def test_client_uses_settings(self, mock_settings):
        dependency = quota_generator.get_quota_generator_client(mock_settings, 'key-1')
        client = next(dependency)

        assert client.base_url == 'https://quota-generator.test/v1'
        assert client.timeout == 5.0
        dependency.close()

    def test_session_closed_after_request(self, mock_settings):
        session = Mock(headers={})
        with patch('quota_backend.services.quota_generator_client.requests.Session',
                   return_value=session):
            dependency = quota_generator.get_quota_generator_client(mock_settings, 'key-1')
            next(dependency)
            session.close.assert_not_called()

            with pytest.raises(StopIteration):
                next(dependency)

        session.close.assert_called_once()

    def test_session_closed_when_handler_fails(self, mock_settings):
        session = Mock(headers={})
        with patch('quota_backend.services.quota_generator_client.requests.Session',
                   return_value=session):
            dependency = quota_generator.get_quota_generator_client(mock_settings, 'key-1')
            next(dependency)

            with pytest.raises(HTTPException):
                dependency.throw(HTTPException(status_code=404, detail='Quota not found'))

        session.close.assert_called_once()

    def test_unusable_generator_rows_are_502(self):
        client = Mock()
        client.generate_quotas.return_value = [
            {'category': 'State', 'subCategory': 'Tasmania', 'population_percent': 250},
        ]

        with pytest.raises(HTTPException) as exc_info:
            quota_generator.generate_quotas(client, {}, None)

        assert exc_info.value.status_code == 502

    def test_generate_returns_result_and_cells(self):
        client = Mock()
        client.generate_quotas.return_value = {
            'quotaSegments': [
                {'category': 'State', 'subCategory': 'Tasmania', 'quota_count': 20,
                 'population_percent': 2.0, 'dynata_code': 'STATE_TAS'},
            ],
        }

        response = quota_generator.generate_quotas(client, {'quotaMode': 'non-interlocking'}, 'survey-1')

        client.generate_quotas.assert_called_once_with({'quotaMode': 'non-interlocking'}, survey_id='survey-1')
        assert response.result == client.generate_quotas.return_value
        assert response.cells[0].code == 'STATE_TASMANIA'
        assert response.cells[0].panel_code == 'STATE_TAS'

    def test_upstream_not_found(self):
        client = Mock()
        client.get_saved_quota.side_effect = QuotaGeneratorNotFoundError('Quota not found')

        with pytest.raises(HTTPException) as exc_info:
            quota_generator.get_saved_quota('q9', client)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == 'Quota not found'

    def test_unexpected_error_is_500(self):
        client = Mock()
        client.list_saved_quotas.side_effect = KeyError('x')

        with pytest.raises(HTTPException) as exc_info:
            quota_generator.list_saved_quotas(client, None)

        assert exc_info.value.status_code == 500


# =============================================================================
# Application
# =============================================================================


@pytest.mark.asyncio
class TestApplication:
    async def test_health(self):
        assert await health_check() == {'status': 'healthy'}

    async def test_root(self):
        info = await root()
        assert info['name'] == 'Survey Quota API'

    async def test_routes_registered(self):
        paths = {route.path for route in app.routes}

        assert '/quotas/plan' in paths
        assert '/quotas/projects/{project_id}/configuration' in paths
        assert '/tracking/allocations/{allocation_id}/completes' in paths
        assert '/tracking/projects/{project_id}/summary' in paths
        assert '/quota-generator/generate' in paths
        assert '/quota-generator/quotas/{quota_id}' in paths
