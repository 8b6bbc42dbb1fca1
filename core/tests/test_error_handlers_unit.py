"""
Unit tests for core/utils/error_handlers.py

Tests the handle_service_errors decorator:
- Mapping of every custom exception type to a status code and error code
- Django / DRF exceptions
- Unexpected exceptions becoming INTERNAL_ERROR
"""
import json
from unittest.mock import Mock

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.exceptions import PermissionDenied, ObjectDoesNotExist
from django.http import Http404, JsonResponse
from rest_framework.exceptions import ValidationError as DRFValidationError

from core.exceptions import (
    DashboardException,
    RecordNotFoundError,
    InvalidWeekdayError,
    ValidationError as AppValidationError,
    DuplicateError,
    IntegrationDisabledError,
    SheetsSyncError,
)
from core.utils.constants import WEEKDAYS
from core.utils.error_handlers import handle_service_errors


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

class MockRequest:
    """Mock request object for testing."""
    def __init__(self):
        self.method = 'POST'
        self.path = '/api/v1/test/'
        self.user = Mock(id=1, is_authenticated=True)


def call_raising(exc):
    @handle_service_errors
    def view_func(request):
        raise exc

    response = view_func(MockRequest())
    return response, json.loads(response.content)


# ============================================================================
# Tests for handle_service_errors decorator
# ============================================================================

class TestHandleServiceErrorsDecorator:
    """Tests for the handle_service_errors decorator."""

    def test_happy_path_passes_through(self):
        """Normal response should pass through unchanged."""
        @handle_service_errors
        def view_func(request):
            return JsonResponse({'success': True})

        response = view_func(MockRequest())

        assert response.status_code == 200

    def test_preserves_function_name(self):
        @handle_service_errors
        def my_view(request):
            return JsonResponse({})

        assert my_view.__name__ == 'my_view'

    @pytest.mark.parametrize('exc, status, code', [
        (RecordNotFoundError('habit', 'h1'), 404, 'NOT_FOUND'),
        (Http404('gone'), 404, 'NOT_FOUND'),
        (ObjectDoesNotExist('gone'), 404, 'NOT_FOUND'),
        (PermissionDenied(), 403, 'PERMISSION_DENIED'),
        (AppValidationError('name', 'required'), 400, 'VALIDATION_ERROR'),
        (InvalidWeekdayError('funday', WEEKDAYS), 400, 'VALIDATION_ERROR'),
        (DuplicateError('habit', 'Gym'), 400, 'VALIDATION_ERROR'),
        (IntegrationDisabledError('google_sheets_sync'), 400, 'INTEGRATION_DISABLED'),
        (SheetsSyncError('push', 'quota'), 502, 'UPSTREAM_ERROR'),
        (DashboardException('odd state'), 400, 'DASHBOARD_ERROR'),
    ])
    def test_exception_mapping(self, exc, status, code):
        response, data = call_raising(exc)

        assert response.status_code == status
        assert data['success'] is False
        assert data['error']['code'] == code
        assert data['feedback']['type'] == 'error'

    def test_not_found_message(self):
        _, data = call_raising(RecordNotFoundError('habit', 'h1'))

        assert data['error']['message'] == "Habit 'h1' not found"

    def test_json_decode_error(self):
        try:
            json.loads('{broken')
        except json.JSONDecodeError as e:
            response, data = call_raising(e)

        assert response.status_code == 400
        assert data['error']['message'] == 'Invalid JSON body'

    def test_django_validation_error_uses_first_field(self):
        response, data = call_raising(DjangoValidationError({'name': ['This field is required.']}))

        assert response.status_code == 400
        assert data['error']['message'] == 'name: This field is required.'

    def test_drf_validation_error_uses_first_field(self):
        response, data = call_raising(DRFValidationError({'day': ['Day is required']}))

        assert response.status_code == 400
        assert data['error']['message'] == 'day: Day is required'

    def test_upstream_error_is_retryable(self):
        _, data = call_raising(SheetsSyncError('pull', 'timeout'))

        assert data['error']['retry'] is True

    def test_unexpected_error_is_logged_and_hidden(self, caplog):
        response, data = call_raising(RuntimeError('db exploded'))

        assert response.status_code == 500
        assert data['error']['code'] == 'INTERNAL_ERROR'
        assert 'db exploded' not in data['error']['message']
        assert any('Unhandled error' in r.message for r in caplog.records)
