"""
Unit tests for core/utils/feature_flags.py

Tests feature flag system:
- Flag enabling/disabling from settings
- Percentage-based rollouts
- Cache overrides (kill switch)
- ensure_feature_enabled and the require_feature decorator
"""
from unittest.mock import Mock

import pytest
from django.http import JsonResponse
from django.test import override_settings

from core.exceptions import IntegrationDisabledError
from core.utils.feature_flags import (
    _get_user_bucket,
    is_feature_enabled,
    set_flag_override,
    clear_flag_override,
    ensure_feature_enabled,
    require_feature,
    FLAG_GOOGLE_SHEETS_SYNC,
    FLAG_SMART_INSIGHTS,
)


# ============================================================================
# Tests for is_feature_enabled
# ============================================================================

class TestIsFeatureEnabled:

    def test_defaults_are_on(self):
        assert is_feature_enabled(FLAG_GOOGLE_SHEETS_SYNC) is True
        assert is_feature_enabled(FLAG_SMART_INSIGHTS) is True

    def test_unknown_flag_is_off(self):
        assert is_feature_enabled('time_travel') is False

    @override_settings(FEATURE_FLAGS={'beta': {'enabled': False, 'rollout_percent': 100}})
    def test_disabled_in_settings(self):
        assert is_feature_enabled('beta') is False

    @override_settings(FEATURE_FLAGS={'beta': {'enabled': True, 'rollout_percent': 30}})
    def test_percentage_rollout_by_user_bucket(self):
        assert is_feature_enabled('beta', Mock(id=129)) is True    # bucket 29
        assert is_feature_enabled('beta', Mock(id=130)) is False   # bucket 30

    @override_settings(FEATURE_FLAGS={'beta': {'enabled': True, 'rollout_percent': 0}})
    def test_zero_rollout(self):
        assert is_feature_enabled('beta', Mock(id=1)) is False


class TestUserBucket:

    def test_anonymous_bucket_is_zero(self):
        assert _get_user_bucket(None) == 0
        assert _get_user_bucket(Mock(id=None)) == 0

    def test_bucket_is_stable(self):
        assert _get_user_bucket(Mock(id=1234)) == 34


# ============================================================================
# Tests for overrides
# ============================================================================

class TestOverrides:

    def test_override_wins_over_settings(self):
        set_flag_override(FLAG_GOOGLE_SHEETS_SYNC, False)

        assert is_feature_enabled(FLAG_GOOGLE_SHEETS_SYNC) is False

    def test_clear_override_restores_settings(self):
        set_flag_override(FLAG_GOOGLE_SHEETS_SYNC, False)
        clear_flag_override(FLAG_GOOGLE_SHEETS_SYNC)

        assert is_feature_enabled(FLAG_GOOGLE_SHEETS_SYNC) is True


# ============================================================================
# Tests for ensure_feature_enabled / require_feature
# ============================================================================

class TestRequireFeature:

    def test_ensure_raises_when_off(self):
        set_flag_override(FLAG_SMART_INSIGHTS, False)

        with pytest.raises(IntegrationDisabledError) as exc:
            ensure_feature_enabled(FLAG_SMART_INSIGHTS)

        assert exc.value.integration == FLAG_SMART_INSIGHTS

    def test_decorator_passes_through_when_on(self):
        @require_feature(FLAG_SMART_INSIGHTS)
        def view(request):
            return JsonResponse({'ok': True})

        assert view(Mock(user=Mock(id=1))).status_code == 200

    def test_decorator_raises_when_off(self):
        set_flag_override(FLAG_SMART_INSIGHTS, False)

        @require_feature(FLAG_SMART_INSIGHTS)
        def view(request):
            return JsonResponse({'ok': True})

        with pytest.raises(IntegrationDisabledError):
            view(Mock(user=Mock(id=1)))
