"""
Feature Flags for optional integrations.

Flags come from settings.FEATURE_FLAGS (falling back to DEFAULT_FLAGS) and
can be overridden at runtime through the cache, e.g. to switch off Google
Sheets sync while the upstream API is misbehaving.

Usage:
    from core.utils.feature_flags import is_feature_enabled, require_feature

    if is_feature_enabled('smart_insights', user):
        ...
"""
import logging
from functools import wraps

from django.core.cache import cache
from django.conf import settings

from core.exceptions import IntegrationDisabledError

logger = logging.getLogger(__name__)

FLAG_GOOGLE_SHEETS_SYNC = 'google_sheets_sync'
FLAG_SMART_INSIGHTS = 'smart_insights'
FLAG_SMART_SCHEDULER = 'smart_scheduler'

DEFAULT_FLAGS = {
    FLAG_GOOGLE_SHEETS_SYNC: {'enabled': True, 'rollout_percent': 100},
    FLAG_SMART_INSIGHTS: {'enabled': True, 'rollout_percent': 100},
    FLAG_SMART_SCHEDULER: {'enabled': True, 'rollout_percent': 100},
}

OVERRIDE_TIMEOUT = 300


def _cache_key(flag_name: str) -> str:
    return f"ff:{flag_name}"


def _get_flag_config(flag_name: str) -> dict:
    override = cache.get(_cache_key(flag_name))
    if override is not None:
        return override
    flags = getattr(settings, 'FEATURE_FLAGS', DEFAULT_FLAGS)
    return flags.get(flag_name, {'enabled': False, 'rollout_percent': 0})


def _get_user_bucket(user) -> int:
    """Consistent bucket (0-99) for percentage rollouts."""
    user_id = getattr(user, 'id', None)
    if not user_id:
        return 0
    return user_id % 100


def is_feature_enabled(flag_name: str, user=None) -> bool:
    """
    Check if a feature flag is enabled for this user.

    Unknown flags are disabled.
    """
    flag_config = _get_flag_config(flag_name)

    if not flag_config.get('enabled', False):
        return False

    rollout_percent = flag_config.get('rollout_percent', 100)
    if rollout_percent >= 100:
        return True
    if rollout_percent <= 0:
        return False
    return _get_user_bucket(user) < rollout_percent


def set_flag_override(flag_name: str, enabled: bool, rollout_percent: int = 100, timeout: int = OVERRIDE_TIMEOUT):
    """Temporarily override a flag (kill switch)."""
    cache.set(_cache_key(flag_name), {'enabled': enabled, 'rollout_percent': rollout_percent}, timeout)
    logger.warning(f"Feature flag '{flag_name}' overridden: enabled={enabled}, rollout={rollout_percent}%")


def clear_flag_override(flag_name: str):
    cache.delete(_cache_key(flag_name))


def ensure_feature_enabled(flag_name: str, user=None):
    """
    Raises:
        IntegrationDisabledError: if the flag is off for this user
    """
    if not is_feature_enabled(flag_name, user):
        raise IntegrationDisabledError(flag_name)


def require_feature(flag_name: str):
    """
    View decorator: reject the request when the flag is off.

    Place inside @handle_service_errors so the error becomes a JSON 400.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            ensure_feature_enabled(flag_name, getattr(request, 'user', None))
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator
