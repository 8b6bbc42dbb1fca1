"""
Authentication API Views

JSON endpoints for Google sign-in from mobile/SPA clients. Browser sign-in
goes through django-allauth's Google provider under /accounts/.
"""
import hashlib
import json
import logging
from functools import wraps

from django.conf import settings
from django.contrib.auth import logout
from django.contrib.auth.models import User
from django.core.cache import cache
from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from rest_framework_simplejwt.tokens import RefreshToken

from core.serializers import GoogleAuthSerializer, validate_input
from core.utils.error_handlers import handle_service_errors
from core.utils.response_helpers import UXResponse
from core.views_api import require_auth

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ('accounts.google.com', 'https://accounts.google.com')


# ============================================================================
# RATE LIMITING
# ============================================================================

def _client_ip(request) -> str:
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


def rate_limit(max_requests: int, window_seconds: int, key_prefix: str = 'rate'):
    """
    Rate limiting decorator using Django cache.

    Args:
        max_requests: Maximum requests allowed in window
        window_seconds: Time window in seconds
        key_prefix: Cache key prefix for this endpoint

    Returns 429 Too Many Requests if limit exceeded.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            ip_hash = hashlib.md5(_client_ip(request).encode()).hexdigest()[:12]
            cache_key = f"{key_prefix}:{ip_hash}"

            request_count = cache.get(cache_key, 0)
            if request_count >= max_requests:
                logger.warning(f"Rate limit hit on {key_prefix} for {ip_hash}")
                return UXResponse.error(
                    message=f'Too many requests. Please try again in {max(window_seconds // 60, 1)} minutes.',
                    error_code='RATE_LIMITED',
                    retry=True,
                    status=429
                )

            cache.set(cache_key, request_count + 1, window_seconds)
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


# ============================================================================
# HELPERS
# ============================================================================

def _user_payload(user) -> dict:
    return {
        'id': user.id,
        'email': user.email,
        'name': f"{user.first_name} {user.last_name}".strip(),
        'username': user.username,
    }


def _unique_username(email: str) -> str:
    base = email.split('@')[0][:140] or 'user'
    username = base
    suffix = 1
    while User.objects.filter(username=username).exists():
        suffix += 1
        username = f"{base}{suffix}"
    return username


def get_or_create_google_user(idinfo: dict):
    """
    Match the verified Google identity to a local user by email.

    Returns:
        (user, created)
    """
    email = idinfo.get('email')
    if not email:
        raise ValueError('Email not found in token.')

    with transaction.atomic():
        user = User.objects.filter(email__iexact=email).first()
        if user:
            return user, False
        user = User.objects.create(
            email=email,
            username=_unique_username(email),
            first_name=idinfo.get('given_name', ''),
            last_name=idinfo.get('family_name', ''),
        )
    logger.info(f"Created user {user.id} from Google sign-in")
    return user, True


# ============================================================================
# VIEWS
# ============================================================================

@require_http_methods(["POST"])
@csrf_exempt  # Mobile apps don't send CSRF tokens
@rate_limit(max_requests=20, window_seconds=300, key_prefix='google_auth')
@handle_service_errors
def api_google_auth(request):
    """
    Exchange a Google ID token for JWTs.

    POST /api/v1/auth/google/
    { "id_token": "<google_id_token>" }

    Returns:
    {
        "success": true,
        "data": {"token": "<access>", "refresh": "<refresh>", "user": {...}, "created": bool}
    }
    """
    data = json.loads(request.body or b'{}')
    if 'idToken' in data and 'id_token' not in data:
        data['id_token'] = data['idToken']
    token = validate_input(GoogleAuthSerializer, data)['id_token']

    try:
        idinfo = id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            audience=settings.GOOGLE_CLIENT_ID
        )
        if idinfo.get('iss') not in GOOGLE_ISSUERS:
            raise ValueError('Wrong issuer.')
        user, created = get_or_create_google_user(idinfo)
    except ValueError as e:
        logger.warning(f"Google token verification failed: {e}")
        return UXResponse.error(
            message=f'Token verification failed: {e}',
            error_code='INVALID_TOKEN',
            status=401
        )

    refresh = RefreshToken.for_user(user)
    return UXResponse.success(
        message='Signed in with Google',
        data={
            'token': str(refresh.access_token),
            'refresh': str(refresh),
            'user': _user_payload(user),
            'created': created,
        }
    )


@require_auth
@require_http_methods(["GET"])
def api_me(request):
    """
    Current user.

    GET /api/v1/auth/me/
    """
    return UXResponse.success(message='Authenticated', data={'user': _user_payload(request.user)})


@require_http_methods(["POST"])
def api_logout(request):
    """
    End the browser session.

    POST /api/v1/auth/logout/
    """
    logout(request)
    return JsonResponse({'success': True, 'redirect': '/accounts/login/'})
