"""
Error Handling Utilities

Decorator for consistent exception handling across API views. Service-layer
exceptions become the JSON error envelope with a matching status code.
"""
import json
import logging
from functools import wraps

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.exceptions import PermissionDenied, ObjectDoesNotExist
from django.http import Http404
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.exceptions import PermissionDenied as DRFPermissionDenied

from core.exceptions import (
    DashboardException,
    RecordNotFoundError,
    InvalidWeekdayError,
    ValidationError as AppValidationError,
    DuplicateError,
    IntegrationDisabledError,
    SheetsSyncError,
)
from core.utils.response_helpers import UXResponse

logger = logging.getLogger(__name__)


def _validation_message(e) -> str:
    """First field error of a Django/DRF validation error, for UX clarity."""
    if getattr(e, 'message_dict', None):
        first_field = next(iter(e.message_dict))
        return f"{first_field}: {e.message_dict[first_field][0]}"
    detail = getattr(e, 'detail', None)
    if isinstance(detail, dict) and detail:
        first_field = next(iter(detail))
        value = detail[first_field]
        if isinstance(value, list) and value:
            value = value[0]
        return f"{first_field}: {value}"
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if getattr(e, 'messages', None):
        return e.messages[0]
    return str(e)


def handle_service_errors(view_func):
    """
    Decorator for API views to handle exceptions and return consistent UXResponses.
    Catches service-layer exceptions and standard Django/DRF exceptions.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)

        # --- Not Found Errors ---
        except (RecordNotFoundError, Http404, ObjectDoesNotExist) as e:
            return UXResponse.error(
                message=str(e) or "Not found",
                error_code="NOT_FOUND",
                status=404
            )

        # --- Permission Errors ---
        except (PermissionDenied, DRFPermissionDenied) as e:
            return UXResponse.error(
                message=str(e) or "Permission denied",
                error_code="PERMISSION_DENIED",
                status=403
            )

        # --- Validation Errors ---
        except (AppValidationError, InvalidWeekdayError, DuplicateError, json.JSONDecodeError) as e:
            msg = str(e)
            if isinstance(e, json.JSONDecodeError):
                msg = "Invalid JSON body"

            return UXResponse.error(
                message=msg,
                error_code="VALIDATION_ERROR",
                status=400
            )

        except (DjangoValidationError, DRFValidationError) as e:
            return UXResponse.error(
                message=_validation_message(e),
                error_code="VALIDATION_ERROR",
                status=400
            )

        # --- Integration Errors ---
        except IntegrationDisabledError as e:
            return UXResponse.error(
                message=str(e),
                error_code="INTEGRATION_DISABLED",
                status=400
            )

        except SheetsSyncError as e:
            logger.warning(f"Sheets sync error on {request.path}: {e}")
            return UXResponse.error(
                message=str(e),
                error_code="UPSTREAM_ERROR",
                retry=True,
                status=502
            )

        # --- Generic Dashboard Errors ---
        except DashboardException as e:
            return UXResponse.error(
                message=str(e),
                error_code="DASHBOARD_ERROR",
                status=400
            )

        # --- Unexpected Errors ---
        except Exception:
            logger.exception(f"Unhandled error in {view_func.__name__} ({request.method} {request.path})")
            return UXResponse.error(
                message="An unexpected error occurred",
                error_code="INTERNAL_ERROR",
                retry=True,
                status=500
            )

    return wrapper
