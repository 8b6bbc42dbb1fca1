"""
Structured Logging with Request Correlation IDs.

- RequestIDMiddleware tags every request with an id (X-Request-ID) and logs
  one line per API request with its duration
- StructuredFormatter renders records as JSON lines carrying that id
- RequestIDFilter exposes the id to plain-text formatters as %(request_id)s
"""
import json
import logging
import threading
import time
import uuid

logger = logging.getLogger(__name__)

# Thread-local storage for request context
_request_context = threading.local()

# Attributes every LogRecord has; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime', 'request_id'}


# ============================================================================
# REQUEST ID MANAGEMENT
# ============================================================================

def get_request_id() -> str:
    """Current request id, or '-' outside a request."""
    return getattr(_request_context, 'request_id', None) or '-'


def set_request_id(request_id: str):
    _request_context.request_id = request_id


def clear_request_context():
    if hasattr(_request_context, 'request_id'):
        delattr(_request_context, 'request_id')


# ============================================================================
# FORMATTER / FILTER
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in format:
    {"timestamp": "...", "level": "INFO", "logger": "...", "request_id": "abc123", "message": "..."}
    """

    def format(self, record):
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': get_request_id(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Extra fields passed via logger.info(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class RequestIDFilter(logging.Filter):
    """Adds record.request_id for text formatters."""

    def filter(self, record):
        record.request_id = get_request_id()
        return True


# ============================================================================
# LOGGING UTILITIES
# ============================================================================

def log_with_context(level: str, message: str, target: logging.Logger = None, **extra):
    """
    Log with extra structured fields.

    Usage:
        log_with_context('info', 'Habit toggled', habit_id=habit_id, day='monday')
    """
    target = target or logger
    log_func = getattr(target, level.lower(), target.info)
    log_func(message, extra=extra)


def log_api_request(request, response_status: int, duration_ms: float):
    """Log API request with standard fields."""
    user = getattr(request, 'user', None)
    log_with_context(
        'info',
        f'{request.method} {request.path}',
        method=request.method,
        path=request.path,
        status=response_status,
        duration_ms=round(duration_ms, 2),
        user_id=getattr(user, 'id', None),
        ip=request.META.get('REMOTE_ADDR')
    )


# ============================================================================
# MIDDLEWARE
# ============================================================================

class RequestIDMiddleware:
    """
    Django middleware adding request id correlation.

    Add to MIDDLEWARE in settings.py:
        'core.utils.logging_utils.RequestIDMiddleware',
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get('HTTP_X_REQUEST_ID') or uuid.uuid4().hex[:8]
        set_request_id(request_id)

        start_time = time.time()
        try:
            response = self.get_response(request)
            response['X-Request-ID'] = request_id

            if request.path.startswith('/api/'):
                log_api_request(request, response.status_code, (time.time() - start_time) * 1000)

            return response
        finally:
            clear_request_context()
