"""
Utilities package for RoutineOS.

Common utility functions:
- constants: Application constants
- response_helpers: UX-optimized API responses
- error_handlers: Exception to JSON envelope mapping for API views
- feature_flags: Switches for optional integrations
- logging_utils: Request ids and structured logging
"""
from .response_helpers import UXResponse, get_toggle_message
