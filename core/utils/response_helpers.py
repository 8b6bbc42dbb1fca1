"""
API Response Helpers

Consistent JSON envelope for every API response:

    {"success": true,  "message": "...", "data": {...}, "feedback": {...}}
    {"success": false, "error": {"message": "...", "code": "...", "retry": false}, "feedback": {...}}
"""
from django.http import JsonResponse
from typing import Dict, Optional


class UXResponse:
    """Helper for creating API responses with feedback metadata."""

    @staticmethod
    def success(
        message: str = "Action completed",
        data=None,
        feedback: Optional[Dict] = None,
        stats_delta: Optional[Dict] = None,
        status: int = 200
    ) -> JsonResponse:
        """
        Success response.

        Args:
            message: User-friendly success message
            data: Response data (dict or list)
            feedback: Visual feedback configuration (toast, animation)
            stats_delta: Changed stats for optimistic UI updates
            status: HTTP status code (201 for creations)
        """
        response = {
            'success': True,
            'message': message,
            'data': data if data is not None else {},
            'feedback': feedback or {
                'type': 'success',
                'toast': True,
                'message': message
            }
        }

        if stats_delta:
            response['stats_delta'] = stats_delta

        return JsonResponse(response, status=status)

    @staticmethod
    def error(
        message: str = "An error occurred",
        error_code: str = "GENERAL_ERROR",
        retry: bool = False,
        status: int = 400
    ) -> JsonResponse:
        """
        Error response.

        Args:
            message: Clear, actionable error message
            error_code: Machine-readable code (NOT_FOUND, VALIDATION_ERROR, ...)
            retry: Whether the client should retry
            status: HTTP status code
        """
        response = {
            'success': False,
            'error': {
                'message': message,
                'code': error_code,
                'retry': retry
            },
            'feedback': {
                'type': 'error',
                'toast': True,
                'message': message
            }
        }

        return JsonResponse(response, status=status)

    @staticmethod
    def celebration(achievement: str, animation: str = "confetti") -> Dict:
        """Feedback block for milestones such as a perfect habit week."""
        return {
            'type': 'celebration',
            'message': achievement,
            'animation': animation,
            'toast': True
        }


def get_toggle_message(kind: str, completed: bool) -> str:
    """Toast text after a completion toggle."""
    if completed:
        return f"{kind.capitalize()} completed"
    return f"{kind.capitalize()} marked as pending"
