"""
RoutineOS - JSON API Views

Endpoints for habits, weekly priorities, daily tasks, smart insights,
scheduling suggestions, weekly stats and the Google Sheets integration. Every data endpoint is
scoped to the authenticated user.
"""
import json
import logging
from functools import wraps

from django.db import connection
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST, require_GET
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed

from .exceptions import ValidationError as AppValidationError
from .serializers import SheetSyncSerializer, validate_input
from .services.habit_service import HabitService
from .services.priority_service import PriorityService
from .services.daily_task_service import DailyTaskService
from .services.insight_service import InsightService
from .services.streak_service import StreakService
from .services.dashboard_service import DashboardService, compute_from_payload
from .services.scheduler_service import SchedulerService
from .services.sheets_service import SheetsService
from .utils.constants import DAYS_PER_WEEK
from .utils.error_handlers import handle_service_errors
from .utils.feature_flags import FLAG_GOOGLE_SHEETS_SYNC, require_feature
from .utils.response_helpers import UXResponse, get_toggle_message

# Initialize logger for this module
logger = logging.getLogger(__name__)

_TRUTHY = ('1', 'true', 'yes')


def require_auth(view_func):
    """
    Decorator to ensure user is logged in for API endpoints.
    Supports both Session (Browser) and JWT (Mobile) authentication.
    Returns 401 JSON instead of redirecting to login page.

    Note: This decorator also exempts the view from CSRF checks since
    mobile/API clients use JWT tokens instead of CSRF tokens.
    """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        # 1. Session auth (Django middleware)
        if request.user.is_authenticated:
            return view_func(request, *args, **kwargs)

        # 2. JWT auth (mobile / SPA)
        auth_header = request.headers.get('Authorization')
        if auth_header and auth_header.startswith('Bearer '):
            try:
                auth_result = JWTAuthentication().authenticate(request)
                if auth_result:
                    request.user, _ = auth_result
                    return view_func(request, *args, **kwargs)
            except (InvalidToken, TokenError, AuthenticationFailed) as e:
                return UXResponse.error(
                    message=f'Invalid token: {e}',
                    error_code='INVALID_TOKEN',
                    status=401
                )

        # 3. No valid auth found
        return UXResponse.error(
            message='Authentication required',
            error_code='UNAUTHORIZED',
            retry=True,
            status=401
        )

    return csrf_exempt(_wrapped_view)


def _json_body(request) -> dict:
    """Parsed JSON object body; empty body is {}."""
    if not request.body:
        return {}
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise AppValidationError('body', 'Expected a JSON object')
    return data


def _stats_delta(user) -> dict:
    """Headline rates after a mutation, for optimistic UI updates."""
    stats = DashboardService(user).get_weekly_stats()
    return {
        key: stats[key]
        for key in (
            'priorities_completion_rate',
            'habit_consistency',
            'tasks_completion_rate',
            'overall_score',
            'productivity_trend',
        )
    }


# ============================================================================
# HEALTH
# ============================================================================

@require_GET
def api_health(request):
    """Liveness probe with a database round trip."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        database = 'ok'
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        database = 'error'

    status = 200 if database == 'ok' else 503
    return JsonResponse({'status': 'ok' if status == 200 else 'degraded', 'database': database}, status=status)


# ============================================================================
# HABIT ENDPOINTS
# ============================================================================

@require_auth
@require_http_methods(['GET', 'POST'])
@handle_service_errors
def api_habits(request):
    """List habits (newest first) or create one."""
    service = HabitService(request.user)

    if request.method == 'GET':
        habits = service.list_habits()
        return UXResponse.success(message=f'{len(habits)} habits', data={'habits': habits})

    habit = service.create_habit(_json_body(request))
    return UXResponse.success(message='Habit created', data={'habit': habit}, status=201)


@require_auth
@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@handle_service_errors
def api_habit_detail(request, habit_id):
    service = HabitService(request.user)

    if request.method == 'GET':
        return UXResponse.success(message='Habit', data={'habit': service.get_habit(habit_id)})

    if request.method == 'DELETE':
        info = service.delete_habit(habit_id)
        return UXResponse.success(
            message='Habit deleted',
            data={'deleted': True, **info},
            feedback={'type': 'info', 'message': 'Habit deleted', 'toast': True}
        )

    habit = service.update_habit(habit_id, _json_body(request), partial=request.method == 'PATCH')
    return UXResponse.success(message='Habit updated', data={'habit': habit})


@require_auth
@require_POST
@handle_service_errors
def api_habit_toggle(request, habit_id, day):
    """Flip one weekday with celebration feedback on a perfect week."""
    habit = HabitService(request.user).toggle_day(habit_id, day)
    done = habit['completed_days'][day.lower()]

    feedback = None
    if sum(habit['completed_days'].values()) == DAYS_PER_WEEK:
        feedback = UXResponse.celebration(f"Perfect week for {habit['name']}!")

    return UXResponse.success(
        message=f"{day.capitalize()} {'checked' if done else 'unchecked'}",
        data={'habit': habit},
        feedback=feedback,
        stats_delta=_stats_delta(request.user)
    )


@require_auth
@require_POST
@handle_service_errors
def api_habit_chain(request):
    """Link two or more habits into a chain. Body: {"habit_ids": [...]}"""
    habits = HabitService(request.user).chain_habits(_json_body(request))
    return UXResponse.success(message='Habits chained', data={'habits': habits})


@require_auth
@require_POST
@handle_service_errors
def api_habit_unchain(request):
    habits = HabitService(request.user).unchain_habits(_json_body(request))
    return UXResponse.success(message='Habits unchained', data={'habits': habits})


@require_auth
@require_http_methods(['POST', 'DELETE'])
@handle_service_errors
def api_habit_prerequisite(request, habit_id, prerequisite_id):
    service = HabitService(request.user)
    if request.method == 'POST':
        habit = service.add_prerequisite(habit_id, prerequisite_id)
        return UXResponse.success(message='Prerequisite added', data={'habit': habit})

    habit = service.remove_prerequisite(habit_id, prerequisite_id)
    return UXResponse.success(message='Prerequisite removed', data={'habit': habit})


@require_auth
@require_GET
@handle_service_errors
def api_habit_streak(request, habit_id):
    result = StreakService.get_habit_streak(habit_id, request.user.id)
    return UXResponse.success(message='Streak', data={'habit_id': habit_id, **result._asdict()})


# ============================================================================
# PRIORITY ENDPOINTS
# ============================================================================

@require_auth
@require_http_methods(['GET', 'POST'])
@handle_service_errors
def api_priorities(request):
    service = PriorityService(request.user)

    if request.method == 'GET':
        completed = request.GET.get('completed')
        if completed is not None:
            completed = completed.lower() in _TRUTHY
        priorities = service.list_priorities(completed=completed)
        return UXResponse.success(message=f'{len(priorities)} priorities', data={'priorities': priorities})

    priority = service.create_priority(_json_body(request))
    return UXResponse.success(message='Priority created', data={'priority': priority}, status=201)


@require_auth
@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@handle_service_errors
def api_priority_detail(request, priority_id):
    service = PriorityService(request.user)

    if request.method == 'GET':
        return UXResponse.success(message='Priority', data={'priority': service.get_priority(priority_id)})

    if request.method == 'DELETE':
        info = service.delete_priority(priority_id)
        return UXResponse.success(message='Priority deleted', data={'deleted': True, **info})

    priority = service.update_priority(priority_id, _json_body(request), partial=request.method == 'PATCH')
    return UXResponse.success(message='Priority updated', data={'priority': priority})


@require_auth
@require_POST
@handle_service_errors
def api_priority_toggle(request, priority_id):
    priority = PriorityService(request.user).toggle_priority(priority_id)
    return UXResponse.success(
        message=get_toggle_message('priority', priority['completed']),
        data={'priority': priority},
        stats_delta=_stats_delta(request.user)
    )


# ============================================================================
# DAILY TASK ENDPOINTS
# ============================================================================

@require_auth
@require_http_methods(['GET', 'POST'])
@handle_service_errors
def api_tasks(request):
    """List daily tasks (optional ?day=monday) or create one."""
    service = DailyTaskService(request.user)

    if request.method == 'GET':
        tasks = service.list_tasks(day=request.GET.get('day'))
        return UXResponse.success(message=f'{len(tasks)} tasks', data={'tasks': tasks})

    task = service.create_task(_json_body(request))
    return UXResponse.success(message='Task created', data={'task': task}, status=201)


@require_auth
@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@handle_service_errors
def api_task_detail(request, task_id):
    service = DailyTaskService(request.user)

    if request.method == 'GET':
        return UXResponse.success(message='Task', data={'task': service.get_task(task_id)})

    if request.method == 'DELETE':
        info = service.delete_task(task_id)
        return UXResponse.success(message='Task deleted', data={'deleted': True, **info})

    task = service.update_task(task_id, _json_body(request), partial=request.method == 'PATCH')
    return UXResponse.success(message='Task updated', data={'task': task})


@require_auth
@require_POST
@handle_service_errors
def api_task_toggle(request, task_id):
    task = DailyTaskService(request.user).toggle_task(task_id)
    return UXResponse.success(
        message=get_toggle_message('task', task['completed']),
        data={'task': task},
        stats_delta=_stats_delta(request.user)
    )


# ============================================================================
# SMART INSIGHT ENDPOINTS
# ============================================================================

@require_auth
@require_GET
@handle_service_errors
def api_insights(request):
    """Stored insights, highest confidence first (?include_dismissed=1 for all)."""
    include_dismissed = request.GET.get('include_dismissed', '').lower() in _TRUTHY
    insights = InsightService(request.user).list_insights(include_dismissed=include_dismissed)
    return UXResponse.success(message=f'{len(insights)} insights', data={'insights': insights})


@require_auth
@require_POST
@handle_service_errors
def api_insights_refresh(request):
    """Run the insight rules and merge the result into the store."""
    result = DashboardService(request.user).refresh_insights()
    return UXResponse.success(message='Insights refreshed', data=result)


@require_auth
@require_POST
@handle_service_errors
def api_insight_dismiss(request, insight_id):
    insight = InsightService(request.user).dismiss_insight(insight_id)
    return UXResponse.success(message='Insight dismissed', data={'insight': insight})


@require_auth
@require_http_methods(['DELETE'])
@handle_service_errors
def api_insight_delete(request, insight_id):
    info = InsightService(request.user).remove_insight(insight_id)
    return UXResponse.success(message='Insight removed', data={'deleted': True, **info})


# ============================================================================
# STATS / DASHBOARD
# ============================================================================

@require_auth
@require_GET
@handle_service_errors
def api_weekly_stats(request):
    stats = DashboardService(request.user).get_weekly_stats()
    return UXResponse.success(message='Weekly stats', data={'stats': stats})


@require_auth
@require_POST
@handle_service_errors
def api_stats_compute(request):
    """
    Stats and insights for a posted snapshot, without touching the store.

    Body: {"priorities": [...], "habits": [...], "daily_tasks": [...], "insights": [...]}
    """
    result = compute_from_payload(_json_body(request))
    return UXResponse.success(message='Stats computed', data=result)


@require_auth
@require_GET
@handle_service_errors
def api_streaks(request):
    """Current and longest streak for every habit."""
    streaks = StreakService.get_all_user_streaks(request.user.id)
    return UXResponse.success(message=f'{len(streaks)} streaks', data={'streaks': streaks})


@require_auth
@require_GET
@handle_service_errors
def api_dashboard(request):
    data = DashboardService(request.user).get_full_dashboard()
    return UXResponse.success(message='Dashboard', data=data)


# ============================================================================
# SMART SCHEDULER
# ============================================================================

@require_auth
@require_GET
@handle_service_errors
def api_schedule(request):
    """Time-of-day suggestions (?day=monday picks which tasks are scheduled)."""
    result = SchedulerService(request.user).get_suggestions(day=request.GET.get('day'))
    return UXResponse.success(message=f"{len(result['suggestions'])} suggestions", data=result)


@require_auth
@require_POST
@handle_service_errors
def api_schedule_apply(request):
    """
    Accept a suggestion.

    Body: {"type": "habit", "item_id": "...", "suggested_time": "early-morning"}
    """
    result = SchedulerService(request.user).apply_suggestion(_json_body(request))
    return UXResponse.success(message='Schedule applied', data=result)


# ============================================================================
# GOOGLE SHEETS
# ============================================================================

@require_auth
@require_http_methods(['GET', 'POST'])
@handle_service_errors
@require_feature(FLAG_GOOGLE_SHEETS_SYNC)
def api_sheets_sync(request):
    """
    POST: push the dashboard to the sheet. Body: {"sheet_id": "...", "worksheet": "Dashboard"}
    GET:  pull raw rows. Query: ?sheet_id=...
    """
    params = request.GET.dict() if request.method == 'GET' else _json_body(request)
    validated = validate_input(SheetSyncSerializer, params)
    service = SheetsService(request.user, worksheet=validated.get('worksheet'))

    if request.method == 'GET':
        rows = service.pull(validated['sheet_id'])
        return UXResponse.success(message=f'{len(rows)} rows read', data={'rows': rows})

    snapshot = DashboardService(request.user).build_snapshot()
    result = service.push(validated['sheet_id'], snapshot)
    return UXResponse.success(message='Synced to Google Sheets', data=result)


@require_auth
@require_POST
@handle_service_errors
@require_feature(FLAG_GOOGLE_SHEETS_SYNC)
def api_sheets_import(request):
    """Pull rows and create records that don't exist yet."""
    validated = validate_input(SheetSyncSerializer, _json_body(request))
    counts = SheetsService(request.user, worksheet=validated.get('worksheet')).import_from_sheet(validated['sheet_id'])
    return UXResponse.success(message='Imported from Google Sheets', data={'imported': counts})
