"""
Smart Scheduler Service

Runs the time-of-day rules over the user's records and applies accepted
suggestions: a habit gains the slot in its optimal_times, a task stores it
as suggested_time. Priority suggestions are advisory only.
"""
import logging
from typing import Dict, Optional

from core.behavioral import generate_schedule
from core.exceptions import InvalidWeekdayError
from core.serializers import ScheduleApplySerializer, validate_input
from core.services.daily_task_service import DailyTaskService
from core.services.dashboard_service import DashboardService
from core.services.habit_service import HabitService
from core.utils.constants import MONDAY, WEEKDAYS
from core.utils.feature_flags import FLAG_SMART_SCHEDULER, ensure_feature_enabled

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Service for scheduling suggestions of one user.
    """

    def __init__(self, user):
        self.user = user

    def get_suggestions(self, day: Optional[str] = None) -> Dict:
        """
        Suggestions for unscheduled habits and priorities plus the tasks of one day.

        Raises:
            InvalidWeekdayError: if day is not monday..sunday
        """
        ensure_feature_enabled(FLAG_SMART_SCHEDULER, self.user)

        day = (day or MONDAY).strip().lower()
        if day not in WEEKDAYS:
            raise InvalidWeekdayError(day, WEEKDAYS)

        snapshot = DashboardService(self.user).build_snapshot()
        suggestions = generate_schedule(snapshot, day)
        return {
            'day': day,
            'suggestions': [suggestion.to_dict() for suggestion in suggestions],
        }

    def apply_suggestion(self, data: Dict) -> Dict:
        """
        Store an accepted suggestion.

        Args:
            data: type ('habit' or 'task'), item_id, suggested_time

        Returns:
            {'habit': {...}} or {'task': {...}}
        """
        ensure_feature_enabled(FLAG_SMART_SCHEDULER, self.user)
        validated = validate_input(ScheduleApplySerializer, data)

        if validated['type'] == 'habit':
            result = {'habit': HabitService(self.user).add_optimal_time(
                validated['item_id'], validated['suggested_time']
            )}
        else:
            result = {'task': DailyTaskService(self.user).set_suggested_time(
                validated['item_id'], validated['suggested_time']
            )}

        logger.info(
            f"Applied {validated['type']} schedule {validated['suggested_time']} "
            f"to {validated['item_id']} for user {self.user.id}"
        )
        return result
