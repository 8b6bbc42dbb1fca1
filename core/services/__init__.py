"""
Services package for RoutineOS.

Business logic layer containing domain services:

Record store:
- habit_service: Habit CRUD, weekday toggle, chains and prerequisites
- priority_service: Weekly priority CRUD and toggle
- daily_task_service: Daily task CRUD and toggle
- insight_service: Idempotent insight storage, dismissal and removal

Derived data:
- streak_service: Weekly streak calculation
- dashboard_service: Snapshot building, weekly stats and insight refresh
- scheduler_service: Time-of-day suggestions and applying them

Integrations:
- sheets_service: Google Sheets push / pull / import
"""

# Explicit imports for convenience
from .habit_service import HabitService
from .priority_service import PriorityService
from .daily_task_service import DailyTaskService
from .insight_service import InsightService
from .streak_service import StreakService
from .dashboard_service import DashboardService
from .scheduler_service import SchedulerService
from .sheets_service import SheetsService

__all__ = [
    'HabitService',
    'PriorityService',
    'DailyTaskService',
    'InsightService',
    'StreakService',
    'DashboardService',
    'SchedulerService',
    'SheetsService',
]
