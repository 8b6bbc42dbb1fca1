from typing import Dict, List, NamedTuple

from core.exceptions import RecordNotFoundError
from core.utils.constants import WEEKDAYS, STREAK_SCAN_ORDER


class StreakResult(NamedTuple):
    current_streak: int
    longest_streak: int
    completed_days: int


def calculate_streak(completed_days: Dict[str, bool]) -> int:
    """
    Current streak of a habit for the week.

    Scans sunday, saturday, ... monday and counts consecutive checked days,
    stopping at the first unchecked one. The scan is anchored to the end of
    the week regardless of today's date.
    """
    streak = 0
    for day in STREAK_SCAN_ORDER:
        if not completed_days.get(day, False):
            break
        streak += 1
    return streak


def calculate_longest_streak(completed_days: Dict[str, bool]) -> int:
    """Longest run of checked days in calendar order (monday..sunday)."""
    longest = 0
    run = 0
    for day in WEEKDAYS:
        if completed_days.get(day, False):
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


class StreakService:
    """Streak lookups for stored habits."""

    @staticmethod
    def get_habit_streak(habit_id: str, user_id: int) -> StreakResult:
        """
        Current and longest streak for one of the user's habits.

        Raises:
            RecordNotFoundError: if the habit does not belong to the user
        """
        from core.models import Habit

        habit = Habit.objects.filter(habit_id=habit_id, user_id=user_id).first()
        if habit is None:
            raise RecordNotFoundError('habit', habit_id)

        current = calculate_streak(habit.completed_days)
        return StreakResult(
            current_streak=current,
            longest_streak=max(habit.longest_streak, current),
            completed_days=habit.completed_count
        )

    @staticmethod
    def get_all_user_streaks(user_id: int) -> List[Dict]:
        """Streak summary for every habit the user owns."""
        from core.models import Habit

        return [
            {
                'habit_id': habit.habit_id,
                'habit_name': habit.name,
                **StreakResult(
                    current_streak=habit.streak,
                    longest_streak=habit.longest_streak,
                    completed_days=habit.completed_count
                )._asdict()
            }
            for habit in Habit.objects.filter(user_id=user_id)
        ]
