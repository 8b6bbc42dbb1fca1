"""
Streak Tests

Test IDs: STRK-001 to STRK-011
Coverage: calculate_streak, calculate_longest_streak, StreakService

The current streak scans sunday -> monday and stops at the first miss.
"""
import pytest

from core.services.streak_service import calculate_streak, calculate_longest_streak, StreakService
from core.exceptions import RecordNotFoundError
from core.tests.base import BaseAPITestCase, API
from core.tests.factories import HabitFactory, UserFactory, week, pattern
from core.utils.constants import STREAK_SCAN_ORDER, WEEKDAYS


class TestCalculateStreak:
    """Pure streak function."""

    def test_STRK_001_all_days_checked(self):
        """STRK-001: All seven days checked gives 7."""
        assert calculate_streak(week(*WEEKDAYS)) == 7

    def test_STRK_002_no_days_checked(self):
        """STRK-002: Empty week gives 0."""
        assert calculate_streak(week()) == 0

    def test_STRK_003_pattern_in_scan_order(self):
        """STRK-003: [T,T,F,T,T,T,T] listed in scan order (sunday first) gives 2."""
        flags = [True, True, False, True, True, True, True]
        completed_days = dict(zip(STREAK_SCAN_ORDER, flags))

        assert calculate_streak(completed_days) == 2

    def test_STRK_004_streak_stops_when_sunday_missed(self):
        """STRK-004: Monday-Saturday done but Sunday missed gives 0."""
        assert calculate_streak(pattern(1, 1, 1, 1, 1, 1, 0)) == 0

    def test_STRK_005_missing_keys_count_as_unchecked(self):
        """STRK-005: Missing weekday keys are treated as False."""
        assert calculate_streak({'sunday': True, 'saturday': True}) == 2


class TestCalculateLongestStreak:

    def test_STRK_006_longest_run_in_calendar_order(self):
        """STRK-006: Longest run is found anywhere in the week."""
        assert calculate_longest_streak(pattern(1, 1, 1, 0, 1, 1, 0)) == 3

    def test_STRK_007_empty_week(self):
        assert calculate_longest_streak(week()) == 0


class StreakPersistenceTests(BaseAPITestCase):
    """Stored streak fields and the streak endpoint."""

    def test_STRK_008_save_recomputes_stored_streaks(self):
        """STRK-008: Saving a habit refreshes streak and longest_streak."""
        habit = self.create_habit(completed_days=week('friday', 'saturday', 'sunday'))

        self.assertEqual(habit.streak, 3)
        self.assertEqual(habit.longest_streak, 3)

        habit.completed_days = week('sunday')
        habit.save()
        habit.refresh_from_db()

        self.assertEqual(habit.streak, 1)
        # Longest never goes down
        self.assertEqual(habit.longest_streak, 3)

    def test_STRK_009_streak_endpoint(self):
        """STRK-009: GET habits/<id>/streak/ returns current and longest."""
        habit = self.create_habit(completed_days=pattern(1, 1, 1, 1, 0, 1, 1))

        data = self.assertSuccess(self.get(f'{API}/habits/{habit.habit_id}/streak/'))

        self.assertEqual(data['data']['current_streak'], 2)
        self.assertEqual(data['data']['longest_streak'], 4)
        self.assertEqual(data['data']['completed_days'], 6)

    def test_STRK_010_other_users_habit_not_found(self):
        """STRK-010: Streak lookup is scoped to the owner."""
        other = UserFactory.create()
        habit = HabitFactory.create(other)

        with pytest.raises(RecordNotFoundError):
            StreakService.get_habit_streak(habit.habit_id, self.user.id)

        self.assertNotFound(self.get(f'{API}/habits/{habit.habit_id}/streak/'))

    def test_STRK_011_all_user_streaks(self):
        """STRK-011: GET stats/streaks/ lists every own habit."""
        habit = self.create_habit(name='Read', completed_days=week('saturday', 'sunday'))
        HabitFactory.create(UserFactory.create())

        data = self.assertSuccess(self.get(f'{API}/stats/streaks/'))

        self.assertEqual(data['data']['streaks'], [{
            'habit_id': habit.habit_id,
            'habit_name': 'Read',
            'current_streak': 2,
            'longest_streak': 2,
            'completed_days': 2,
        }])
