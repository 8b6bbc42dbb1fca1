"""
Habit Management Service

CRUD for habits plus the weekday toggle, symmetric habit chains and
directed prerequisites. Every lookup is scoped to the owning user; a habit
belonging to someone else is reported as not found.
"""
import logging
from typing import Dict, List

from django.db import transaction

from core.models import Habit
from core.exceptions import (
    RecordNotFoundError,
    InvalidWeekdayError,
    DuplicateError,
    ValidationError as AppValidationError,
)
from core.serializers import HabitSerializer, HabitChainSerializer, validate_input, habit_to_dict
from core.utils.constants import WEEKDAYS

logger = logging.getLogger(__name__)


class HabitService:
    """
    Service for managing Habit records.
    """

    def __init__(self, user):
        self.user = user

    def _get(self, habit_id: str) -> Habit:
        try:
            return Habit.objects.get(habit_id=habit_id, user=self.user)
        except Habit.DoesNotExist:
            raise RecordNotFoundError('habit', habit_id)

    def _get_many(self, habit_ids: List[str]) -> List[Habit]:
        habits = {h.habit_id: h for h in Habit.objects.filter(user=self.user, habit_id__in=habit_ids)}
        for habit_id in habit_ids:
            if habit_id not in habits:
                raise RecordNotFoundError('habit', habit_id)
        return [habits[habit_id] for habit_id in habit_ids]

    def _check_unique_name(self, name: str, exclude_id: str = None):
        existing = Habit.objects.filter(user=self.user, name__iexact=name)
        if exclude_id:
            existing = existing.exclude(habit_id=exclude_id)
        if existing.exists():
            raise DuplicateError('habit', name)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list_habits(self) -> List[Dict]:
        """All of the user's habits, newest first."""
        return [habit_to_dict(h) for h in Habit.objects.filter(user=self.user)]

    def get_habit(self, habit_id: str) -> Dict:
        return habit_to_dict(self._get(habit_id))

    def create_habit(self, data: Dict) -> Dict:
        """
        Create a habit.

        Args:
            data: name (required), category, difficulty, estimated_time,
                completed_days, optimal_times

        Returns:
            Created habit dict
        """
        validated = validate_input(HabitSerializer, data)
        self._check_unique_name(validated['name'])

        habit = Habit(user=self.user, **validated)
        habit.save()

        logger.info(f"Habit {habit.habit_id} created for user {self.user.id}")
        return habit_to_dict(habit)

    def update_habit(self, habit_id: str, data: Dict, partial: bool = True) -> Dict:
        """
        Update habit fields. Chains and prerequisites have dedicated operations.
        """
        habit = self._get(habit_id)
        validated = validate_input(HabitSerializer, data, partial=partial)

        if 'name' in validated:
            self._check_unique_name(validated['name'], exclude_id=habit_id)

        for field, value in validated.items():
            setattr(habit, field, value)
        habit.save()

        return habit_to_dict(habit)

    def delete_habit(self, habit_id: str) -> Dict:
        """
        Delete a habit and drop references to it from the user's other habits.
        """
        habit = self._get(habit_id)
        name = habit.name

        with transaction.atomic():
            for other in Habit.objects.filter(user=self.user).exclude(habit_id=habit_id):
                chained = [i for i in other.chained_habits if i != habit_id]
                prerequisites = [i for i in other.prerequisite_habits if i != habit_id]
                if chained != other.chained_habits or prerequisites != other.prerequisite_habits:
                    other.chained_habits = chained
                    other.prerequisite_habits = prerequisites
                    other.save(update_fields=['chained_habits', 'prerequisite_habits'])
            habit.delete()

        logger.info(f"Habit {habit_id} deleted for user {self.user.id}")
        return {'id': habit_id, 'name': name}

    # ------------------------------------------------------------------
    # Weekday grid
    # ------------------------------------------------------------------

    def toggle_day(self, habit_id: str, day: str) -> Dict:
        """
        Flip one weekday and recompute the stored streaks.

        Raises:
            InvalidWeekdayError: if day is not monday..sunday
        """
        day = (day or '').strip().lower()
        if day not in WEEKDAYS:
            raise InvalidWeekdayError(day, WEEKDAYS)

        habit = self._get(habit_id)
        completed_days = dict(habit.completed_days)
        completed_days[day] = not completed_days.get(day, False)
        habit.completed_days = completed_days
        habit.save(update_fields=['completed_days'])

        return habit_to_dict(habit)

    # ------------------------------------------------------------------
    # Chains (symmetric) and prerequisites (directed)
    # ------------------------------------------------------------------

    def chain_habits(self, data: Dict) -> List[Dict]:
        """
        Link every listed habit to every other listed habit.

        Existing links are kept; the relation stays symmetric.
        """
        habit_ids = validate_input(HabitChainSerializer, data)['habit_ids']

        with transaction.atomic():
            habits = self._get_many(habit_ids)
            for habit in habits:
                chained = list(habit.chained_habits)
                for other_id in habit_ids:
                    if other_id != habit.habit_id and other_id not in chained:
                        chained.append(other_id)
                habit.chained_habits = chained
                habit.save(update_fields=['chained_habits'])

        logger.info(f"Chained habits {habit_ids} for user {self.user.id}")
        return [habit_to_dict(h) for h in habits]

    def unchain_habits(self, data: Dict) -> List[Dict]:
        """Remove chain links among the listed habits, in both directions."""
        habit_ids = validate_input(HabitChainSerializer, data)['habit_ids']

        with transaction.atomic():
            habits = self._get_many(habit_ids)
            for habit in habits:
                habit.chained_habits = [
                    i for i in habit.chained_habits
                    if i not in habit_ids
                ]
                habit.save(update_fields=['chained_habits'])

        logger.info(f"Unchained habits {habit_ids} for user {self.user.id}")
        return [habit_to_dict(h) for h in habits]

    def add_prerequisite(self, habit_id: str, prerequisite_id: str) -> Dict:
        """Record that prerequisite_id should be done before habit_id. No cycle check."""
        if habit_id == prerequisite_id:
            raise AppValidationError('prerequisite_habits', 'A habit cannot be its own prerequisite')

        habit = self._get(habit_id)
        self._get(prerequisite_id)

        if prerequisite_id not in habit.prerequisite_habits:
            habit.prerequisite_habits = list(habit.prerequisite_habits) + [prerequisite_id]
            habit.save(update_fields=['prerequisite_habits'])

        return habit_to_dict(habit)

    def remove_prerequisite(self, habit_id: str, prerequisite_id: str) -> Dict:
        habit = self._get(habit_id)
        if prerequisite_id not in habit.prerequisite_habits:
            raise RecordNotFoundError('prerequisite', prerequisite_id)

        habit.prerequisite_habits = [i for i in habit.prerequisite_habits if i != prerequisite_id]
        habit.save(update_fields=['prerequisite_habits'])

        return habit_to_dict(habit)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def add_optimal_time(self, habit_id: str, time_of_day: str) -> Dict:
        """Append a time-of-day slot to optimal_times; already present is a no-op."""
        habit = self._get(habit_id)
        if time_of_day not in habit.optimal_times:
            habit.optimal_times = list(habit.optimal_times) + [time_of_day]
            habit.save(update_fields=['optimal_times'])
            logger.info(f"Habit {habit_id} scheduled for {time_of_day} for user {self.user.id}")
        return habit_to_dict(habit)
