"""
Snapshot schema tests

Coverage: core.schemas and dashboard_service.load_snapshot normalisation.
"""
from datetime import datetime

import pytest

from core.exceptions import ValidationError as AppValidationError
from core.schemas import HabitSchema, DailyTaskSchema, DashboardSnapshotSchema
from core.services.dashboard_service import load_snapshot, compute_from_payload
from core.snapshot import DashboardSnapshot, HabitSnapshot, normalize_completed_days
from core.utils.constants import WEEKDAYS


class TestNormalizeCompletedDays:

    def test_fills_missing_days(self):
        days = normalize_completed_days({'monday': True})

        assert list(days) == list(WEEKDAYS)
        assert days['monday'] is True
        assert days['sunday'] is False

    def test_drops_unknown_keys(self):
        assert 'funday' not in normalize_completed_days({'funday': True})

    def test_non_dict_is_empty_week(self):
        assert normalize_completed_days(None) == {day: False for day in WEEKDAYS}


class TestHabitSchema:

    def test_defaults(self):
        habit = HabitSchema().load({'id': 'h1', 'name': 'Gym'})

        assert isinstance(habit, HabitSnapshot)
        assert habit.estimated_time == 15
        assert habit.difficulty == 'medium'
        assert habit.completed_days == {day: False for day in WEEKDAYS}
        assert habit.chained_habits == ()

    def test_naive_datetime_is_made_aware(self):
        habit = HabitSchema().load({'id': 'h1', 'name': 'Gym', 'created_at': '2024-06-10T08:00:00'})

        assert habit.created_at.tzinfo is not None

    def test_accepts_datetime_objects(self):
        created = datetime(2024, 6, 10, 8, 0)

        habit = HabitSchema().load({'id': 'h1', 'name': 'Gym', 'created_at': created})

        assert habit.created_at.replace(tzinfo=None) == created

    def test_unknown_fields_are_ignored(self):
        habit = HabitSchema().load({'id': 'h1', 'name': 'Gym', 'color': 'red'})

        assert habit.name == 'Gym'

    @pytest.mark.parametrize('value', ['false', '0', 'no', False])
    def test_falsy_strings_stay_false(self, value):
        habit = HabitSchema().load({
            'id': 'h1', 'name': 'Gym', 'completed_days': {day: value for day in WEEKDAYS},
        })

        assert habit.completed_days == {day: False for day in WEEKDAYS}

    def test_truthy_strings_are_parsed(self):
        habit = HabitSchema().load({'id': 'h1', 'name': 'Gym', 'completed_days': {'monday': 'true'}})

        assert habit.completed_days['monday'] is True
        assert habit.completed_days['tuesday'] is False

    def test_null_week_is_empty_week(self):
        habit = HabitSchema().load({'id': 'h1', 'name': 'Gym', 'completed_days': None})

        assert habit.completed_days == {day: False for day in WEEKDAYS}

    def test_non_boolean_day_is_rejected(self):
        with pytest.raises(AppValidationError) as exc:
            load_snapshot({'habits': [{'id': 'h1', 'name': 'Gym', 'completed_days': {'monday': 'maybe'}}]})

        assert exc.value.field.startswith('habits.0.completed_days')


class TestDailyTaskSchema:

    def test_free_day_label(self):
        task = DailyTaskSchema().load({'id': 't1', 'text': 'Buy milk', 'day': 'Today'})

        assert task.day == 'Today'
        assert task.completed is False


class TestLoadSnapshot:

    def test_empty_payload(self):
        snap = DashboardSnapshotSchema().load({})

        assert snap == DashboardSnapshot()

    def test_error_path_names_nested_field(self):
        with pytest.raises(AppValidationError) as exc:
            load_snapshot({'daily_tasks': [{'id': 't1', 'text': 'x', 'day': 'monday'}, {'id': 't2', 'text': 'y'}]})

        assert exc.value.field == 'daily_tasks.1.day'

    def test_invalid_confidence(self):
        insight = {
            'id': 'i1', 'type': 'habit', 'title': 't', 'description': 'd',
            'confidence': 150, 'category': 'performance',
        }

        with pytest.raises(AppValidationError) as exc:
            load_snapshot({'insights': [insight]})

        assert exc.value.field == 'insights.0.confidence'

    @pytest.mark.parametrize('item', ['not-a-habit', 42, ['Gym']])
    def test_non_object_habit_is_a_validation_error(self, item):
        with pytest.raises(AppValidationError) as exc:
            load_snapshot({'habits': [item]})

        assert exc.value.field.startswith('habits.0')

    def test_string_booleans_drive_stats(self):
        habits = [{'id': 'h1', 'name': 'Gym', 'completed_days': {day: 'false' for day in WEEKDAYS}}]

        result = compute_from_payload({'habits': habits})

        assert result['stats']['habit_consistency'] == 0
