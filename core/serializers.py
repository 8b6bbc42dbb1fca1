"""
Input Validation Serializers

Provides validation for user input using Django REST Framework serializers.
Ensures data integrity before it reaches the database.

The *_to_dict helpers at the bottom shape ORM rows for JSON responses and
for building dashboard snapshots.
"""
from rest_framework import serializers

from core.exceptions import ValidationError as AppValidationError
from core.snapshot import normalize_completed_days
from core.utils.constants import (
    DIFFICULTY_CHOICES,
    DIFFICULTY_MEDIUM,
    PRIORITY_LEVEL_CHOICES,
    PRIORITY_MEDIUM,
    TASK_PRIORITY_CHOICES,
    TIME_OF_DAY_CHOICES,
    SCHEDULE_TARGET_CHOICES,
    DEFAULT_HABIT_MINUTES,
    WEEKDAYS,
)


def validate_input(serializer_class, data, partial=False):
    """
    Run a serializer and return validated_data.

    Raises:
        ValidationError: for the first invalid field
    """
    serializer = serializer_class(data=data, partial=partial)
    if not serializer.is_valid():
        field, messages = next(iter(serializer.errors.items()))
        message = messages[0] if isinstance(messages, list) else messages
        raise AppValidationError(field, str(message))
    return serializer.validated_data


class HabitSerializer(serializers.Serializer):
    """Validate habit create/update data"""

    name = serializers.CharField(
        max_length=255,
        required=True,
        help_text="Habit name (e.g., 'Meditate')"
    )

    category = serializers.CharField(
        max_length=50,
        required=False,
        allow_blank=True,
        default=''
    )

    difficulty = serializers.ChoiceField(
        choices=DIFFICULTY_CHOICES,
        default=DIFFICULTY_MEDIUM
    )

    estimated_time = serializers.IntegerField(
        min_value=1,
        max_value=1440,
        default=DEFAULT_HABIT_MINUTES,
        help_text="Minutes per completion"
    )

    completed_days = serializers.DictField(
        child=serializers.BooleanField(),
        required=False,
        help_text="monday..sunday -> bool; missing days are unchecked"
    )

    optimal_times = serializers.ListField(
        child=serializers.ChoiceField(choices=TIME_OF_DAY_CHOICES),
        required=False,
        default=list
    )

    def validate_name(self, value):
        """Ensure name is not blank"""
        if not value.strip():
            raise serializers.ValidationError("Name is required")
        return value.strip()

    def validate_completed_days(self, value):
        # Unknown keys are dropped, missing weekdays become False
        return normalize_completed_days(value)


class PrioritySerializer(serializers.Serializer):
    """Validate weekly priority data"""

    text = serializers.CharField(required=True)
    completed = serializers.BooleanField(default=False)
    priority = serializers.ChoiceField(choices=PRIORITY_LEVEL_CHOICES, default=PRIORITY_MEDIUM)
    estimated_time = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    category = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        default=list
    )

    def validate_text(self, value):
        if not value.strip():
            raise serializers.ValidationError("Text is required")
        return value.strip()


class DailyTaskSerializer(serializers.Serializer):
    """Validate daily task data"""

    text = serializers.CharField(required=True)
    day = serializers.CharField(
        max_length=20,
        required=True,
        help_text="Weekday name (monday..sunday) or a free label"
    )
    completed = serializers.BooleanField(default=False)
    priority = serializers.ChoiceField(choices=TASK_PRIORITY_CHOICES, default=PRIORITY_MEDIUM)
    estimated_time = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    category = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    ai_generated = serializers.BooleanField(default=False)
    suggested_time = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')

    def validate_text(self, value):
        if not value.strip():
            raise serializers.ValidationError("Text is required")
        return value.strip()

    def validate_day(self, value):
        """Weekday names are stored lowercase; other labels are kept as given"""
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Day is required")
        if value.lower() in WEEKDAYS:
            return value.lower()
        return value


class HabitChainSerializer(serializers.Serializer):
    """Validate a chain/unchain request"""

    habit_ids = serializers.ListField(
        child=serializers.CharField(max_length=36),
        min_length=2,
        help_text="At least two habit ids"
    )

    def validate_habit_ids(self, value):
        unique = list(dict.fromkeys(value))
        if len(unique) < 2:
            raise serializers.ValidationError("At least two different habits are required")
        return unique


class ScheduleApplySerializer(serializers.Serializer):
    """Validate applying a scheduler suggestion"""

    type = serializers.ChoiceField(choices=SCHEDULE_TARGET_CHOICES)
    item_id = serializers.CharField(max_length=36)
    suggested_time = serializers.ChoiceField(choices=TIME_OF_DAY_CHOICES)


class SheetSyncSerializer(serializers.Serializer):
    """Validate Google Sheets sync parameters"""

    sheet_id = serializers.CharField(max_length=200, required=True)
    worksheet = serializers.CharField(max_length=100, required=False)


class GoogleAuthSerializer(serializers.Serializer):
    """Validate mobile/SPA Google sign-in"""

    id_token = serializers.CharField(required=True)


# ====================================================================
# OUTPUT
# ====================================================================

def _iso(value):
    return value.isoformat() if value else None


def habit_to_dict(habit) -> dict:
    return {
        'id': habit.habit_id,
        'name': habit.name,
        'category': habit.category,
        'difficulty': habit.difficulty,
        'estimated_time': habit.estimated_time,
        'completed_days': normalize_completed_days(habit.completed_days),
        'streak': habit.streak,
        'longest_streak': habit.longest_streak,
        'chained_habits': list(habit.chained_habits or []),
        'prerequisite_habits': list(habit.prerequisite_habits or []),
        'optimal_times': list(habit.optimal_times or []),
        'created_at': _iso(habit.created_at),
        'updated_at': _iso(habit.updated_at),
    }


def priority_to_dict(priority) -> dict:
    return {
        'id': priority.priority_id,
        'text': priority.text,
        'completed': priority.completed,
        'priority': priority.priority,
        'estimated_time': priority.estimated_time,
        'category': priority.category,
        'due_date': _iso(priority.due_date),
        'tags': list(priority.tags or []),
        'created_at': _iso(priority.created_at),
        'updated_at': _iso(priority.updated_at),
    }


def daily_task_to_dict(task) -> dict:
    return {
        'id': task.task_id,
        'text': task.text,
        'day': task.day,
        'completed': task.completed,
        'priority': task.priority,
        'estimated_time': task.estimated_time,
        'category': task.category,
        'ai_generated': task.ai_generated,
        'suggested_time': task.suggested_time,
        'created_at': _iso(task.created_at),
        'updated_at': _iso(task.updated_at),
    }


def insight_to_dict(insight) -> dict:
    return {
        'id': insight.insight_id,
        'type': insight.type,
        'title': insight.title,
        'description': insight.description,
        'actionable': insight.actionable,
        'action': insight.action,
        'confidence': insight.confidence,
        'category': insight.category,
        'dismissed': insight.dismissed,
        'created_at': _iso(insight.created_at),
    }
