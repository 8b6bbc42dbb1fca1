from marshmallow import Schema, fields, validate, pre_load, post_load, EXCLUDE
from collections.abc import Mapping
from datetime import datetime, timezone as dt_timezone
from django.utils import timezone

from core.snapshot import (
    normalize_completed_days,
    PrioritySnapshot,
    HabitSnapshot,
    DailyTaskSnapshot,
    SmartInsight,
    DashboardSnapshot,
)
from core.utils.constants import (
    DEFAULT_HABIT_MINUTES,
    PRIORITY_LEVEL_CHOICES,
    TASK_PRIORITY_CHOICES,
    DIFFICULTY_CHOICES,
    INSIGHT_TYPE_CHOICES,
    INSIGHT_CATEGORY_CHOICES,
)


def _choices(pairs):
    return [value for value, _ in pairs]


class DateTimeValue(fields.DateTime):
    """DateTime field that also accepts datetime objects (ORM rows)."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, datetime):
            result = value
        else:
            result = super()._deserialize(value, attr, data, **kwargs)
        if timezone.is_naive(result):
            result = timezone.make_aware(result, dt_timezone.utc)
        return result


class SnapshotSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class PrioritySchema(SnapshotSchema):
    id = fields.Str(required=True)
    text = fields.Str(required=True, validate=validate.Length(min=1))
    completed = fields.Bool(load_default=False)
    created_at = DateTimeValue(load_default=timezone.now)
    due_date = DateTimeValue(load_default=None, allow_none=True)
    priority = fields.Str(load_default='medium', validate=validate.OneOf(_choices(PRIORITY_LEVEL_CHOICES)))
    estimated_time = fields.Int(load_default=None, allow_none=True, validate=validate.Range(min=1))
    category = fields.Str(load_default='', allow_none=True)
    tags = fields.List(fields.Str(), load_default=list)

    @post_load
    def make_priority(self, data, **kwargs):
        data['tags'] = tuple(data['tags'])
        data['category'] = data['category'] or ''
        return PrioritySnapshot(**data)


class HabitSchema(SnapshotSchema):
    id = fields.Str(required=True)
    name = fields.Str(required=True, validate=validate.Length(min=1))
    completed_days = fields.Dict(keys=fields.Str(), values=fields.Bool(), load_default=dict)
    created_at = DateTimeValue(load_default=timezone.now)
    category = fields.Str(load_default='', allow_none=True)
    difficulty = fields.Str(load_default='medium', validate=validate.OneOf(_choices(DIFFICULTY_CHOICES)))
    estimated_time = fields.Int(load_default=DEFAULT_HABIT_MINUTES, allow_none=True)
    streak = fields.Int(load_default=0)
    longest_streak = fields.Int(load_default=0)
    chained_habits = fields.List(fields.Str(), load_default=list)
    prerequisite_habits = fields.List(fields.Str(), load_default=list)
    optimal_times = fields.List(fields.Str(), load_default=list)

    @pre_load
    def drop_null_week(self, data, **kwargs):
        # Non-objects are left for the schema to reject
        if isinstance(data, Mapping) and data.get('completed_days', {}) is None:
            data = {key: value for key, value in data.items() if key != 'completed_days'}
        return data

    @post_load
    def make_habit(self, data, **kwargs):
        # Engines assume all seven weekday keys are present
        data['completed_days'] = normalize_completed_days(data['completed_days'])
        for key in ('chained_habits', 'prerequisite_habits', 'optimal_times'):
            data[key] = tuple(data[key])
        data['category'] = data['category'] or ''
        return HabitSnapshot(**data)


class DailyTaskSchema(SnapshotSchema):
    id = fields.Str(required=True)
    text = fields.Str(required=True, validate=validate.Length(min=1))
    day = fields.Str(required=True)
    completed = fields.Bool(load_default=False)
    created_at = DateTimeValue(load_default=timezone.now)
    priority = fields.Str(load_default='medium', validate=validate.OneOf(_choices(TASK_PRIORITY_CHOICES)))
    estimated_time = fields.Int(load_default=None, allow_none=True)
    category = fields.Str(load_default='', allow_none=True)
    ai_generated = fields.Bool(load_default=False)
    suggested_time = fields.Str(load_default='', allow_none=True)

    @post_load
    def make_task(self, data, **kwargs):
        data['category'] = data['category'] or ''
        data['suggested_time'] = data['suggested_time'] or ''
        return DailyTaskSnapshot(**data)


class SmartInsightSchema(SnapshotSchema):
    id = fields.Str(required=True)
    type = fields.Str(required=True, validate=validate.OneOf(_choices(INSIGHT_TYPE_CHOICES)))
    title = fields.Str(required=True)
    description = fields.Str(required=True)
    actionable = fields.Bool(load_default=False)
    action = fields.Str(load_default='', allow_none=True)
    confidence = fields.Int(required=True, validate=validate.Range(min=0, max=100))
    category = fields.Str(required=True, validate=validate.OneOf(_choices(INSIGHT_CATEGORY_CHOICES)))
    created_at = DateTimeValue(load_default=timezone.now)
    dismissed = fields.Bool(load_default=False)

    @post_load
    def make_insight(self, data, **kwargs):
        data['action'] = data['action'] or ''
        return SmartInsight(**data)


class DashboardSnapshotSchema(SnapshotSchema):
    priorities = fields.List(fields.Nested(PrioritySchema), load_default=list)
    habits = fields.List(fields.Nested(HabitSchema), load_default=list)
    daily_tasks = fields.List(fields.Nested(DailyTaskSchema), load_default=list)
    insights = fields.List(fields.Nested(SmartInsightSchema), load_default=list)

    @post_load
    def make_snapshot(self, data, **kwargs):
        return DashboardSnapshot(**data)
