from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords
import uuid

from core.snapshot import normalize_completed_days
from core.utils.constants import (
    DEFAULT_HABIT_MINUTES,
    DIFFICULTY_CHOICES,
    DIFFICULTY_MEDIUM,
    PRIORITY_LEVEL_CHOICES,
    TASK_PRIORITY_CHOICES,
    PRIORITY_MEDIUM,
    INSIGHT_TYPE_CHOICES,
    INSIGHT_CATEGORY_CHOICES,
    empty_week,
)


def new_record_id():
    return str(uuid.uuid4())


class Habit(models.Model):
    """A recurring action tracked per weekday (e.g., Meditate, Read, Run)"""

    habit_id = models.CharField(max_length=36, primary_key=True, default=new_record_id, editable=False)
    user = models.ForeignKey('auth.User', on_delete=models.CASCADE, related_name='habits')
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=50, blank=True, default='')
    difficulty = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES, default=DIFFICULTY_MEDIUM)
    estimated_time = models.PositiveIntegerField(
        default=DEFAULT_HABIT_MINUTES,
        help_text="Minutes per completion"
    )
    completed_days = models.JSONField(default=empty_week)

    # Stored redundantly, recomputed on save
    streak = models.IntegerField(default=0)
    longest_streak = models.IntegerField(default=0)

    # Habit relations (lists of habit ids)
    chained_habits = models.JSONField(default=list, blank=True)
    prerequisite_habits = models.JSONField(default=list, blank=True)
    optimal_times = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    # Audit history - tracks weekday toggles
    history = HistoricalRecords()

    class Meta:
        db_table = 'habits'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at']),
        ]

    def __str__(self):
        return f"{self.name} ({self.completed_count}/7)"

    @property
    def id(self):
        """Alias for habit_id."""
        return self.habit_id

    @property
    def completed_count(self):
        """Number of weekdays checked this week."""
        return sum(1 for done in normalize_completed_days(self.completed_days).values() if done)

    def save(self, *args, **kwargs):
        from core.services.streak_service import calculate_streak, calculate_longest_streak

        self.completed_days = normalize_completed_days(self.completed_days)
        self.streak = calculate_streak(self.completed_days)
        self.longest_streak = max(
            self.longest_streak or 0,
            self.streak,
            calculate_longest_streak(self.completed_days)
        )
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'completed_days', 'streak', 'longest_streak', 'updated_at'}
        super().save(*args, **kwargs)


class Priority(models.Model):
    """A weekly goal with completion state and optional scheduling metadata"""

    priority_id = models.CharField(max_length=36, primary_key=True, default=new_record_id, editable=False)
    user = models.ForeignKey('auth.User', on_delete=models.CASCADE, related_name='priorities')
    text = models.TextField()
    completed = models.BooleanField(default=False)
    priority = models.CharField(max_length=20, choices=PRIORITY_LEVEL_CHOICES, default=PRIORITY_MEDIUM)
    estimated_time = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    category = models.CharField(max_length=50, blank=True, default='')
    due_date = models.DateTimeField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    history = HistoricalRecords()

    class Meta:
        db_table = 'priorities'
        ordering = ['-created_at']
        verbose_name_plural = 'priorities'
        indexes = [
            models.Index(fields=['user', '-created_at']),
            models.Index(fields=['user', 'completed']),
        ]

    def __str__(self):
        return f"{self.text} ({'done' if self.completed else 'open'})"

    @property
    def id(self):
        """Alias for priority_id."""
        return self.priority_id


class DailyTask(models.Model):
    """A task scoped to one weekday"""

    task_id = models.CharField(max_length=36, primary_key=True, default=new_record_id, editable=False)
    user = models.ForeignKey('auth.User', on_delete=models.CASCADE, related_name='daily_tasks')
    text = models.TextField()
    day = models.CharField(max_length=20, help_text="Weekday name, or a free label such as 'Today'")
    completed = models.BooleanField(default=False)
    priority = models.CharField(max_length=20, choices=TASK_PRIORITY_CHOICES, default=PRIORITY_MEDIUM)
    estimated_time = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    category = models.CharField(max_length=50, blank=True, default='')
    ai_generated = models.BooleanField(default=False)
    suggested_time = models.CharField(max_length=20, blank=True, default='')
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    history = HistoricalRecords()

    class Meta:
        db_table = 'daily_tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'day']),
            models.Index(fields=['user', '-created_at']),
        ]

    def __str__(self):
        return f"{self.day}: {self.text}"

    @property
    def id(self):
        """Alias for task_id."""
        return self.task_id


class SmartInsight(models.Model):
    """
    Heuristic, dismissible advisory note.

    insight_id is derived from the rule name and subject so that
    re-running the generator never duplicates a stored insight.
    """

    user = models.ForeignKey('auth.User', on_delete=models.CASCADE, related_name='smart_insights')
    insight_id = models.CharField(max_length=100)
    type = models.CharField(max_length=20, choices=INSIGHT_TYPE_CHOICES)
    title = models.CharField(max_length=255)
    description = models.TextField()
    actionable = models.BooleanField(default=False)
    action = models.TextField(blank=True, default='')
    confidence = models.PositiveSmallIntegerField(help_text="0-100")
    category = models.CharField(max_length=20, choices=INSIGHT_CATEGORY_CHOICES)
    dismissed = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'smart_insights'
        ordering = ['-confidence', '-created_at']
        unique_together = [['user', 'insight_id']]
        indexes = [
            models.Index(fields=['user', 'dismissed']),
        ]

    def __str__(self):
        return f"{self.category}: {self.title}"
