"""
Smart Scheduler

Time-of-day suggestions for records that have no time yet:
- habits without optimal_times
- open priorities without a due date
- one day's tasks without a suggested_time

Each record kind has a keyword table checked top to bottom; the first match
wins and the fallback applies when nothing matches. Suggestion ids are
derived from the record id, so the same snapshot always yields the same
suggestions.

No AI/ML - purely deterministic keyword rules.
"""
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional, Tuple

from core.snapshot import DashboardSnapshot, HabitSnapshot, PrioritySnapshot, DailyTaskSnapshot
from core.utils.constants import (
    MONDAY,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
    TIME_SLOT_CLOCK,
)

# Minutes assumed when a record has no estimate
DEFAULT_HABIT_DURATION = 15
DEFAULT_PRIORITY_DURATION = 60
DEFAULT_TASK_DURATION = 30

LARGE_PRIORITY_MINUTES = 120

# (matches, suggested_time, reason, confidence)
ScheduleRule = Tuple[Callable, str, str, int]


@dataclass(frozen=True)
class ScheduleSuggestion:
    id: str
    type: str
    item_id: str
    item_name: str
    suggested_time: str
    reason: str
    confidence: int
    estimated_duration: int

    @property
    def clock_time(self) -> str:
        return TIME_SLOT_CLOCK.get(self.suggested_time, TIME_SLOT_CLOCK['morning'])

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['clock_time'] = self.clock_time
        return data


def _mentions(*keywords):
    def matches(text: str, record) -> bool:
        return any(keyword in text for keyword in keywords)
    return matches


def _first_match(text: str, record, rules: List[ScheduleRule], fallback: Tuple[str, str, int]):
    text = text.lower()
    for matches, suggested_time, reason, confidence in rules:
        if matches(text, record):
            return suggested_time, reason, confidence
    return fallback


# =============================================================================
# RULE TABLES
# =============================================================================

HABIT_TIME_RULES: List[ScheduleRule] = [
    (_mentions('exercise', 'workout', 'run'), 'early-morning',
     'Exercise is most effective in early morning when willpower is strongest', 85),
    (_mentions('read', 'study', 'learn'), 'morning',
     'Learning activities benefit from peak cognitive performance in morning', 80),
    (_mentions('meditat'), 'early-morning',
     'Morning meditation sets positive tone for the day', 75),
    (_mentions('journal', 'reflect'), 'evening',
     'Evening reflection helps process the day', 75),
    (_mentions('water', 'vitamin', 'supplement'), 'morning',
     'Health habits are best established as part of morning routine', 80),
]
HABIT_FALLBACK = ('morning', 'Morning routines have highest completion rates', 70)

PRIORITY_TIME_RULES: List[ScheduleRule] = [
    (lambda text, p: p.priority == PRIORITY_URGENT, 'morning',
     'Urgent tasks require immediate attention during peak hours', 90),
    (lambda text, p: (p.estimated_time or DEFAULT_PRIORITY_DURATION) > LARGE_PRIORITY_MINUTES, 'morning',
     'Large tasks need extended focus time available in morning', 85),
    (_mentions('creative', 'design', 'brainstorm'), 'late-morning',
     'Creative work benefits from collaborative energy of late morning', 80),
    (_mentions('email', 'admin', 'organize'), 'afternoon',
     'Administrative tasks are perfect for afternoon productivity dip', 70),
]
PRIORITY_FALLBACK = ('morning', 'High-priority tasks are best tackled when energy is highest', 75)

TASK_TIME_RULES: List[ScheduleRule] = [
    (_mentions('plan', 'schedule', 'prepare'), 'early-morning',
     'Planning tasks are most effective when mind is fresh', 85),
    (_mentions('review', 'check', 'update'), 'afternoon',
     'Review tasks work well during natural afternoon reflection time', 75),
    (lambda text, t: t.priority == PRIORITY_HIGH, 'morning',
     'High-priority tasks deserve peak performance hours', 80),
]
TASK_FALLBACK = ('morning', 'Default optimal scheduling for tasks', 60)


# =============================================================================
# SUGGESTIONS
# =============================================================================

def suggest_habit_time(habit: HabitSnapshot) -> Optional[ScheduleSuggestion]:
    """None when the habit already has optimal times."""
    if habit.optimal_times:
        return None
    suggested_time, reason, confidence = _first_match(habit.name, habit, HABIT_TIME_RULES, HABIT_FALLBACK)
    return ScheduleSuggestion(
        id=f'habit-time-{habit.id}',
        type='habit',
        item_id=habit.id,
        item_name=habit.name,
        suggested_time=suggested_time,
        reason=reason,
        confidence=confidence,
        estimated_duration=habit.estimated_time or DEFAULT_HABIT_DURATION,
    )


def suggest_priority_time(priority: PrioritySnapshot) -> Optional[ScheduleSuggestion]:
    """None for completed priorities and those with a due date."""
    if priority.completed or priority.due_date is not None:
        return None
    suggested_time, reason, confidence = _first_match(
        priority.text, priority, PRIORITY_TIME_RULES, PRIORITY_FALLBACK
    )
    return ScheduleSuggestion(
        id=f'priority-time-{priority.id}',
        type='priority',
        item_id=priority.id,
        item_name=priority.text,
        suggested_time=suggested_time,
        reason=reason,
        confidence=confidence,
        estimated_duration=priority.estimated_time or DEFAULT_PRIORITY_DURATION,
    )


def suggest_task_time(task: DailyTaskSnapshot) -> Optional[ScheduleSuggestion]:
    if task.suggested_time:
        return None
    suggested_time, reason, confidence = _first_match(task.text, task, TASK_TIME_RULES, TASK_FALLBACK)
    return ScheduleSuggestion(
        id=f'task-time-{task.id}',
        type='task',
        item_id=task.id,
        item_name=task.text,
        suggested_time=suggested_time,
        reason=reason,
        confidence=confidence,
        estimated_duration=task.estimated_time or DEFAULT_TASK_DURATION,
    )


def generate_schedule(snapshot: DashboardSnapshot, day: str = MONDAY) -> List[ScheduleSuggestion]:
    """
    Suggestions for habits, then priorities, then the tasks of ``day``.

    Args:
        snapshot: the user's records
        day: weekday whose tasks are scheduled (lowercase)
    """
    candidates = (
        [suggest_habit_time(habit) for habit in snapshot.habits]
        + [suggest_priority_time(priority) for priority in snapshot.priorities]
        + [suggest_task_time(task) for task in snapshot.daily_tasks if task.day == day]
    )
    return [suggestion for suggestion in candidates if suggestion is not None]
