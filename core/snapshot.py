"""
In-memory snapshot values consumed by the statistics and insight engines.

A snapshot is a read-only copy of one user's priorities, habits, daily tasks
and stored insights at a point in time. The engines only ever see these
values, never ORM instances, so they stay pure and testable without a
database.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from core.utils.constants import WEEKDAYS, DEFAULT_HABIT_MINUTES, PRIORITY_MEDIUM, DIFFICULTY_MEDIUM


def normalize_completed_days(value) -> Dict[str, bool]:
    """Return a map with exactly the seven weekday keys; missing days are False."""
    if not isinstance(value, dict):
        value = {}
    return {day: bool(value.get(day, False)) for day in WEEKDAYS}


@dataclass(frozen=True)
class PrioritySnapshot:
    id: str
    text: str
    completed: bool
    created_at: datetime
    due_date: Optional[datetime] = None
    priority: str = PRIORITY_MEDIUM
    estimated_time: Optional[int] = None
    category: str = ''
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HabitSnapshot:
    id: str
    name: str
    completed_days: Dict[str, bool]
    created_at: datetime
    category: str = ''
    difficulty: str = DIFFICULTY_MEDIUM
    estimated_time: Optional[int] = DEFAULT_HABIT_MINUTES
    streak: int = 0
    longest_streak: int = 0
    chained_habits: Tuple[str, ...] = ()
    prerequisite_habits: Tuple[str, ...] = ()
    optimal_times: Tuple[str, ...] = ()

    @property
    def completed_count(self) -> int:
        return sum(1 for day in WEEKDAYS if self.completed_days.get(day, False))

    @property
    def completion_rate(self) -> float:
        """Share of the week completed, as a percentage (0-100)."""
        return self.completed_count / len(WEEKDAYS) * 100

    @property
    def minutes_per_completion(self) -> int:
        return self.estimated_time if self.estimated_time else DEFAULT_HABIT_MINUTES


@dataclass(frozen=True)
class DailyTaskSnapshot:
    id: str
    text: str
    day: str
    completed: bool
    created_at: datetime
    priority: str = PRIORITY_MEDIUM
    estimated_time: Optional[int] = None
    category: str = ''
    ai_generated: bool = False
    suggested_time: str = ''


@dataclass(frozen=True)
class SmartInsight:
    """Advisory record produced by the insight rules."""
    id: str
    type: str
    title: str
    description: str
    actionable: bool
    confidence: int
    category: str
    created_at: datetime
    action: str = ''
    dismissed: bool = False

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['created_at'] = self.created_at.isoformat()
        return data


@dataclass(frozen=True)
class DashboardSnapshot:
    priorities: List[PrioritySnapshot] = field(default_factory=list)
    habits: List[HabitSnapshot] = field(default_factory=list)
    daily_tasks: List[DailyTaskSnapshot] = field(default_factory=list)
    insights: List[SmartInsight] = field(default_factory=list)
