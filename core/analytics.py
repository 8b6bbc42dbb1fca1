"""
Weekly Statistics Engine

Pure functions turning a DashboardSnapshot into the WeeklyStats aggregate
shown on the dashboard. Nothing here touches the database; callers build the
snapshot (see core.services.dashboard_service) and pass it in.

All rates are percentages in 0..100 and are returned unrounded.
"""
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Sequence

from core.snapshot import DashboardSnapshot, HabitSnapshot, SmartInsight
from core.services.streak_service import calculate_streak
from core.utils.constants import (
    TREND_INCREASING,
    TREND_DECREASING,
    TREND_STABLE,
    TREND_UPPER_THRESHOLD,
    TREND_LOWER_THRESHOLD,
)


@dataclass(frozen=True)
class WeeklyStats:
    """Derived weekly aggregate. Never persisted."""
    total_priorities: int
    priorities_completed: int
    priorities_completion_rate: float
    total_habits: int
    habit_consistency: float
    total_tasks: int
    tasks_completed: int
    tasks_completion_rate: float
    overall_score: float
    average_streak_length: float
    longest_current_streak: int
    habit_chain_success_rate: float
    time_spent_on_habits: int
    productivity_trend: str
    ai_insights: List[SmartInsight] = field(default_factory=list)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['ai_insights'] = [insight.to_dict() for insight in self.ai_insights]
        return data


# ====================================================================
# HELPERS
# ====================================================================

def completion_rate(completed: int, total: int) -> float:
    """completed / total * 100, or 0 when there is nothing to complete."""
    if total == 0:
        return 0.0
    return completed / total * 100


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def habit_consistency(habits: Sequence[HabitSnapshot]) -> float:
    """Average of per-habit weekly completion percentages."""
    return _mean([habit.completion_rate for habit in habits])


def habit_chain_success_rate(habits: Sequence[HabitSnapshot]) -> float:
    """Average weekly completion over habits that belong to a chain."""
    chained = [habit for habit in habits if habit.chained_habits]
    return habit_consistency(chained)


def time_spent_on_habits(habits: Sequence[HabitSnapshot]) -> int:
    """Minutes spent this week: checked days times minutes per completion."""
    return sum(habit.completed_count * habit.minutes_per_completion for habit in habits)


def productivity_trend(priorities_rate: float, habits_rate: float, tasks_rate: float) -> str:
    """
    Classify the week from the mean of the three completion rates.

    Above 75 is increasing, below 50 is decreasing; both boundaries are stable.
    """
    average = (priorities_rate + habits_rate + tasks_rate) / 3
    if average > TREND_UPPER_THRESHOLD:
        return TREND_INCREASING
    if average < TREND_LOWER_THRESHOLD:
        return TREND_DECREASING
    return TREND_STABLE


# ====================================================================
# AGGREGATE
# ====================================================================

def compute_weekly_stats(snapshot: DashboardSnapshot) -> WeeklyStats:
    """
    Compute the weekly aggregate for one snapshot.

    Deterministic and side-effect free: the same snapshot always produces
    an equal WeeklyStats.
    """
    priorities = snapshot.priorities
    habits = snapshot.habits
    tasks = snapshot.daily_tasks

    priorities_completed = sum(1 for p in priorities if p.completed)
    priorities_rate = completion_rate(priorities_completed, len(priorities))

    consistency = habit_consistency(habits)

    tasks_completed = sum(1 for t in tasks if t.completed)
    tasks_rate = completion_rate(tasks_completed, len(tasks))

    streaks = [calculate_streak(habit.completed_days) for habit in habits]

    return WeeklyStats(
        total_priorities=len(priorities),
        priorities_completed=priorities_completed,
        priorities_completion_rate=priorities_rate,
        total_habits=len(habits),
        habit_consistency=consistency,
        total_tasks=len(tasks),
        tasks_completed=tasks_completed,
        tasks_completion_rate=tasks_rate,
        overall_score=(priorities_rate + consistency + tasks_rate) / 3,
        average_streak_length=_mean(streaks),
        longest_current_streak=max(streaks, default=0),
        habit_chain_success_rate=habit_chain_success_rate(habits),
        time_spent_on_habits=time_spent_on_habits(habits),
        productivity_trend=productivity_trend(priorities_rate, consistency, tasks_rate),
        ai_insights=[insight for insight in snapshot.insights if not insight.dismissed],
    )
