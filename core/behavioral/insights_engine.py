"""
Smart Insights Engine

Rule-based advisory notes derived from a dashboard snapshot.

Each rule is an independent function ``(snapshot, as_of) -> List[SmartInsight]``
registered in INSIGHT_RULES. Rules never read the database or the clock
directly: ``as_of`` is passed in so that results are reproducible.

Insight ids are derived from the rule name and, for per-habit rules, the
habit id. Running the engine twice on the same snapshot therefore yields the
same ids, which is what lets the store merge results idempotently.

No AI/ML - purely deterministic thresholds.
"""
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from django.utils import timezone

from core.snapshot import DashboardSnapshot, HabitSnapshot, SmartInsight
from core.utils.constants import (
    WEEKDAYS,
    INSIGHT_CATEGORY_PERFORMANCE,
    INSIGHT_CATEGORY_TIMING,
    INSIGHT_CATEGORY_STREAK,
    INSIGHT_CATEGORY_PRODUCTIVITY,
    INSIGHT_CATEGORY_WARNING,
)

InsightRule = Callable[[DashboardSnapshot, datetime], List[SmartInsight]]

# Thresholds (percentages unless noted)
STRUGGLING_HABIT_RATE = 30
SUCCESSFUL_HABIT_RATE = 85
PRIORITY_OVERLOAD_RATE = 50
BEST_DAY_RATE = 80
WORST_DAY_RATE = 40
WORST_DAY_MIN_TASKS = 2
NEW_HABIT_WINDOW_DAYS = 7
NEW_HABIT_LIMIT = 3
STREAK_OPPORTUNITY_MIN_RUN = 3
CHAIN_STRUGGLING_RATE = 50


def _insight(as_of: datetime, **kwargs) -> SmartInsight:
    kwargs.setdefault('actionable', True)
    return SmartInsight(created_at=as_of, **kwargs)


# =============================================================================
# HABIT RULES
# =============================================================================

def struggling_habits(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    """Habits completed on fewer than 30% of the week's days."""
    insights = []
    for habit in snapshot.habits:
        rate = habit.completion_rate
        if rate < STRUGGLING_HABIT_RATE:
            insights.append(_insight(
                as_of,
                id=f'habit-struggling-{habit.id}',
                type='habit',
                title=f'"{habit.name}" needs attention',
                description=(
                    f"Only {round(rate)}% completion this week. "
                    f"Consider reducing difficulty or breaking into smaller steps."
                ),
                action='Simplify habit',
                confidence=85,
                category=INSIGHT_CATEGORY_WARNING,
            ))
    return insights


def successful_habits(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    """Habits completed on more than 85% of the week's days."""
    insights = []
    for habit in snapshot.habits:
        rate = habit.completion_rate
        if rate > SUCCESSFUL_HABIT_RATE:
            insights.append(_insight(
                as_of,
                id=f'habit-success-{habit.id}',
                type='habit',
                title=f'"{habit.name}" is crushing it!',
                description=(
                    f"{round(rate)}% completion rate is excellent. "
                    f"Consider adding a related habit to build momentum."
                ),
                action='Expand habit stack',
                confidence=90,
                category=INSIGHT_CATEGORY_PERFORMANCE,
            ))
    return insights


def missing_morning_routine(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    if not snapshot.habits:
        return []
    if any('morning' in habit.optimal_times for habit in snapshot.habits):
        return []
    return [_insight(
        as_of,
        id='morning-routine-missing',
        type='habit',
        title='Missing morning routine',
        description=(
            "Starting your day with consistent habits can boost daily productivity. "
            "Consider adding a morning habit."
        ),
        action='Add morning habit',
        confidence=75,
        category=INSIGHT_CATEGORY_TIMING,
    )]


def habit_overload(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    """More than three habits created in the seven days before as_of."""
    window_start = as_of - timedelta(days=NEW_HABIT_WINDOW_DAYS)
    recent = sum(1 for habit in snapshot.habits if habit.created_at >= window_start)
    if recent <= NEW_HABIT_LIMIT:
        return []
    return [_insight(
        as_of,
        id='habit-overload',
        type='general',
        title='Too many new habits at once',
        description=(
            f"You've added {recent} habits this week. "
            f"Focusing on 1-2 habits at a time leads to higher success rates."
        ),
        action='Focus on top 2 habits',
        confidence=90,
        category=INSIGHT_CATEGORY_WARNING,
    )]


def _first_broken_run(habit: HabitSnapshot) -> int:
    """Length of the first run of >= 3 checked days that is followed by a miss, or 0."""
    run = 0
    for day in WEEKDAYS:
        if habit.completed_days.get(day, False):
            run += 1
        elif run >= STREAK_OPPORTUNITY_MIN_RUN:
            return run
        else:
            run = 0
    return 0


def streak_opportunities(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    insights = []
    for habit in snapshot.habits:
        run = _first_broken_run(habit)
        if run:
            insights.append(_insight(
                as_of,
                id=f'streak-opportunity-{habit.id}',
                type='habit',
                title=f'Streak opportunity: "{habit.name}"',
                description=(
                    f"You're {run} days into a potential streak! "
                    f"Complete today to keep momentum going."
                ),
                action='Complete habit today',
                confidence=70,
                category=INSIGHT_CATEGORY_STREAK,
            ))
    return insights


def _chain_completion_rate(members: List[HabitSnapshot]) -> float:
    """Share of weekdays on which every chain member was completed."""
    all_done = sum(
        1 for day in WEEKDAYS
        if all(member.completed_days.get(day, False) for member in members)
    )
    return all_done / len(WEEKDAYS) * 100


def struggling_chains(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    """Chains (a habit plus its chained habits) fully completed on under half the week."""
    by_id = {habit.id: habit for habit in snapshot.habits}
    insights = []
    for habit in snapshot.habits:
        members = [habit] + [by_id[i] for i in habit.chained_habits if i in by_id and i != habit.id]
        if len(members) < 2:
            continue
        rate = _chain_completion_rate(members)
        if rate < CHAIN_STRUGGLING_RATE:
            insights.append(_insight(
                as_of,
                id=f'chain-struggling-{habit.id}',
                type='habit',
                title=f'Chain "{habit.name}" needs attention',
                description=(
                    f"This habit chain has a {round(rate)}% completion rate. "
                    f"Consider breaking it into smaller chains or focusing on the weakest habit."
                ),
                action='Review chain structure',
                confidence=85,
                category=INSIGHT_CATEGORY_PERFORMANCE,
            ))
    return insights


# =============================================================================
# PRIORITY AND TASK RULES
# =============================================================================

def priority_overload(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    total = len(snapshot.priorities)
    if total == 0:
        return []
    rate = sum(1 for p in snapshot.priorities if p.completed) / total * 100
    if rate >= PRIORITY_OVERLOAD_RATE:
        return []
    return [_insight(
        as_of,
        id='priorities-overload',
        type='priority',
        title='Priority overload detected',
        description=(
            f"You're completing only {round(rate)}% of priorities. "
            f"Consider reducing weekly goals or breaking large tasks into smaller ones."
        ),
        action='Reduce weekly priorities',
        confidence=80,
        category=INSIGHT_CATEGORY_PRODUCTIVITY,
    )]


def day_performance(snapshot: DashboardSnapshot) -> List[Tuple[str, int, float]]:
    """
    Per-day task completion as (day, total, rate) in first-seen task order.

    Days are whatever labels the tasks carry, weekday names or not.
    """
    totals: Dict[str, int] = {}
    completed: Dict[str, int] = {}
    for task in snapshot.daily_tasks:
        totals[task.day] = totals.get(task.day, 0) + 1
        if task.completed:
            completed[task.day] = completed.get(task.day, 0) + 1
    return [
        (day, total, completed.get(day, 0) / total * 100)
        for day, total in totals.items()
    ]


def best_and_worst_day(snapshot: DashboardSnapshot, as_of: datetime) -> List[SmartInsight]:
    """Power day above 80% completion, weak day below 40% with more than one task."""
    performance = day_performance(snapshot)
    if not performance:
        return []

    # max/min keep the first of equal items
    best_day, _, best_rate = max(performance, key=lambda entry: entry[2])
    worst_day, worst_total, worst_rate = min(performance, key=lambda entry: entry[2])

    insights = []
    if best_rate > BEST_DAY_RATE:
        label = best_day.capitalize()
        insights.append(_insight(
            as_of,
            id='best-day-insight',
            type='general',
            title=f'{label} is your power day!',
            description=(
                f"You complete {round(best_rate)}% of tasks on {label}s. "
                f"Consider scheduling important priorities on this day."
            ),
            action=f'Schedule important tasks on {label}',
            confidence=85,
            category=INSIGHT_CATEGORY_TIMING,
        ))
    if worst_rate < WORST_DAY_RATE and worst_total >= WORST_DAY_MIN_TASKS:
        label = worst_day.capitalize()
        insights.append(_insight(
            as_of,
            id='worst-day-insight',
            type='general',
            title=f'{label} needs optimization',
            description=(
                f"Only {round(worst_rate)}% task completion on {label}s. "
                f"Consider reducing tasks or identifying blockers."
            ),
            action=f'Optimize {label} schedule',
            confidence=75,
            category=INSIGHT_CATEGORY_PRODUCTIVITY,
        ))
    return insights


# =============================================================================
# RULE TABLE
# =============================================================================

INSIGHT_RULES: List[Tuple[str, InsightRule]] = [
    ('struggling_habits', struggling_habits),
    ('successful_habits', successful_habits),
    ('priority_overload', priority_overload),
    ('missing_morning_routine', missing_morning_routine),
    ('best_and_worst_day', best_and_worst_day),
    ('habit_overload', habit_overload),
    ('streak_opportunities', streak_opportunities),
    ('struggling_chains', struggling_chains),
]


def generate_insights(
    snapshot: DashboardSnapshot,
    as_of: Optional[datetime] = None,
    rules: Optional[List[Tuple[str, InsightRule]]] = None
) -> List[SmartInsight]:
    """
    Run every rule against the snapshot, in table order.

    Args:
        snapshot: the user's records
        as_of: reference time for age-based rules and created_at (default: now)
        rules: override the rule table (used by tests)

    Returns:
        List of SmartInsight, rule order preserved
    """
    as_of = as_of or timezone.now()
    insights: List[SmartInsight] = []
    for _name, rule in (rules if rules is not None else INSIGHT_RULES):
        insights.extend(rule(snapshot, as_of))
    return insights
