"""
Weekly Statistics Engine Tests

Coverage: core.analytics.compute_weekly_stats and helpers.
Engine input is built from snapshot dataclasses; no database involved.
"""
import pytest

from core import analytics
from core.tests.factories import (
    habit_snapshot,
    priority_snapshot,
    task_snapshot,
    insight_snapshot,
    snapshot,
    week,
    pattern,
)
from core.utils.constants import WEEKDAYS


class TestEmptySnapshot:

    def test_all_zero(self):
        stats = analytics.compute_weekly_stats(snapshot())

        assert stats.total_priorities == 0
        assert stats.priorities_completion_rate == 0
        assert stats.habit_consistency == 0
        assert stats.tasks_completion_rate == 0
        assert stats.overall_score == 0
        assert stats.average_streak_length == 0
        assert stats.longest_current_streak == 0
        assert stats.habit_chain_success_rate == 0
        assert stats.time_spent_on_habits == 0
        assert stats.productivity_trend == 'decreasing'
        assert stats.ai_insights == []


class TestCompletionRates:

    def test_priority_rate_is_not_rounded(self):
        priorities = [priority_snapshot(completed=True), priority_snapshot(), priority_snapshot()]

        stats = analytics.compute_weekly_stats(snapshot(priorities=priorities))

        assert stats.total_priorities == 3
        assert stats.priorities_completed == 1
        assert stats.priorities_completion_rate == pytest.approx(100 / 3)

    def test_habit_consistency_is_mean_of_percentages(self):
        habits = [
            habit_snapshot(week(*WEEKDAYS)),   # 100%
            habit_snapshot(week()),            # 0%
            habit_snapshot(week('monday')),    # 14.28%
        ]

        stats = analytics.compute_weekly_stats(snapshot(habits=habits))

        assert stats.habit_consistency == pytest.approx((100 + 0 + 100 / 7) / 3)

    def test_task_rate(self):
        tasks = [task_snapshot(completed=True), task_snapshot(completed=True), task_snapshot(), task_snapshot()]

        stats = analytics.compute_weekly_stats(snapshot(daily_tasks=tasks))

        assert stats.tasks_completed == 2
        assert stats.tasks_completion_rate == 50

    def test_overall_score_is_mean_of_three_rates(self):
        stats = analytics.compute_weekly_stats(snapshot(
            priorities=[priority_snapshot(completed=True)],            # 100
            habits=[habit_snapshot(week())],                          # 0
            daily_tasks=[task_snapshot(completed=True), task_snapshot()],  # 50
        ))

        assert stats.overall_score == pytest.approx(50)


class TestOverallScore:

    def test_typical_week(self):
        stats = analytics.compute_weekly_stats(snapshot(
            priorities=[priority_snapshot(completed=True), priority_snapshot()],
            habits=[habit_snapshot(week('monday', 'tuesday'))],
            daily_tasks=[task_snapshot(completed=True) for _ in range(3)] + [task_snapshot()],
        ))

        assert stats.priorities_completion_rate == 50
        assert stats.habit_consistency == pytest.approx(28.57, abs=0.01)
        assert stats.tasks_completion_rate == 75
        assert stats.overall_score == pytest.approx(51.19, abs=0.01)
        assert stats.productivity_trend == 'stable'

    def test_mixed_rates(self):
        stats = analytics.compute_weekly_stats(snapshot(
            priorities=[priority_snapshot(completed=i < 2) for i in range(5)],                 # 40
            habits=[habit_snapshot(week(*WEEKDAYS)) for _ in range(4)] + [habit_snapshot(week())],  # 80
            daily_tasks=[task_snapshot(completed=i < 3) for i in range(5)],                  # 60
        ))

        assert stats.priorities_completion_rate == pytest.approx(40)
        assert stats.habit_consistency == pytest.approx(80)
        assert stats.tasks_completion_rate == pytest.approx(60)
        assert stats.overall_score == pytest.approx(60)
        assert stats.productivity_trend == 'stable'

    def test_everything_done(self):
        stats = analytics.compute_weekly_stats(snapshot(
            priorities=[priority_snapshot(completed=True)],
            habits=[habit_snapshot(week(*WEEKDAYS))],
            daily_tasks=[task_snapshot(completed=True)],
        ))

        assert stats.overall_score == 100
        assert stats.productivity_trend == 'increasing'


class TestStreakAggregates:

    def test_average_and_longest_current_streak(self):
        habits = [
            habit_snapshot(pattern(0, 0, 0, 0, 1, 1, 1)),  # 3
            habit_snapshot(pattern(1, 1, 1, 1, 1, 1, 0)),  # 0
            habit_snapshot(pattern(0, 0, 0, 0, 0, 0, 1)),  # 1
        ]

        stats = analytics.compute_weekly_stats(snapshot(habits=habits))

        assert stats.average_streak_length == pytest.approx(4 / 3)
        assert stats.longest_current_streak == 3

    def test_streaks_are_derived_not_read_from_stored_field(self):
        habit = habit_snapshot(week(*WEEKDAYS), streak=0)

        stats = analytics.compute_weekly_stats(snapshot(habits=[habit]))

        assert stats.longest_current_streak == 7


class TestChainAndTime:

    def test_chain_rate_uses_only_chained_habits(self):
        habits = [
            habit_snapshot(week(*WEEKDAYS), id='a', chained_habits=('b',)),
            habit_snapshot(week(), id='b', chained_habits=('a',)),
            habit_snapshot(week('monday'), id='c'),
        ]

        stats = analytics.compute_weekly_stats(snapshot(habits=habits))

        assert stats.habit_chain_success_rate == pytest.approx(50)

    def test_chain_rate_zero_without_chains(self):
        stats = analytics.compute_weekly_stats(snapshot(habits=[habit_snapshot(week(*WEEKDAYS))]))

        assert stats.habit_chain_success_rate == 0

    def test_time_spent_defaults_to_15_minutes(self):
        habits = [
            habit_snapshot(week('monday', 'tuesday'), estimated_time=30),
            habit_snapshot(week('monday', 'tuesday', 'wednesday'), estimated_time=None),
        ]

        stats = analytics.compute_weekly_stats(snapshot(habits=habits))

        assert stats.time_spent_on_habits == 2 * 30 + 3 * 15


class TestProductivityTrend:

    @pytest.mark.parametrize('rates, expected', [
        ((100, 100, 100), 'increasing'),
        ((75, 75, 75), 'stable'),
        ((50, 50, 50), 'stable'),
        ((60, 70, 80), 'stable'),
        ((0, 49, 100), 'decreasing'),
        ((80, 80, 70), 'increasing'),
    ])
    def test_thresholds(self, rates, expected):
        assert analytics.productivity_trend(*rates) == expected


class TestInsightsPassThrough:

    def test_dismissed_insights_are_excluded_in_order(self):
        insights = [
            insight_snapshot('first'),
            insight_snapshot('hidden', dismissed=True),
            insight_snapshot('second'),
        ]

        stats = analytics.compute_weekly_stats(snapshot(insights=insights))

        assert [i.id for i in stats.ai_insights] == ['first', 'second']

    def test_to_dict_serialises_insights(self):
        stats = analytics.compute_weekly_stats(snapshot(insights=[insight_snapshot('only')]))

        data = stats.to_dict()

        assert data['ai_insights'][0]['id'] == 'only'
        assert isinstance(data['ai_insights'][0]['created_at'], str)


class TestDeterminism:

    def test_same_snapshot_same_stats(self):
        snap = snapshot(
            priorities=[priority_snapshot(completed=True), priority_snapshot()],
            habits=[habit_snapshot(pattern(1, 0, 1, 0, 1, 1, 1))],
            daily_tasks=[task_snapshot(completed=True)],
        )

        assert analytics.compute_weekly_stats(snap) == analytics.compute_weekly_stats(snap)
