"""
Smart Insight Store Tests

Test IDs: INS-001 to INS-014
Coverage: InsightService, DashboardService.refresh_insights and /api/v1/insights/*

Tests cover:
- Idempotent merge by insight id
- Dismissal surviving refreshes
- Pruning of insights whose rule no longer fires
- Feature flag gating
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.models import SmartInsight as SmartInsightRecord
from core.services.dashboard_service import DashboardService
from core.services.insight_service import InsightService
from core.tests.base import API, BaseAPITestCase
from core.tests.factories import AS_OF, HabitFactory, insight_snapshot, week
from core.utils.constants import WEEKDAYS
from core.utils.feature_flags import FLAG_SMART_INSIGHTS, set_flag_override, clear_flag_override

User = get_user_model()


class InsightServiceTestCase(TestCase):
    """InsightService against the database."""

    def setUp(self):
        self.user = User.objects.create_user(username='insightuser', password='pass123')
        self.service = InsightService(self.user)

    def test_INS_001_merge_creates_rows(self):
        """INS-001: First merge creates one row per insight."""
        counts = self.service.merge_insights([insight_snapshot('a'), insight_snapshot('b')])

        self.assertEqual(counts, {'created': 2, 'updated': 0})
        self.assertEqual(SmartInsightRecord.objects.filter(user=self.user).count(), 2)

    def test_INS_002_merge_is_idempotent(self):
        """INS-002: Merging the same id again updates in place."""
        self.service.merge_insights([insight_snapshot('a', title='Old', confidence=70)])

        counts = self.service.merge_insights([insight_snapshot('a', title='New', confidence=80)])

        self.assertEqual(counts, {'created': 0, 'updated': 1})
        record = SmartInsightRecord.objects.get(user=self.user, insight_id='a')
        self.assertEqual(record.title, 'New')
        self.assertEqual(record.confidence, 80)

    def test_INS_003_merge_keeps_dismissal_and_created_at(self):
        """INS-003: A re-fired insight stays dismissed and keeps its first created_at."""
        self.service.merge_insights([insight_snapshot('a', created_at=AS_OF)])
        self.service.dismiss_insight('a')

        self.service.merge_insights([insight_snapshot('a', created_at=AS_OF + timedelta(days=1))])

        record = SmartInsightRecord.objects.get(user=self.user, insight_id='a')
        self.assertTrue(record.dismissed)
        self.assertEqual(record.created_at, AS_OF)

    def test_INS_004_same_id_for_different_users(self):
        """INS-004: Insight ids are unique per user, not globally."""
        other = User.objects.create_user(username='other', password='x')

        self.service.merge_insights([insight_snapshot('a')])
        InsightService(other).merge_insights([insight_snapshot('a')])

        self.assertEqual(SmartInsightRecord.objects.filter(insight_id='a').count(), 2)

    def test_INS_005_list_hides_dismissed_by_default(self):
        """INS-005: Dismissed insights only appear with include_dismissed."""
        self.service.merge_insights([insight_snapshot('a'), insight_snapshot('b')])
        self.service.dismiss_insight('b')

        self.assertEqual([i['id'] for i in self.service.list_insights()], ['a'])
        self.assertEqual(len(self.service.list_insights(include_dismissed=True)), 2)

    def test_INS_006_list_ordered_by_confidence(self):
        """INS-006: Highest confidence first."""
        self.service.merge_insights([
            insight_snapshot('low', confidence=60),
            insight_snapshot('high', confidence=95),
        ])

        self.assertEqual([i['id'] for i in self.service.list_insights()], ['high', 'low'])

    def test_INS_007_prune_keeps_dismissed(self):
        """INS-007: prune_stale drops undismissed rows not in keep_ids."""
        self.service.merge_insights([insight_snapshot('keep'), insight_snapshot('stale'), insight_snapshot('hidden')])
        self.service.dismiss_insight('hidden')

        removed = self.service.prune_stale(['keep'])

        self.assertEqual(removed, 1)
        remaining = set(SmartInsightRecord.objects.filter(user=self.user).values_list('insight_id', flat=True))
        self.assertEqual(remaining, {'keep', 'hidden'})

    def test_INS_008_remove_missing_insight(self):
        """INS-008: Removing an unknown id raises RecordNotFoundError."""
        from core.exceptions import RecordNotFoundError

        with self.assertRaises(RecordNotFoundError):
            self.service.remove_insight('ghost')


class InsightRefreshTestCase(TestCase):
    """DashboardService.refresh_insights end to end."""

    def setUp(self):
        self.user = User.objects.create_user(username='refreshuser', password='pass123')

    def test_INS_009_refresh_persists_engine_output(self):
        """INS-009: A struggling evening-only habit yields two stored insights."""
        habit = HabitFactory.create(self.user, optimal_times=['evening'])

        result = DashboardService(self.user).refresh_insights(as_of=AS_OF)

        ids = {i['id'] for i in result['insights']}
        self.assertEqual(ids, {f'habit-struggling-{habit.habit_id}', 'morning-routine-missing'})
        self.assertEqual(result['counts'], {'created': 2, 'updated': 0, 'removed': 0})

    def test_INS_010_refresh_twice_does_not_duplicate(self):
        """INS-010: Second refresh updates instead of creating."""
        HabitFactory.create(self.user, optimal_times=['evening'])
        service = DashboardService(self.user)

        service.refresh_insights(as_of=AS_OF)
        result = service.refresh_insights(as_of=AS_OF + timedelta(hours=1))

        self.assertEqual(result['counts'], {'created': 0, 'updated': 2, 'removed': 0})
        self.assertEqual(SmartInsightRecord.objects.filter(user=self.user).count(), 2)

    def test_INS_011_refresh_prunes_resolved_insight(self):
        """INS-011: Once a habit recovers its struggling insight is removed."""
        habit = HabitFactory.create(self.user, optimal_times=['morning'])
        service = DashboardService(self.user)
        service.refresh_insights(as_of=AS_OF)

        habit.completed_days = week(*WEEKDAYS)
        habit.save()
        result = service.refresh_insights(as_of=AS_OF)

        ids = [i['id'] for i in result['insights']]
        self.assertEqual(ids, [f'habit-success-{habit.habit_id}'])
        self.assertEqual(result['counts']['removed'], 1)


class InsightEndpointTests(BaseAPITestCase):
    """Tests for /api/v1/insights/*."""

    def test_INS_012_refresh_dismiss_and_list(self):
        """INS-012: Refresh, dismiss one, list hides it."""
        self.create_habit(optimal_times=['evening'])

        data = self.assertSuccess(self.post(f'{API}/insights/refresh/'))
        self.assertEqual(len(data['data']['insights']), 2)

        self.assertSuccess(self.post(f'{API}/insights/morning-routine-missing/dismiss/'))

        listed = self.assertSuccess(self.get(f'{API}/insights/'))['data']['insights']
        self.assertNotIn('morning-routine-missing', [i['id'] for i in listed])
        everything = self.assertSuccess(self.get(f'{API}/insights/?include_dismissed=1'))['data']['insights']
        self.assertIn('morning-routine-missing', [i['id'] for i in everything])

    def test_INS_013_delete_insight(self):
        """INS-013: DELETE removes the row; a second DELETE is 404."""
        InsightService(self.user).merge_insights([insight_snapshot('habit-overload')])

        self.assertSuccess(self.delete(f'{API}/insights/habit-overload/'))

        self.assertNotFound(self.delete(f'{API}/insights/habit-overload/'))

    def test_INS_014_refresh_disabled_by_flag(self):
        """INS-014: With smart_insights off, refresh returns 400 INTEGRATION_DISABLED."""
        set_flag_override(FLAG_SMART_INSIGHTS, False)
        self.addCleanup(clear_flag_override, FLAG_SMART_INSIGHTS)

        self.assertError(self.post(f'{API}/insights/refresh/'), 400, code='INTEGRATION_DISABLED')
        self.assertFalse(SmartInsightRecord.objects.filter(user=self.user).exists())
