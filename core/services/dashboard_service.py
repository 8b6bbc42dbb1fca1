"""
Dashboard Service

Central service for dashboard data aggregation:
- builds an immutable snapshot of the user's records
- runs the weekly statistics engine over it
- runs the insight rules and merges the results into the insight store
"""
import logging
from datetime import datetime
from typing import Dict, Optional

from django.contrib.auth.models import User
from marshmallow import ValidationError as SchemaValidationError

from core import analytics
from core.behavioral import generate_insights
from core.exceptions import ValidationError as AppValidationError
from core.models import Habit, Priority, DailyTask, SmartInsight as SmartInsightRecord
from core.schemas import DashboardSnapshotSchema
from core.serializers import habit_to_dict, priority_to_dict, daily_task_to_dict, insight_to_dict
from core.services.insight_service import InsightService
from core.snapshot import DashboardSnapshot
from core.utils.feature_flags import FLAG_SMART_INSIGHTS, ensure_feature_enabled

logger = logging.getLogger(__name__)


def load_snapshot(payload: Dict) -> DashboardSnapshot:
    """
    Normalise a raw payload into a DashboardSnapshot.

    Raises:
        ValidationError: for the first invalid field
    """
    try:
        return DashboardSnapshotSchema().load(payload)
    except SchemaValidationError as e:
        field, messages = _first_schema_error(e.messages)
        raise AppValidationError(field, messages)


def _first_schema_error(messages, prefix=''):
    # marshmallow nests errors as {field: {index: {field: [msg]}}}
    field, detail = next(iter(messages.items()))
    path = f"{prefix}.{field}" if prefix else str(field)
    if isinstance(detail, dict):
        return _first_schema_error(detail, path)
    return path, str(detail[0] if isinstance(detail, list) else detail)


def compute_from_payload(payload: Dict, as_of: Optional[datetime] = None) -> Dict:
    """
    Stats and insights for a client-supplied snapshot. Nothing is persisted.
    """
    snapshot = load_snapshot(payload)
    return {
        'stats': analytics.compute_weekly_stats(snapshot).to_dict(),
        'insights': [insight.to_dict() for insight in generate_insights(snapshot, as_of)],
    }


class DashboardService:
    """
    Service for aggregating dashboard data for one user.
    """

    def __init__(self, user: User):
        self.user = user

    def _raw_payload(self) -> Dict:
        return {
            'priorities': [priority_to_dict(p) for p in Priority.objects.filter(user=self.user)],
            'habits': [habit_to_dict(h) for h in Habit.objects.filter(user=self.user)],
            'daily_tasks': [daily_task_to_dict(t) for t in DailyTask.objects.filter(user=self.user)],
            'insights': [insight_to_dict(i) for i in SmartInsightRecord.objects.filter(user=self.user)],
        }

    def build_snapshot(self) -> DashboardSnapshot:
        """Read-only copy of every record the user owns."""
        return load_snapshot(self._raw_payload())

    def get_weekly_stats(self) -> Dict:
        return analytics.compute_weekly_stats(self.build_snapshot()).to_dict()

    def refresh_insights(self, as_of: Optional[datetime] = None) -> Dict:
        """
        Re-run the insight rules and merge the result into the store.

        Undismissed insights whose rule no longer fires are removed.
        """
        ensure_feature_enabled(FLAG_SMART_INSIGHTS, self.user)

        insights = generate_insights(self.build_snapshot(), as_of)
        store = InsightService(self.user)
        counts = store.merge_insights(insights)
        counts['removed'] = store.prune_stale(insight.id for insight in insights)

        logger.info(
            f"Insights refreshed for user {self.user.id}: "
            f"{counts['created']} created, {counts['updated']} updated, {counts['removed']} removed"
        )
        return {
            'counts': counts,
            'insights': store.list_insights(),
        }

    def get_full_dashboard(self) -> Dict:
        """
        Complete dashboard payload in one call: records plus weekly stats.
        """
        payload = self._raw_payload()
        snapshot = load_snapshot(payload)
        stats = analytics.compute_weekly_stats(snapshot)

        return {
            'priorities': payload['priorities'],
            'habits': payload['habits'],
            'daily_tasks': payload['daily_tasks'],
            'insights': [insight.to_dict() for insight in stats.ai_insights],
            'stats': stats.to_dict(),
        }
