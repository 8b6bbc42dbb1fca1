"""
Smart Insight Store

Persists engine output per user. Insertion is idempotent by
(user, insight_id): re-running the engine updates the stored text and
confidence but never creates a second row, and never clears a dismissal.
"""
import logging
from typing import Dict, Iterable, List

from django.db import transaction

from core.models import SmartInsight as SmartInsightRecord
from core.snapshot import SmartInsight
from core.exceptions import RecordNotFoundError
from core.serializers import insight_to_dict

logger = logging.getLogger(__name__)

# Fields refreshed from the engine on every merge
_CONTENT_FIELDS = ('type', 'title', 'description', 'actionable', 'action', 'confidence', 'category')


class InsightService:
    """
    Service for stored SmartInsight records.
    """

    def __init__(self, user):
        self.user = user

    def _get(self, insight_id: str) -> SmartInsightRecord:
        try:
            return SmartInsightRecord.objects.get(insight_id=insight_id, user=self.user)
        except SmartInsightRecord.DoesNotExist:
            raise RecordNotFoundError('insight', insight_id)

    def list_insights(self, include_dismissed: bool = False) -> List[Dict]:
        """Ordered by confidence (high first), then newest."""
        queryset = SmartInsightRecord.objects.filter(user=self.user)
        if not include_dismissed:
            queryset = queryset.filter(dismissed=False)
        return [insight_to_dict(i) for i in queryset]

    def merge_insights(self, insights: Iterable[SmartInsight]) -> Dict[str, int]:
        """
        Upsert engine output by insight id.

        Returns:
            {'created': n, 'updated': n}
        """
        created = updated = 0
        with transaction.atomic():
            for insight in insights:
                defaults = {field: getattr(insight, field) for field in _CONTENT_FIELDS}
                record, was_created = SmartInsightRecord.objects.get_or_create(
                    user=self.user,
                    insight_id=insight.id,
                    defaults={**defaults, 'created_at': insight.created_at},
                )
                if was_created:
                    created += 1
                    continue
                for field, value in defaults.items():
                    setattr(record, field, value)
                record.save(update_fields=list(_CONTENT_FIELDS) + ['updated_at'])
                updated += 1

        return {'created': created, 'updated': updated}

    def prune_stale(self, keep_ids: Iterable[str]) -> int:
        """
        Delete undismissed insights whose rule no longer fires.

        Dismissed rows are kept so a dismissal survives later refreshes.
        """
        deleted, _ = (
            SmartInsightRecord.objects
            .filter(user=self.user, dismissed=False)
            .exclude(insight_id__in=list(keep_ids))
            .delete()
        )
        return deleted

    def dismiss_insight(self, insight_id: str) -> Dict:
        """Mark as dismissed. The row stays in the store."""
        record = self._get(insight_id)
        if not record.dismissed:
            record.dismissed = True
            record.save(update_fields=['dismissed', 'updated_at'])
            logger.info(f"Insight {insight_id} dismissed by user {self.user.id}")
        return insight_to_dict(record)

    def remove_insight(self, insight_id: str) -> Dict:
        record = self._get(insight_id)
        record.delete()
        logger.info(f"Insight {insight_id} removed by user {self.user.id}")
        return {'id': insight_id}
