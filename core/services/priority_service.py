"""
Weekly Priority Service

CRUD and completion toggle for the user's weekly priorities.
"""
import logging
from typing import Dict, List, Optional

from core.models import Priority
from core.exceptions import RecordNotFoundError
from core.serializers import PrioritySerializer, validate_input, priority_to_dict

logger = logging.getLogger(__name__)


class PriorityService:
    """
    Service for managing Priority records.
    """

    def __init__(self, user):
        self.user = user

    def _get(self, priority_id: str) -> Priority:
        try:
            return Priority.objects.get(priority_id=priority_id, user=self.user)
        except Priority.DoesNotExist:
            raise RecordNotFoundError('priority', priority_id)

    def list_priorities(self, completed: Optional[bool] = None) -> List[Dict]:
        """Newest first; optionally only completed or only open priorities."""
        queryset = Priority.objects.filter(user=self.user)
        if completed is not None:
            queryset = queryset.filter(completed=completed)
        return [priority_to_dict(p) for p in queryset]

    def get_priority(self, priority_id: str) -> Dict:
        return priority_to_dict(self._get(priority_id))

    def create_priority(self, data: Dict) -> Dict:
        validated = validate_input(PrioritySerializer, data)
        priority = Priority.objects.create(user=self.user, **validated)

        logger.info(f"Priority {priority.priority_id} created for user {self.user.id}")
        return priority_to_dict(priority)

    def update_priority(self, priority_id: str, data: Dict, partial: bool = True) -> Dict:
        priority = self._get(priority_id)
        validated = validate_input(PrioritySerializer, data, partial=partial)

        for field, value in validated.items():
            setattr(priority, field, value)
        priority.save()

        return priority_to_dict(priority)

    def toggle_priority(self, priority_id: str) -> Dict:
        """Flip the completed flag."""
        priority = self._get(priority_id)
        priority.completed = not priority.completed
        priority.save(update_fields=['completed', 'updated_at'])
        return priority_to_dict(priority)

    def delete_priority(self, priority_id: str) -> Dict:
        priority = self._get(priority_id)
        text = priority.text
        priority.delete()

        logger.info(f"Priority {priority_id} deleted for user {self.user.id}")
        return {'id': priority_id, 'text': text}
