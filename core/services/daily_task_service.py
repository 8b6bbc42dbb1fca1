"""
Daily Task Service

CRUD and completion toggle for tasks scoped to a weekday.
"""
import logging
from typing import Dict, List, Optional

from core.models import DailyTask
from core.exceptions import RecordNotFoundError
from core.serializers import DailyTaskSerializer, validate_input, daily_task_to_dict
from core.utils.constants import WEEKDAYS

logger = logging.getLogger(__name__)


class DailyTaskService:
    """
    Service for managing DailyTask records.
    """

    def __init__(self, user):
        self.user = user

    def _get(self, task_id: str) -> DailyTask:
        try:
            return DailyTask.objects.get(task_id=task_id, user=self.user)
        except DailyTask.DoesNotExist:
            raise RecordNotFoundError('task', task_id)

    def list_tasks(self, day: Optional[str] = None) -> List[Dict]:
        """
        Newest first.

        Args:
            day: only tasks for this day label; weekday names match case-insensitively
        """
        queryset = DailyTask.objects.filter(user=self.user)
        if day:
            day = day.strip()
            if day.lower() in WEEKDAYS:
                day = day.lower()
            queryset = queryset.filter(day=day)
        return [daily_task_to_dict(t) for t in queryset]

    def get_task(self, task_id: str) -> Dict:
        return daily_task_to_dict(self._get(task_id))

    def create_task(self, data: Dict) -> Dict:
        validated = validate_input(DailyTaskSerializer, data)
        task = DailyTask.objects.create(user=self.user, **validated)

        logger.info(f"Daily task {task.task_id} created for user {self.user.id} on {task.day}")
        return daily_task_to_dict(task)

    def update_task(self, task_id: str, data: Dict, partial: bool = True) -> Dict:
        task = self._get(task_id)
        validated = validate_input(DailyTaskSerializer, data, partial=partial)

        for field, value in validated.items():
            setattr(task, field, value)
        task.save()

        return daily_task_to_dict(task)

    def toggle_task(self, task_id: str) -> Dict:
        task = self._get(task_id)
        task.completed = not task.completed
        task.save(update_fields=['completed', 'updated_at'])
        return daily_task_to_dict(task)

    def set_suggested_time(self, task_id: str, time_of_day: str) -> Dict:
        task = self._get(task_id)
        task.suggested_time = time_of_day
        task.save(update_fields=['suggested_time', 'updated_at'])
        return daily_task_to_dict(task)

    def delete_task(self, task_id: str) -> Dict:
        task = self._get(task_id)
        text = task.text
        task.delete()

        logger.info(f"Daily task {task_id} deleted for user {self.user.id}")
        return {'id': task_id, 'text': text}
