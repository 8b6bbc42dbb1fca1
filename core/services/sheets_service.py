"""
Google Sheets Sync Gateway

Exports a flattened view of the dashboard to a spreadsheet and reads it back.

Sheet layout (worksheet "Dashboard" by default):

    Type       | Name | Status              | Day/Date   | Created
    Priority   | text | Completed / Pending | created    | created
    Habit      | name | n/7                 | Weekly     | N/A
    Daily Task | text | Completed / Pending | day        | created

Dates are ISO YYYY-MM-DD. Authorisation uses the Google OAuth tokens that
django-allauth stored for the user's social account.
"""
import logging
from typing import Dict, List

import gspread
import requests
from allauth.socialaccount.models import SocialToken
from django.conf import settings
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials

from core.exceptions import SheetsSyncError
from core.models import Habit, Priority, DailyTask
from core.snapshot import DashboardSnapshot
from core.utils.constants import (
    SHEET_HEADER,
    SHEET_TYPE_PRIORITY,
    SHEET_TYPE_HABIT,
    SHEET_TYPE_TASK,
    SHEET_STATUS_COMPLETED,
    SHEET_STATUS_PENDING,
    SHEET_CLEAR_RANGE,
    SHEET_READ_RANGE,
    GOOGLE_SHEETS_SCOPES,
    DAYS_PER_WEEK,
    WEEKDAYS,
)
from core.utils.feature_flags import FLAG_GOOGLE_SHEETS_SYNC, ensure_feature_enabled

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = 'https://oauth2.googleapis.com/token'

# Errors from gspread / google-auth that mean "the upstream call failed"
UPSTREAM_ERRORS = (gspread.exceptions.GSpreadException, GoogleAuthError, requests.RequestException)


def _status(completed: bool) -> str:
    return SHEET_STATUS_COMPLETED if completed else SHEET_STATUS_PENDING


def _lowered(values) -> set:
    return {value.lower() for value in values}


def _task_day(value: str) -> str:
    if value.lower() in WEEKDAYS:
        return value.lower()
    return value or 'Today'


def build_sheet_rows(snapshot: DashboardSnapshot) -> List[List[str]]:
    """Header row followed by priorities, habits and daily tasks, in that order."""
    rows = [list(SHEET_HEADER)]

    for priority in snapshot.priorities:
        created = priority.created_at.date().isoformat()
        rows.append([SHEET_TYPE_PRIORITY, priority.text, _status(priority.completed), created, created])

    for habit in snapshot.habits:
        rows.append([SHEET_TYPE_HABIT, habit.name, f"{habit.completed_count}/{DAYS_PER_WEEK}", 'Weekly', 'N/A'])

    for task in snapshot.daily_tasks:
        rows.append([
            SHEET_TYPE_TASK,
            task.text,
            _status(task.completed),
            task.day,
            task.created_at.date().isoformat(),
        ])

    return rows


class SheetsService:
    """
    Push / pull / import against one user's spreadsheet.
    """

    def __init__(self, user, worksheet: str = None):
        self.user = user
        self.worksheet_name = worksheet or getattr(settings, 'GOOGLE_SHEETS_WORKSHEET', 'Dashboard')

    # ------------------------------------------------------------------
    # Authorisation
    # ------------------------------------------------------------------

    def get_credentials(self) -> Credentials:
        """
        OAuth credentials from the user's stored Google social token.

        Raises:
            SheetsSyncError: if the user never connected a Google account
        """
        token = (
            SocialToken.objects
            .filter(account__user=self.user, account__provider='google')
            .order_by('-id')
            .first()
        )
        if token is None:
            raise SheetsSyncError('authorize', 'No Google account connected')

        return Credentials(
            token=token.token,
            refresh_token=token.token_secret or None,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            scopes=GOOGLE_SHEETS_SCOPES,
        )

    def _worksheet(self, sheet_id: str, operation: str):
        ensure_feature_enabled(FLAG_GOOGLE_SHEETS_SYNC, self.user)
        try:
            client = gspread.authorize(self.get_credentials())
            return client.open_by_key(sheet_id).worksheet(self.worksheet_name)
        except UPSTREAM_ERRORS as e:
            logger.warning(f"Sheets {operation} could not open {sheet_id} for user {self.user.id}: {e}")
            raise SheetsSyncError(operation, str(e))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def push(self, sheet_id: str, snapshot: DashboardSnapshot) -> Dict:
        """Clear the worksheet and write the snapshot rows from A1."""
        rows = build_sheet_rows(snapshot)
        worksheet = self._worksheet(sheet_id, 'push')
        try:
            worksheet.batch_clear([SHEET_CLEAR_RANGE])
            worksheet.update(range_name='A1', values=rows, value_input_option='RAW')
        except UPSTREAM_ERRORS as e:
            logger.error(f"Sheets push to {sheet_id} failed for user {self.user.id}: {e}")
            raise SheetsSyncError('push', str(e))

        logger.info(f"Pushed {len(rows) - 1} rows to sheet {sheet_id} for user {self.user.id}")
        return {'sheet_id': sheet_id, 'rows_written': len(rows) - 1}

    def pull(self, sheet_id: str) -> List[List[str]]:
        """Raw rows of A1:E1000, header included."""
        worksheet = self._worksheet(sheet_id, 'pull')
        try:
            return worksheet.get(SHEET_READ_RANGE)
        except UPSTREAM_ERRORS as e:
            logger.error(f"Sheets pull from {sheet_id} failed for user {self.user.id}: {e}")
            raise SheetsSyncError('pull', str(e))

    def import_rows(self, rows: List[List[str]]) -> Dict[str, int]:
        """
        Create records for pulled rows.

        Skips the header, rows of unknown type and names the user already has
        (compared case-insensitively).
        Habit progress is not imported (the sheet only carries a count).
        """
        counts = {'priorities': 0, 'habits': 0, 'daily_tasks': 0, 'skipped': 0}

        existing = {
            SHEET_TYPE_PRIORITY: _lowered(Priority.objects.filter(user=self.user).values_list('text', flat=True)),
            SHEET_TYPE_HABIT: _lowered(Habit.objects.filter(user=self.user).values_list('name', flat=True)),
            SHEET_TYPE_TASK: _lowered(DailyTask.objects.filter(user=self.user).values_list('text', flat=True)),
        }

        for row in rows:
            cells = (list(row) + [''] * len(SHEET_HEADER))[:len(SHEET_HEADER)]
            row_type, name, status, day = (c.strip() for c in cells[:4])

            if cells == SHEET_HEADER or row_type not in existing or not name or name.lower() in existing[row_type]:
                counts['skipped'] += 1
                continue

            completed = status == SHEET_STATUS_COMPLETED
            if row_type == SHEET_TYPE_PRIORITY:
                Priority.objects.create(user=self.user, text=name, completed=completed)
                counts['priorities'] += 1
            elif row_type == SHEET_TYPE_HABIT:
                Habit(user=self.user, name=name).save()
                counts['habits'] += 1
            else:
                DailyTask.objects.create(user=self.user, text=name, completed=completed, day=_task_day(day))
                counts['daily_tasks'] += 1
            existing[row_type].add(name.lower())

        logger.info(f"Imported sheet rows for user {self.user.id}: {counts}")
        return counts

    def import_from_sheet(self, sheet_id: str) -> Dict[str, int]:
        return self.import_rows(self.pull(sheet_id))
