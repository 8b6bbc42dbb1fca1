# core/utils/constants.py
"""
Central constants file for consistent choice values across the application.
Use these constants instead of hardcoded strings to prevent validation errors.
"""

# ============================================
# WEEKDAYS
# ============================================
MONDAY = 'monday'
TUESDAY = 'tuesday'
WEDNESDAY = 'wednesday'
THURSDAY = 'thursday'
FRIDAY = 'friday'
SATURDAY = 'saturday'
SUNDAY = 'sunday'

# Calendar order, used for habit grids and streak-opportunity scans
WEEKDAYS = (MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY)

# Reverse order, used by the current-streak scan (end of week backwards)
STREAK_SCAN_ORDER = tuple(reversed(WEEKDAYS))

DAYS_PER_WEEK = len(WEEKDAYS)


def empty_week():
    """Fresh completed_days map with every weekday unchecked."""
    return {day: False for day in WEEKDAYS}


# ============================================
# PRIORITY LEVELS
# ============================================
PRIORITY_LOW = 'low'
PRIORITY_MEDIUM = 'medium'
PRIORITY_HIGH = 'high'
PRIORITY_URGENT = 'urgent'

PRIORITY_LEVEL_CHOICES = [
    (PRIORITY_LOW, 'Low'),
    (PRIORITY_MEDIUM, 'Medium'),
    (PRIORITY_HIGH, 'High'),
    (PRIORITY_URGENT, 'Urgent'),
]

# Daily tasks do not use the "urgent" level
TASK_PRIORITY_CHOICES = PRIORITY_LEVEL_CHOICES[:3]

# ============================================
# HABIT DIFFICULTY
# ============================================
DIFFICULTY_EASY = 'easy'
DIFFICULTY_MEDIUM = 'medium'
DIFFICULTY_HARD = 'hard'

DIFFICULTY_CHOICES = [
    (DIFFICULTY_EASY, 'Easy'),
    (DIFFICULTY_MEDIUM, 'Medium'),
    (DIFFICULTY_HARD, 'Hard'),
]

DEFAULT_HABIT_MINUTES = 15

# Time-of-day slots for habit optimal_times and task suggested_time
TIME_OF_DAY_CHOICES = [
    ('early-morning', 'Early Morning'),
    ('morning', 'Morning'),
    ('late-morning', 'Late Morning'),
    ('afternoon', 'Afternoon'),
    ('late-afternoon', 'Late Afternoon'),
    ('evening', 'Evening'),
    ('night', 'Night'),
]

# Suggestions that can be applied to a stored record
SCHEDULE_TARGET_CHOICES = [
    ('habit', 'Habit'),
    ('task', 'Daily Task'),
]

# Clock time each slot starts at
TIME_SLOT_CLOCK = {
    'early-morning': '06:00',
    'morning': '08:00',
    'late-morning': '10:00',
    'afternoon': '14:00',
    'late-afternoon': '16:00',
    'evening': '18:00',
    'night': '20:00',
}

# ============================================
# INSIGHTS
# ============================================
INSIGHT_TYPE_CHOICES = [
    ('habit', 'Habit'),
    ('priority', 'Priority'),
    ('task', 'Task'),
    ('goal', 'Goal'),
    ('general', 'General'),
]

INSIGHT_CATEGORY_PERFORMANCE = 'performance'
INSIGHT_CATEGORY_TIMING = 'timing'
INSIGHT_CATEGORY_STREAK = 'streak'
INSIGHT_CATEGORY_PRODUCTIVITY = 'productivity'
INSIGHT_CATEGORY_WARNING = 'warning'

INSIGHT_CATEGORY_CHOICES = [
    (INSIGHT_CATEGORY_PERFORMANCE, 'Performance'),
    (INSIGHT_CATEGORY_TIMING, 'Timing'),
    (INSIGHT_CATEGORY_STREAK, 'Streak'),
    (INSIGHT_CATEGORY_PRODUCTIVITY, 'Productivity'),
    (INSIGHT_CATEGORY_WARNING, 'Warning'),
]

# ============================================
# PRODUCTIVITY TREND
# ============================================
TREND_INCREASING = 'increasing'
TREND_DECREASING = 'decreasing'
TREND_STABLE = 'stable'

TREND_UPPER_THRESHOLD = 75
TREND_LOWER_THRESHOLD = 50

# ============================================
# GOOGLE SHEETS
# ============================================
SHEET_HEADER = ['Type', 'Name', 'Status', 'Day/Date', 'Created']
SHEET_TYPE_PRIORITY = 'Priority'
SHEET_TYPE_HABIT = 'Habit'
SHEET_TYPE_TASK = 'Daily Task'
SHEET_STATUS_COMPLETED = 'Completed'
SHEET_STATUS_PENDING = 'Pending'
SHEET_CLEAR_RANGE = 'A1:Z1000'
SHEET_READ_RANGE = 'A1:E1000'

GOOGLE_SHEETS_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]
