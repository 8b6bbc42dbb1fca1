"""
Smart Insights Engine Package

Rule-based advisory notes and time-of-day suggestions derived from a
dashboard snapshot.

No AI/ML - purely deterministic rules.
"""
from core.behavioral.insights_engine import (
    INSIGHT_RULES,
    generate_insights,
)
from core.behavioral.scheduler import (
    ScheduleSuggestion,
    generate_schedule,
)

__all__ = [
    'INSIGHT_RULES',
    'generate_insights',
    'ScheduleSuggestion',
    'generate_schedule',
]
