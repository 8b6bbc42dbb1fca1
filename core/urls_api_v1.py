"""
API v1 URL Configuration.

Versioned endpoints for mobile and SPA clients. core.urls mounts the same
patterns under /api/v1/ and, unversioned, under /api/.
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from core import views_api, views_auth

app_name = 'api_v1'

urlpatterns = [
    # =========================================================================
    # HABITS
    # =========================================================================
    path('habits/', views_api.api_habits, name='habits'),
    # chain/unchain before <habit_id> so they are not captured as ids
    path('habits/chain/', views_api.api_habit_chain, name='habit_chain'),
    path('habits/unchain/', views_api.api_habit_unchain, name='habit_unchain'),
    path('habits/<str:habit_id>/', views_api.api_habit_detail, name='habit_detail'),
    path('habits/<str:habit_id>/toggle/<str:day>/', views_api.api_habit_toggle, name='habit_toggle'),
    path('habits/<str:habit_id>/streak/', views_api.api_habit_streak, name='habit_streak'),
    path(
        'habits/<str:habit_id>/prerequisites/<str:prerequisite_id>/',
        views_api.api_habit_prerequisite,
        name='habit_prerequisite'
    ),

    # =========================================================================
    # WEEKLY PRIORITIES
    # =========================================================================
    path('priorities/', views_api.api_priorities, name='priorities'),
    path('priorities/<str:priority_id>/', views_api.api_priority_detail, name='priority_detail'),
    path('priorities/<str:priority_id>/toggle/', views_api.api_priority_toggle, name='priority_toggle'),

    # =========================================================================
    # DAILY TASKS
    # =========================================================================
    path('tasks/', views_api.api_tasks, name='tasks'),
    path('tasks/<str:task_id>/', views_api.api_task_detail, name='task_detail'),
    path('tasks/<str:task_id>/toggle/', views_api.api_task_toggle, name='task_toggle'),

    # =========================================================================
    # SMART INSIGHTS
    # =========================================================================
    path('insights/', views_api.api_insights, name='insights'),
    path('insights/refresh/', views_api.api_insights_refresh, name='insights_refresh'),
    path('insights/<str:insight_id>/', views_api.api_insight_delete, name='insight_delete'),
    path('insights/<str:insight_id>/dismiss/', views_api.api_insight_dismiss, name='insight_dismiss'),

    # =========================================================================
    # STATS & DASHBOARD
    # =========================================================================
    path('stats/weekly/', views_api.api_weekly_stats, name='weekly_stats'),
    path('stats/compute/', views_api.api_stats_compute, name='stats_compute'),
    path('stats/streaks/', views_api.api_streaks, name='streaks'),
    path('dashboard/', views_api.api_dashboard, name='dashboard'),

    # =========================================================================
    # SMART SCHEDULER
    # =========================================================================
    path('schedule/', views_api.api_schedule, name='schedule'),
    path('schedule/apply/', views_api.api_schedule_apply, name='schedule_apply'),

    # =========================================================================
    # GOOGLE SHEETS
    # =========================================================================
    path('sheets/sync/', views_api.api_sheets_sync, name='sheets_sync'),
    path('sheets/import/', views_api.api_sheets_import, name='sheets_import'),

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================
    path('auth/google/', views_auth.api_google_auth, name='auth_google'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', views_auth.api_me, name='auth_me'),
    path('auth/logout/', views_auth.api_logout, name='auth_logout'),

    # =========================================================================
    # SYSTEM
    # =========================================================================
    path('health/', views_api.api_health, name='health'),
]
