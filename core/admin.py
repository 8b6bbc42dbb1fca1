from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from core.models import Habit, Priority, DailyTask, SmartInsight


class OwnedRecordAdmin(SimpleHistoryAdmin):
    """Shows staff users only their own rows (superusers see everything)."""

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        return qs.filter(user=request.user)

    def save_model(self, request, obj, form, change):
        """Auto-assign user on create if not set"""
        if not change and not obj.user_id:
            obj.user = request.user
        super().save_model(request, obj, form, change)


@admin.register(Habit)
class HabitAdmin(OwnedRecordAdmin):
    list_display = ['name', 'user', 'difficulty', 'streak', 'longest_streak', 'created_at']
    list_filter = ['difficulty', 'category', 'created_at']
    search_fields = ['name', 'category']
    readonly_fields = ['habit_id', 'streak', 'longest_streak', 'created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('habit_id', 'user', 'name', 'category', 'difficulty', 'estimated_time')
        }),
        ('Week', {
            'fields': ('completed_days', 'streak', 'longest_streak')
        }),
        ('Relations', {
            'fields': ('chained_habits', 'prerequisite_habits', 'optimal_times'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Priority)
class PriorityAdmin(OwnedRecordAdmin):
    list_display = ['text', 'user', 'priority', 'completed', 'due_date', 'created_at']
    list_filter = ['completed', 'priority', 'created_at']
    search_fields = ['text', 'category']
    readonly_fields = ['priority_id', 'created_at', 'updated_at']


@admin.register(DailyTask)
class DailyTaskAdmin(OwnedRecordAdmin):
    list_display = ['text', 'user', 'day', 'completed', 'priority', 'ai_generated']
    list_filter = ['day', 'completed', 'priority', 'ai_generated']
    search_fields = ['text', 'category']
    readonly_fields = ['task_id', 'created_at', 'updated_at']


@admin.register(SmartInsight)
class SmartInsightAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'category', 'confidence', 'dismissed', 'created_at']
    list_filter = ['category', 'type', 'dismissed']
    search_fields = ['title', 'description', 'insight_id']
    readonly_fields = ['insight_id', 'created_at', 'updated_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        return qs.filter(user=request.user)
