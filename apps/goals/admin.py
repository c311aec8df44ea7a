from django.contrib import admin
from .models import Goal, GoalRecord


class GoalRecordInline(admin.TabularInline):
    model = GoalRecord
    extra = 0
    fields = ('record_type', 'title', 'progress_value', 'previous_value', 'record_date')
    readonly_fields = ('record_date',)


@admin.register(Goal)
class GoalAdmin(admin.ModelAdmin):
    list_display = ('title', 'parent', 'level', 'category', 'status', 'current_value', 'end_date')
    list_filter = ('status', 'category', 'progress_type', 'level')
    search_fields = ('title', 'description')
    raw_id_fields = ('parent',)
    inlines = [GoalRecordInline]


@admin.register(GoalRecord)
class GoalRecordAdmin(admin.ModelAdmin):
    list_display = ('goal', 'record_type', 'record_date')
    list_filter = ('record_type', 'record_date')
