"""
Admin configuration for assignments app
"""
from django.contrib import admin

from .models import Assignment


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ['task_title', 'person_name', 'status', 'deadline', 'organization', 'created_at']
    list_filter = ['status', 'organization']
    search_fields = ['task_title', 'person_name', 'person__email']
    raw_id_fields = ['task', 'person', 'created_by']
    readonly_fields = ['task_title', 'person_name', 'created_at', 'updated_at']
    ordering = ['-created_at']
