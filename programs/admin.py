"""
Admin configuration for programs app
"""
from django.contrib import admin

from .models import Program, Task


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'created_at']
    list_filter = ['organization']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'program_name', 'deadline', 'organization', 'created_at']
    list_filter = ['organization', 'program']
    search_fields = ['title', 'required_skills', 'program_name']
    readonly_fields = ['created_at']
    ordering = ['-created_at']
