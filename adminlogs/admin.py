from django.contrib import admin

from .models import AdminLog


@admin.register(AdminLog)
class AdminLogAdmin(admin.ModelAdmin):
    list_display = ['admin_display_name', 'organization', 'created_at']
    list_filter = ['organization']
    search_fields = ['log_text', 'admin_display_name']
    readonly_fields = ['created_at']
