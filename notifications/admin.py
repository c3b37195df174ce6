"""
Admin configuration for notifications app
"""
from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['kind', 'recipient_email', 'delivery_status', 'is_read', 'organization', 'created_at']
    list_filter = ['kind', 'delivery_status', 'is_read']
    search_fields = ['recipient_email', 'subject']
    raw_id_fields = ['recipient', 'assignment']
    readonly_fields = ['created_at', 'sent_at', 'error']
    ordering = ['-created_at']
