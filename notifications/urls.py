"""
URLs for notifications app.
"""
from django.urls import path

from notifications.views import (
    notification_mark_read_view,
    notifications_count_view,
    notifications_mark_all_read_view,
    notifications_view,
)

urlpatterns = [
    path('', notifications_view, name='notifications-list'),
    path('count/', notifications_count_view, name='notifications-count'),
    path('<int:notification_id>/read/', notification_mark_read_view, name='notification-mark-read'),
    path('mark-all-read/', notifications_mark_all_read_view, name='notifications-mark-all-read'),
]
