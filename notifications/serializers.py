"""
Serializers for notifications.
"""
from rest_framework import serializers

from notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    assignmentId = serializers.IntegerField(source='assignment_id', read_only=True, allow_null=True)
    deliveryStatus = serializers.CharField(source='delivery_status', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id',
            'kind',
            'subject',
            'message',
            'assignmentId',
            'deliveryStatus',
            'isRead',
            'createdAt',
        ]
        read_only_fields = fields
