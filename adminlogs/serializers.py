from rest_framework import serializers

from .models import AdminLog


class AdminLogSerializer(serializers.ModelSerializer):
    adminId = serializers.IntegerField(source='admin_id', read_only=True, allow_null=True)
    adminDisplayName = serializers.CharField(source='admin_display_name', read_only=True)
    logText = serializers.CharField(source='log_text')
    imagePreviewUrl = serializers.URLField(source='image_preview_url', required=False, allow_blank=True, max_length=1000)
    timestamp = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = AdminLog
        fields = ['id', 'adminId', 'adminDisplayName', 'logText', 'imagePreviewUrl', 'timestamp']

    def validate_logText(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Log text is required.')
        return value
