"""
Serializers for assignments app
"""
from rest_framework import serializers

from .models import Assignment, AssignmentStatus


class AssignmentSerializer(serializers.ModelSerializer):
    """taskTitle / personName are the snapshot taken at creation."""
    taskId = serializers.IntegerField(source='task_id', read_only=True)
    personId = serializers.IntegerField(source='person_id', read_only=True)
    taskTitle = serializers.CharField(source='task_title', read_only=True)
    personName = serializers.CharField(source='person_name', read_only=True)
    submissionDate = serializers.DateTimeField(source='submission_date', read_only=True)
    delayReason = serializers.CharField(source='delay_reason', read_only=True)
    createdBy = serializers.IntegerField(source='created_by_id', read_only=True, allow_null=True)
    organizationId = serializers.CharField(source='organization_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Assignment
        fields = [
            'id', 'taskId', 'personId', 'taskTitle', 'personName', 'justification', 'status',
            'deadline', 'submissionDate', 'delayReason', 'createdBy', 'organizationId', 'createdAt',
        ]
        read_only_fields = fields


class AssignmentCreateSerializer(serializers.Serializer):
    taskId = serializers.IntegerField(source='task_id')
    personId = serializers.IntegerField(source='person_id')
    justification = serializers.CharField(required=False, allow_blank=True, default='')
    deadline = serializers.DateTimeField(required=False, allow_null=True, default=None)


class AssignmentUpdateSerializer(serializers.Serializer):
    """Only the fields present in the request are applied."""
    status = serializers.ChoiceField(choices=AssignmentStatus.choices, required=False)
    submissionDate = serializers.DateTimeField(source='submission_date', required=False, allow_null=True)
    delayReason = serializers.CharField(source='delay_reason', required=False, allow_blank=True)
    justification = serializers.CharField(required=False, allow_blank=True)
    deadline = serializers.DateTimeField(required=False, allow_null=True)


class AssignmentFilterSerializer(serializers.Serializer):
    """Query params of the assignment list."""
    status = serializers.ChoiceField(choices=AssignmentStatus.choices, required=False)
    taskId = serializers.IntegerField(source='task_id', required=False)
    personId = serializers.IntegerField(source='person_id', required=False)
