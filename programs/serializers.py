"""
Serializers for programs app
"""
from rest_framework import serializers

from .models import Program, Task


class ProgramSerializer(serializers.ModelSerializer):
    organizationId = serializers.CharField(source='organization_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Program
        fields = ['id', 'name', 'description', 'organizationId', 'createdAt']
        read_only_fields = ['id']

    def validate_name(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Program name is required.')
        return value


class TaskSerializer(serializers.ModelSerializer):
    """
    programId is validated against the caller's organization in the view;
    programName is read-only and derived from it.
    """
    requiredSkills = serializers.CharField(source='required_skills')
    programId = serializers.IntegerField(source='program_id', required=False, allow_null=True)
    programName = serializers.CharField(source='program_name', read_only=True, allow_null=True)
    organizationId = serializers.CharField(source='organization_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'requiredSkills', 'programId', 'programName',
            'deadline', 'organizationId', 'createdAt',
        ]
        read_only_fields = ['id']


class TaskFilterSerializer(serializers.Serializer):
    programId = serializers.IntegerField(source='program_id', required=False)
