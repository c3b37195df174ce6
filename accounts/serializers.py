"""
Serializers for accounts app
"""
from rest_framework import serializers

from .models import NotificationPreference, PendingUser, Role, User


class UserSerializer(serializers.ModelSerializer):
    """User serializer for API responses. Never exposes the password."""
    uniqueId = serializers.CharField(source='unique_id', read_only=True)
    displayName = serializers.CharField(source='display_name', read_only=True)
    userInterests = serializers.CharField(source='interests', read_only=True)
    notificationPreference = serializers.CharField(source='notification_preference', read_only=True)
    referringAdminId = serializers.CharField(source='referring_admin_id', read_only=True, allow_null=True)
    organizationId = serializers.CharField(source='organization_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'uniqueId', 'displayName', 'role', 'position', 'userInterests',
            'phone', 'notificationPreference', 'referringAdminId', 'organizationId', 'createdAt',
        ]
        read_only_fields = fields


class PendingUserSerializer(serializers.ModelSerializer):
    uniqueId = serializers.CharField(source='unique_id', read_only=True)
    displayName = serializers.CharField(source='display_name', read_only=True)
    userInterests = serializers.CharField(source='interests', read_only=True)
    notificationPreference = serializers.CharField(source='notification_preference', read_only=True)
    referringAdminId = serializers.CharField(source='referring_admin_id', read_only=True)
    organizationId = serializers.CharField(source='organization_id', read_only=True)
    submissionDate = serializers.DateTimeField(source='submitted_at', read_only=True)

    class Meta:
        model = PendingUser
        fields = [
            'id', 'email', 'uniqueId', 'displayName', 'role', 'position', 'userInterests',
            'phone', 'notificationPreference', 'referringAdminId', 'organizationId', 'submissionDate',
        ]
        read_only_fields = fields


class ProfileFieldsMixin(serializers.Serializer):
    position = serializers.CharField(required=False, allow_blank=True, max_length=255)
    userInterests = serializers.CharField(source='interests', required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=30)
    notificationPreference = serializers.ChoiceField(
        source='notification_preference', choices=NotificationPreference.choices, required=False,
    )


class RegisterSerializer(ProfileFieldsMixin):
    """Self registration: admin bootstraps a tenant, member needs a referral."""
    email = serializers.EmailField()
    uniqueId = serializers.CharField(source='unique_id', max_length=100)
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    displayName = serializers.CharField(source='display_name', required=False, allow_blank=True, max_length=255)
    role = serializers.ChoiceField(choices=Role.choices, default=Role.MEMBER)
    companyName = serializers.CharField(source='company_name', required=False, allow_blank=True, max_length=255)
    referringAdminId = serializers.CharField(source='referring_admin_id', required=False, allow_blank=True)


class MemberCreateSerializer(ProfileFieldsMixin):
    """Admin-created member of the admin's own organization."""
    email = serializers.EmailField()
    uniqueId = serializers.CharField(source='unique_id', max_length=100)
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    displayName = serializers.CharField(source='display_name', required=False, allow_blank=True, max_length=255)


class UserUpdateSerializer(ProfileFieldsMixin):
    email = serializers.EmailField(required=False)
    uniqueId = serializers.CharField(source='unique_id', required=False, max_length=100)
    displayName = serializers.CharField(source='display_name', required=False, max_length=255)
    role = serializers.ChoiceField(choices=Role.choices, required=False)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)


class ApproveSerializer(ProfileFieldsMixin):
    role = serializers.ChoiceField(choices=Role.choices, default=Role.MEMBER)
    displayName = serializers.CharField(source='display_name', required=False, allow_blank=True, max_length=255)


class LoginSerializer(serializers.Serializer):
    """Login serializer"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(source='current_password', write_only=True)
    newPassword = serializers.CharField(source='new_password', write_only=True)


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    newPassword = serializers.CharField(source='new_password', write_only=True)


class LoginResponseSerializer(serializers.Serializer):
    """Login response serializer"""
    accessToken = serializers.CharField()
    user = UserSerializer()
