"""
Admin configuration for accounts app
"""
from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import ReadOnlyPasswordHashField, UserCreationForm

from .models import PendingUser, TenantFounder, User


class UserAdminForm(forms.ModelForm):
    """
    Change form with proper password handling.
    Password is read-only (hash display only). Use "Change password" link to set new password.
    Plain text password must NEVER be editable here - that overwrites the hash and breaks login.
    """
    password = ReadOnlyPasswordHashField(
        label='Password',
        help_text=(
            'Raw passwords are not stored. Use the "Change password" link '
            'to set a new one.'
        ),
    )

    class Meta:
        model = User
        fields = '__all__'


class UserAddForm(UserCreationForm):

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('email', 'unique_id', 'display_name', 'role', 'organization')


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Custom User Admin"""
    form = UserAdminForm
    add_form = UserAddForm
    list_display = ['email', 'unique_id', 'display_name', 'role', 'organization', 'is_active', 'created_at']
    list_filter = ['role', 'is_active', 'is_staff', 'notification_preference', 'organization']
    search_fields = ['email', 'unique_id', 'display_name']
    ordering = ['-created_at']
    raw_id_fields = ['referring_admin']

    fieldsets = (
        (None, {'fields': ('organization', 'email', 'unique_id', 'password')}),
        ('Profile', {'fields': ('display_name', 'role', 'position', 'interests', 'phone',
                                'notification_preference', 'referring_admin')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('organization', 'email', 'unique_id', 'display_name', 'role',
                       'password1', 'password2', 'is_active', 'is_staff'),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login']


@admin.register(PendingUser)
class PendingUserAdmin(admin.ModelAdmin):
    list_display = ['email', 'unique_id', 'display_name', 'organization', 'referring_admin', 'submitted_at']
    list_filter = ['organization']
    search_fields = ['email', 'unique_id', 'display_name']
    exclude = ['password']
    raw_id_fields = ['referring_admin']


@admin.register(TenantFounder)
class TenantFounderAdmin(admin.ModelAdmin):
    list_display = ['email', 'unique_id', 'organization', 'created_at']
    search_fields = ['email', 'unique_id']
    readonly_fields = ['user', 'organization', 'email', 'unique_id', 'created_at']
