"""
Custom permissions for role-based access
"""
from rest_framework import permissions

from .models import Role


class IsAdmin(permissions.BasePermission):
    """Permission check for admin role"""
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.role == Role.ADMIN
        )


class IsTenantUser(permissions.BasePermission):
    """Any authenticated user that belongs to an organization"""

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            getattr(request.user, 'organization_id', None) is not None
        )
