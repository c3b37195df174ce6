"""
Authentication backend for email logins.

Email is only unique inside an organization, so the lookup is global and
case-insensitive, and the first account whose credential verifies wins.
"""
from django.contrib.auth.backends import ModelBackend

from .credentials import burn_hash_cycle, verify_password
from .models import User


class TenantEmailBackend(ModelBackend):

    def authenticate(self, request, email=None, password=None, **kwargs):
        if email is None:
            # Django admin login passes the email as username.
            email = kwargs.get('username') or kwargs.get(User.USERNAME_FIELD)
        if not email or password is None:
            return None
        candidates = list(
            User.objects.with_identity(email=email).select_related('organization').order_by('created_at')
        )
        if not candidates:
            burn_hash_cycle(password)
            return None
        for user in candidates:
            if verify_password(password, user.password) and self.user_can_authenticate(user):
                return user
        return None
