"""
Shared fixtures: organizations, users and authenticated API clients.
"""
from rest_framework.test import APIClient

from accounts.models import Role, User
from accounts.tokens import issue_token
from core.models import Organization

PASSWORD = "secure123"


class TenantFixturesMixin:

    def make_org(self, name="Acme"):
        return Organization.objects.create(name=name)

    def make_user(self, org, email, role=Role.MEMBER, password=PASSWORD, **extra):
        local = email.split("@")[0]
        extra.setdefault("unique_id", local.upper())
        extra.setdefault("display_name", local.title())
        return User.objects.create_user(
            email=email,
            password=password,
            role=role,
            organization=org,
            **extra,
        )

    def client_for(self, user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
        return client
