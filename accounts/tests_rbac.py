"""
Minimal RBAC tests: role-based access control.
- Member token hitting admin endpoints returns 403
- Admin sees only their own organization
- Members read and edit only their own record
"""
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Role, User
from accounts.tokens import issue_token
from core.models import Organization


class RBACTests(TestCase):
    def setUp(self):
        self.org = Organization.objects.create(name="Test Org")
        self.client = APIClient()

        self.admin = User.objects.create_user(
            email="admin@test.io",
            password="pass1234",
            unique_id="ADM",
            display_name="Admin",
            role=Role.ADMIN,
            organization=self.org,
        )
        self.member = User.objects.create_user(
            email="member@test.io",
            password="pass1234",
            unique_id="MEM",
            display_name="Member",
            role=Role.MEMBER,
            organization=self.org,
        )
        self.other_member = User.objects.create_user(
            email="other@test.io",
            password="pass1234",
            unique_id="OTH",
            display_name="Other Member",
            role=Role.MEMBER,
            organization=self.org,
        )

        self.other_org = Organization.objects.create(name="Other Org")
        self.stranger = User.objects.create_user(
            email="stranger@test.io",
            password="pass1234",
            unique_id="STR",
            display_name="Stranger",
            role=Role.MEMBER,
            organization=self.other_org,
        )

    def _auth_header(self, user: User) -> dict:
        return {"HTTP_AUTHORIZATION": f"Bearer {issue_token(user)}"}

    def test_unauthenticated_returns_401(self):
        res = self.client.get("/api/users/")
        self.assertEqual(res.status_code, 401)

    def test_member_hitting_admin_endpoint_returns_403(self):
        self.client.credentials(**self._auth_header(self.member))
        self.assertEqual(self.client.get("/api/users/").status_code, 403)
        self.assertEqual(self.client.get("/api/pending-users/").status_code, 403)
        res = self.client.post(f"/api/users/{self.other_member.pk}/role/", {"role": "admin"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_admin_lists_own_organization_paginated(self):
        self.client.credentials(**self._auth_header(self.admin))
        res = self.client.get("/api/users/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 3)
        emails = {u["email"] for u in res.data["results"]}
        self.assertNotIn("stranger@test.io", emails)

    def test_admin_filters_by_role_and_search(self):
        self.client.credentials(**self._auth_header(self.admin))
        res = self.client.get("/api/users/?role=admin")
        self.assertEqual([u["id"] for u in res.data["results"]], [self.admin.pk])
        res = self.client.get("/api/users/?search=other")
        self.assertEqual([u["id"] for u in res.data["results"]], [self.other_member.pk])

    def test_admin_requesting_other_tenant_user_returns_404(self):
        self.client.credentials(**self._auth_header(self.admin))
        res = self.client.get(f"/api/users/{self.stranger.pk}/")
        self.assertEqual(res.status_code, 404)

    def test_member_reads_own_record(self):
        self.client.credentials(**self._auth_header(self.member))
        res = self.client.get(f"/api/users/{self.member.pk}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["email"], "member@test.io")
        self.assertNotIn("password", res.data)

    def test_member_patching_other_member_returns_403(self):
        self.client.credentials(**self._auth_header(self.member))
        res = self.client.patch(f"/api/users/{self.other_member.pk}/", {"displayName": "x"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_admin_creates_member_in_own_organization(self):
        self.client.credentials(**self._auth_header(self.admin))
        res = self.client.post("/api/users/", {
            "email": "new@test.io",
            "uniqueId": "NEW",
            "password": "pass1234",
            "displayName": "New",
        }, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        created = User.objects.get(email="new@test.io")
        self.assertEqual(created.organization_id, self.org.pk)
        self.assertEqual(created.referring_admin, self.admin)

    def test_last_admin_protected_over_api(self):
        self.client.credentials(**self._auth_header(self.admin))
        res = self.client.post(f"/api/users/{self.admin.pk}/role/", {"role": "member"}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "sole_administrator_protected")
        res = self.client.delete(f"/api/users/{self.admin.pk}/")
        self.assertEqual(res.status_code, 409)
