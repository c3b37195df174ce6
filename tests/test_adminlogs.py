"""
Admin log API.
"""
from django.test import TestCase

from accounts import services
from accounts.models import Role
from adminlogs.models import AdminLog
from tests.base import TenantFixturesMixin


class AdminLogApiTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN, display_name="Ada")
        self.client = self.client_for(self.admin)

    def test_create_and_list(self):
        res = self.client.post("/api/admin-logs/", {
            "logText": "Quarterly review done",
            "imagePreviewUrl": "https://example.com/shot.png",
        }, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["adminDisplayName"], "Ada")
        self.assertEqual(res.data["adminId"], self.admin.pk)

        self.client.post("/api/admin-logs/", {"logText": "Second"}, format="json")
        res = self.client.get("/api/admin-logs/")
        self.assertEqual([log["logText"] for log in res.data], ["Second", "Quarterly review done"])

    def test_blank_text_rejected(self):
        res = self.client.post("/api/admin-logs/", {"logText": "   "}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(AdminLog.objects.exists())

    def test_members_and_other_tenants_excluded(self):
        member = self.make_user(self.org, "member@x.com")
        self.assertEqual(self.client_for(member).get("/api/admin-logs/").status_code, 403)

        AdminLog.objects.create(organization=self.org, admin=self.admin, admin_display_name="Ada", log_text="ours")
        outsider = self.make_user(self.make_org("Other"), "boss@other.com", role=Role.ADMIN)
        self.assertEqual(self.client_for(outsider).get("/api/admin-logs/").data, [])

    def test_entry_survives_admin_deletion(self):
        log = AdminLog.objects.create(organization=self.org, admin=self.admin, admin_display_name="Ada", log_text="x")
        second = self.make_user(self.org, "second@x.com", role=Role.ADMIN)
        services.delete_user(second, self.admin.pk)

        log.refresh_from_db()
        self.assertIsNone(log.admin_id)
        self.assertEqual(log.admin_display_name, "Ada")
