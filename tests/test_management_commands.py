"""
Maintenance commands: tenant integrity report and plain-text password repair.
"""
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounts.credentials import is_hashed, verify_password
from accounts.models import PendingUser, Role, User
from assignments.models import Assignment
from programs.models import Task
from tests.base import TenantFixturesMixin


class CheckTenantIntegrityTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN)
        self.member = self.make_user(self.org, "member@x.com")

    def _run(self, *args):
        out = StringIO()
        call_command("check_tenant_integrity", *args, stdout=out)
        return out.getvalue()

    def test_clean_database(self):
        self.assertIn("No integrity issues found.", self._run())

    def test_reports_organization_without_admin(self):
        self.make_org("Headless")
        self.assertIn("Organization without admin: Headless", self._run())

    def test_realigns_assignment_with_task_organization(self):
        other_org = self.make_org("Other")
        self.make_user(other_org, "boss@other.com", role=Role.ADMIN)
        task = Task.objects.create(organization=self.org, title="t", description="d", required_skills="s")
        assignment = Assignment.objects.create(
            organization=other_org, task=task, person=self.member, task_title="t", person_name="m",
        )

        output = self._run()
        self.assertIn("Assignments with org mismatch: 1", output)
        assignment.refresh_from_db()
        self.assertEqual(assignment.organization_id, other_org.pk)

        self.assertIn("Fixed 1 assignments", self._run("--apply"))
        assignment.refresh_from_db()
        self.assertEqual(assignment.organization_id, self.org.pk)
        self.assertIn("No integrity issues found.", self._run())

    def test_apply_skips_realignment_that_would_duplicate(self):
        other_org = self.make_org("Other")
        self.make_user(other_org, "boss@other.com", role=Role.ADMIN)
        task = Task.objects.create(organization=self.org, title="t", description="d", required_skills="s")
        Assignment.objects.create(
            organization=self.org, task=task, person=self.member, task_title="t", person_name="m",
        )
        stray = Assignment.objects.create(
            organization=other_org, task=task, person=self.member, task_title="t", person_name="m",
        )

        output = self._run("--apply")
        self.assertIn("Fixed 0 assignments", output)
        self.assertIn(f"Skipped 1 duplicate assignments (ids: {stray.pk})", output)
        stray.refresh_from_db()
        self.assertEqual(stray.organization_id, other_org.pk)

    def test_reports_pending_user_with_demoted_referrer(self):
        second = self.make_user(self.org, "second@x.com", role=Role.ADMIN)
        PendingUser.objects.create(
            organization=self.org, email="p@x.com", unique_id="P1", password="x",
            display_name="P", referring_admin=second,
        )
        User.objects.filter(pk=second.pk).update(role=Role.MEMBER)
        self.assertIn("ineligible referring admin: 1", self._run())


class RehashPlainPasswordsTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN)
        self.plain = self.make_user(self.org, "plain@x.com")
        User.objects.filter(pk=self.plain.pk).update(password="imported-pass")

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command("rehash_plain_passwords", "--dry-run", stdout=out)
        self.assertIn("Would fix User: plain@x.com", out.getvalue())
        self.plain.refresh_from_db()
        self.assertEqual(self.plain.password, "imported-pass")

    def test_rehash(self):
        hashed_before = User.objects.get(pk=self.admin.pk).password
        call_command("rehash_plain_passwords", stdout=StringIO())

        self.plain.refresh_from_db()
        self.assertTrue(is_hashed(self.plain.password))
        self.assertTrue(verify_password("imported-pass", self.plain.password))
        self.assertEqual(User.objects.get(pk=self.admin.pk).password, hashed_before)
