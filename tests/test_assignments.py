"""
Assignment lifecycle: creation snapshot, who may move which status, and the
terminal completed state.
"""
from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.utils import timezone

from accounts.models import Role
from assignments import services
from assignments.models import Assignment, AssignmentStatus
from core.exceptions import DuplicateAssignment, Forbidden, NotFound, ValidationError
from notifications.models import Notification
from programs.models import Task
from tests.base import TenantFixturesMixin


class AssignmentFixturesMixin(TenantFixturesMixin):

    def make_task(self, org, title="Write report", **extra):
        extra.setdefault("description", "Quarterly numbers")
        extra.setdefault("required_skills", "excel")
        return Task.objects.create(organization=org, title=title, **extra)

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN)
        self.member = self.make_user(self.org, "member@x.com", display_name="Mary")
        self.other_member = self.make_user(self.org, "other@x.com")
        self.task = self.make_task(self.org)


class CreateAssignmentTests(AssignmentFixturesMixin, TestCase):

    def test_snapshot_and_defaults(self):
        deadline = timezone.now() + timedelta(days=7)
        self.task.deadline = deadline
        self.task.save()

        assignment = services.create_assignment(self.admin, self.task.pk, self.member.pk, justification="  fits  ")
        self.assertEqual(assignment.status, AssignmentStatus.PENDING_ACCEPTANCE)
        self.assertEqual(assignment.task_title, "Write report")
        self.assertEqual(assignment.person_name, "Mary")
        self.assertEqual(assignment.justification, "fits")
        self.assertEqual(assignment.deadline, deadline)
        self.assertEqual(assignment.created_by, self.admin)
        self.assertEqual(assignment.organization_id, self.org.pk)

    def test_snapshot_is_not_synced_after_renames(self):
        assignment = services.create_assignment(self.admin, self.task.pk, self.member.pk)
        self.task.title = "Renamed task"
        self.task.save()
        self.member.display_name = "Renamed person"
        self.member.save()

        assignment.refresh_from_db()
        self.assertEqual(assignment.task_title, "Write report")
        self.assertEqual(assignment.person_name, "Mary")

    def test_duplicate_pair_rejected(self):
        services.create_assignment(self.admin, self.task.pk, self.member.pk)
        with self.assertRaises(DuplicateAssignment):
            services.create_assignment(self.admin, self.task.pk, self.member.pk)

    def test_duplicate_caught_by_constraint(self):
        services.create_assignment(self.admin, self.task.pk, self.member.pk)
        with patch("assignments.services.assignment_exists", return_value=False):
            with self.assertRaises(DuplicateAssignment):
                services.create_assignment(self.admin, self.task.pk, self.member.pk)
        self.assertEqual(Assignment.objects.count(), 1)

    def test_member_cannot_create(self):
        with self.assertRaises(Forbidden):
            services.create_assignment(self.member, self.task.pk, self.other_member.pk)

    def test_task_or_person_of_other_tenant(self):
        other_org = self.make_org("Other")
        foreign_task = self.make_task(other_org)
        foreign_user = self.make_user(other_org, "stranger@other.com")
        with self.assertRaises(NotFound):
            services.create_assignment(self.admin, foreign_task.pk, self.member.pk)
        with self.assertRaises(NotFound):
            services.create_assignment(self.admin, self.task.pk, foreign_user.pk)

    def test_create_api(self):
        client = self.client_for(self.admin)
        res = client.post("/api/assignments/", {
            "taskId": self.task.pk,
            "personId": self.member.pk,
            "justification": "Has the skills",
        }, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["taskTitle"], "Write report")
        self.assertEqual(res.data["status"], AssignmentStatus.PENDING_ACCEPTANCE)

        res = client.post("/api/assignments/", {"taskId": self.task.pk, "personId": self.member.pk}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "duplicate_assignment")


class UpdateAssignmentTests(AssignmentFixturesMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.assignment = services.create_assignment(self.admin, self.task.pk, self.member.pk)

    def test_assignee_declines_and_admin_cannot_accept_for_them(self):
        declined = services.update_assignment(
            self.member, self.assignment.pk, status=AssignmentStatus.DECLINED_BY_USER,
        )
        self.assertEqual(declined.status, AssignmentStatus.DECLINED_BY_USER)

        with self.assertRaises(Forbidden):
            services.update_assignment(self.admin, self.assignment.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, AssignmentStatus.DECLINED_BY_USER)

    def test_member_cannot_touch_someone_elses_assignment(self):
        with self.assertRaises(Forbidden):
            services.update_assignment(
                self.other_member, self.assignment.pk, status=AssignmentStatus.ACCEPTED_BY_USER,
            )
        with self.assertRaises(Forbidden):
            services.get_assignment(self.other_member, self.assignment.pk)

    def test_assignee_cannot_approve_completion(self):
        with self.assertRaises(Forbidden):
            services.update_assignment(
                self.member, self.assignment.pk, status=AssignmentStatus.COMPLETED_ADMIN_APPROVED,
            )

    def test_full_lifecycle_ends_in_terminal_state(self):
        submitted_at = timezone.now()
        services.update_assignment(self.member, self.assignment.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        services.update_assignment(
            self.member, self.assignment.pk,
            status=AssignmentStatus.SUBMITTED_LATE,
            submission_date=submitted_at,
            delay_reason="  waited on data ",
        )
        done = services.update_assignment(
            self.admin, self.assignment.pk, status=AssignmentStatus.COMPLETED_ADMIN_APPROVED,
        )
        self.assertTrue(done.is_terminal)
        self.assertEqual(done.submission_date, submitted_at)
        self.assertEqual(done.delay_reason, "waited on data")

        with self.assertRaises(ValidationError) as ctx:
            services.update_assignment(self.member, self.assignment.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        self.assertEqual(ctx.exception.get_codes(), {"status": "assignment_completed"})
        with self.assertRaises(ValidationError):
            services.update_assignment(self.admin, self.assignment.pk, justification="reopen")

    def test_admin_may_move_own_assignment_freely(self):
        own = services.create_assignment(self.admin, self.task.pk, self.admin.pk)
        services.update_assignment(self.admin, own.pk, status=AssignmentStatus.SUBMITTED_ON_TIME)
        services.update_assignment(self.admin, own.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        own.refresh_from_db()
        self.assertEqual(own.status, AssignmentStatus.ACCEPTED_BY_USER)

    def test_only_admin_edits_justification_and_deadline(self):
        deadline = timezone.now() + timedelta(days=3)
        updated = services.update_assignment(
            self.admin, self.assignment.pk, justification=" new reason ", deadline=deadline,
        )
        self.assertEqual(updated.justification, "new reason")
        self.assertEqual(updated.deadline, deadline)
        with self.assertRaises(Forbidden):
            services.update_assignment(self.member, self.assignment.pk, justification="mine")

    def test_admin_cannot_set_assignee_fields(self):
        with self.assertRaises(Forbidden):
            services.update_assignment(self.admin, self.assignment.pk, delay_reason="none")

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValidationError):
            services.update_assignment(self.admin, self.assignment.pk, person_id=self.other_member.pk)

    def test_other_tenant_sees_nothing(self):
        outsider = self.make_user(self.make_org("Other"), "boss@other.com", role=Role.ADMIN)
        with self.assertRaises(NotFound):
            services.update_assignment(
                outsider, self.assignment.pk, status=AssignmentStatus.COMPLETED_ADMIN_APPROVED,
            )
        with self.assertRaises(NotFound):
            services.get_assignment(outsider, self.assignment.pk)
        with self.assertRaises(NotFound):
            services.delete_assignment(outsider, self.assignment.pk)

    def test_relaxed_transitions_by_default(self):
        updated = services.update_assignment(
            self.member, self.assignment.pk, status=AssignmentStatus.SUBMITTED_ON_TIME,
        )
        self.assertEqual(updated.status, AssignmentStatus.SUBMITTED_ON_TIME)

    @override_settings(ASSIGNMENT_STRICT_TRANSITIONS=True)
    def test_strict_transitions(self):
        with self.assertRaises(ValidationError) as ctx:
            services.update_assignment(self.member, self.assignment.pk, status=AssignmentStatus.SUBMITTED_ON_TIME)
        self.assertEqual(ctx.exception.get_codes(), {"status": "invalid_transition"})

        services.update_assignment(self.member, self.assignment.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        services.update_assignment(self.member, self.assignment.pk, status=AssignmentStatus.SUBMITTED_ON_TIME)

    def test_patch_api(self):
        client = self.client_for(self.member)
        res = client.patch(
            f"/api/assignments/{self.assignment.pk}/", {"status": "accepted_by_user"}, format="json",
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "accepted_by_user")

        res = self.client_for(self.other_member).patch(
            f"/api/assignments/{self.assignment.pk}/", {"status": "declined_by_user"}, format="json",
        )
        self.assertEqual(res.status_code, 403)


class ListAndDeleteAssignmentTests(AssignmentFixturesMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.mine = services.create_assignment(self.admin, self.task.pk, self.member.pk)
        self.theirs = services.create_assignment(self.admin, self.task.pk, self.other_member.pk)

    def test_member_lists_own_assignments_only(self):
        self.assertEqual(list(services.list_assignments(self.member)), [self.mine])
        res = self.client_for(self.member).get("/api/assignments/")
        self.assertEqual([a["id"] for a in res.data], [self.mine.pk])

    def test_admin_lists_organization_with_filters(self):
        self.assertEqual(set(services.list_assignments(self.admin)), {self.mine, self.theirs})
        self.assertEqual(list(services.list_assignments(self.admin, person_id=self.member.pk)), [self.mine])
        services.update_assignment(self.member, self.mine.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        self.assertEqual(
            list(services.list_assignments(self.admin, status=AssignmentStatus.ACCEPTED_BY_USER)),
            [self.mine],
        )

    def test_list_api_filters_by_query_params(self):
        client = self.client_for(self.admin)
        res = client.get(f"/api/assignments/?personId={self.other_member.pk}&taskId={self.task.pk}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual([a["id"] for a in res.data], [self.theirs.pk])

    def test_list_api_rejects_malformed_filters(self):
        client = self.client_for(self.admin)
        res = client.get("/api/assignments/?taskId=abc")
        self.assertEqual(res.status_code, 400)
        self.assertIn("taskId", res.data["errors"])
        res = client.get("/api/assignments/?personId=1x&status=done")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(set(res.data["errors"]), {"personId", "status"})

    def test_delete_removes_notifications(self):
        Notification.objects.create(
            organization=self.org,
            kind=Notification.KIND_TASK_PROPOSED,
            recipient=self.member,
            recipient_email=self.member.email,
            assignment=self.mine,
            subject="s",
            message="m",
        )
        services.delete_assignment(self.admin, self.mine.pk)
        self.assertFalse(Assignment.objects.filter(pk=self.mine.pk).exists())
        self.assertFalse(Notification.objects.filter(assignment_id=self.mine.pk).exists())

    def test_member_cannot_delete(self):
        with self.assertRaises(Forbidden):
            services.delete_assignment(self.member, self.mine.pk)
