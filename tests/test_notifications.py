"""
Notification delivery: preferences, status fan-out, failed email, and the
in-app inbox.
"""
from unittest.mock import patch

from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.test import TestCase
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from rest_framework.test import APIClient

from accounts import services as account_services
from accounts.models import NotificationPreference, Role
from assignments import services
from assignments.models import Assignment, AssignmentStatus
from core.exceptions import Forbidden
from notifications.models import Notification
from programs.models import Task
from tests.base import PASSWORD, TenantFixturesMixin

EMAIL = NotificationPreference.EMAIL
PHONE = NotificationPreference.PHONE
NONE = NotificationPreference.NONE


class AssignmentNotificationTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN, notification_preference=EMAIL)
        self.task = Task.objects.create(
            organization=self.org, title="Write report", description="d", required_skills="s",
        )

    def _assign(self, person):
        with self.captureOnCommitCallbacks(execute=True):
            return services.create_assignment(self.admin, self.task.pk, person.pk)

    def _move(self, actor, assignment, status):
        with self.captureOnCommitCallbacks(execute=True):
            return services.update_assignment(actor, assignment.pk, status=status)

    def test_email_preference_gets_record_and_email(self):
        member = self.make_user(self.org, "m@x.com", notification_preference=EMAIL)
        assignment = self._assign(member)

        notification = Notification.objects.get(kind=Notification.KIND_TASK_PROPOSED)
        self.assertEqual(notification.recipient, member)
        self.assertEqual(notification.assignment, assignment)
        self.assertEqual(notification.delivery_status, Notification.STATUS_SENT)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["m@x.com"])
        self.assertIn("Write report", mail.outbox[0].subject)

    def test_phone_preference_gets_in_app_record_only(self):
        member = self.make_user(self.org, "m@x.com", notification_preference=PHONE)
        self._assign(member)

        notification = Notification.objects.get(kind=Notification.KIND_TASK_PROPOSED)
        self.assertEqual(notification.delivery_status, Notification.STATUS_IN_APP)
        self.assertEqual(len(mail.outbox), 0)

    def test_none_preference_is_skipped(self):
        member = self.make_user(self.org, "m@x.com", notification_preference=NONE)
        self._assign(member)
        self.assertFalse(Notification.objects.filter(recipient=member).exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_status_change_goes_to_referring_admin(self):
        second_admin = self.make_user(self.org, "second@x.com", role=Role.ADMIN, notification_preference=EMAIL)
        member = self.make_user(self.org, "m@x.com", referring_admin=self.admin)
        assignment = self._assign(member)

        self._move(member, assignment, AssignmentStatus.ACCEPTED_BY_USER)
        updates = Notification.objects.filter(kind=Notification.KIND_TASK_STATUS_UPDATE_ADMIN)
        self.assertEqual([n.recipient for n in updates], [self.admin])
        self.assertIn("accepted", updates[0].message)
        self.assertFalse(updates.filter(recipient=second_admin).exists())

    def test_status_change_without_referrer_goes_to_every_admin(self):
        second_admin = self.make_user(self.org, "second@x.com", role=Role.ADMIN, notification_preference=PHONE)
        silent_admin = self.make_user(self.org, "silent@x.com", role=Role.ADMIN, notification_preference=NONE)
        member = self.make_user(self.org, "m@x.com")
        assignment = self._assign(member)

        self._move(member, assignment, AssignmentStatus.DECLINED_BY_USER)
        recipients = set(
            Notification.objects.filter(kind=Notification.KIND_TASK_STATUS_UPDATE_ADMIN)
            .values_list("recipient_id", flat=True)
        )
        self.assertEqual(recipients, {self.admin.pk, second_admin.pk})
        self.assertNotIn(silent_admin.pk, recipients)

    def test_referrer_who_opted_out_falls_back_to_other_admins(self):
        self.admin.notification_preference = NONE
        self.admin.save()
        second_admin = self.make_user(self.org, "second@x.com", role=Role.ADMIN, notification_preference=EMAIL)
        member = self.make_user(self.org, "m@x.com", referring_admin=self.admin)
        assignment = self._assign(member)

        self._move(member, assignment, AssignmentStatus.ACCEPTED_BY_USER)
        updates = Notification.objects.filter(kind=Notification.KIND_TASK_STATUS_UPDATE_ADMIN)
        self.assertEqual([n.recipient for n in updates], [second_admin])

    def test_completion_notifies_assignee(self):
        member = self.make_user(self.org, "m@x.com", notification_preference=EMAIL)
        assignment = self._assign(member)
        self._move(member, assignment, AssignmentStatus.SUBMITTED_ON_TIME)
        mail.outbox.clear()

        self._move(self.admin, assignment, AssignmentStatus.COMPLETED_ADMIN_APPROVED)
        notification = Notification.objects.get(kind=Notification.KIND_TASK_COMPLETION_APPROVED)
        self.assertEqual(notification.recipient, member)
        self.assertEqual([m.to for m in mail.outbox], [["m@x.com"]])

    def test_failed_email_does_not_fail_the_update(self):
        member = self.make_user(self.org, "m@x.com", notification_preference=EMAIL)
        with patch("notifications.services.send_mail", side_effect=OSError("smtp down")):
            assignment = self._assign(member)

        self.assertTrue(Assignment.objects.filter(pk=assignment.pk).exists())
        notification = Notification.objects.get(kind=Notification.KIND_TASK_PROPOSED)
        self.assertEqual(notification.delivery_status, Notification.STATUS_FAILED)
        self.assertIn("smtp down", notification.error)

    def test_nothing_sent_when_update_is_rejected(self):
        member = self.make_user(self.org, "m@x.com", notification_preference=EMAIL)
        assignment = self._assign(member)
        mail.outbox.clear()
        Notification.objects.all().delete()

        other = self.make_user(self.org, "o@x.com")
        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRaises(Forbidden):
                services.update_assignment(other, assignment.pk, status=AssignmentStatus.ACCEPTED_BY_USER)
        self.assertFalse(Notification.objects.exists())
        self.assertEqual(len(mail.outbox), 0)


class IdentityNotificationTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.admin = self.make_user(self.org, "admin@x.com", role=Role.ADMIN)

    def test_pre_registration_emails_registrant_and_referrer(self):
        with self.captureOnCommitCallbacks(execute=True):
            pending = account_services.submit_pending_registration(
                email="p@x.com", unique_id="P1", password=PASSWORD, display_name="Pat",
                referring_admin_id=self.admin.pk,
            )
        recipients = sorted(address for message in mail.outbox for address in message.to)
        self.assertEqual(recipients, ["admin@x.com", "p@x.com"])

        registrant = Notification.objects.get(kind=Notification.KIND_PREREG_SUBMITTED_USER)
        self.assertIsNone(registrant.recipient)
        self.assertEqual(registrant.organization_id, self.org.pk)
        admin_notice = Notification.objects.get(kind=Notification.KIND_PREREG_NOTIFY_ADMIN)
        self.assertIn(pending.unique_id, admin_notice.message)

    def test_activation_email(self):
        pending = account_services.submit_pending_registration(
            email="p@x.com", unique_id="P1", password=PASSWORD, referring_admin_id=self.admin.pk,
        )
        with self.captureOnCommitCallbacks(execute=True):
            account_services.approve_pending_user(self.admin, pending.pk)
        self.assertEqual([m.to for m in mail.outbox], [["p@x.com"]])
        self.assertTrue(Notification.objects.filter(kind=Notification.KIND_ACCOUNT_ACTIVATED).exists())

    def test_identity_emails_ignore_preference(self):
        with self.captureOnCommitCallbacks(execute=True):
            account_services.register(
                email="m@x.com", unique_id="M1", password=PASSWORD,
                organization=self.org, notification_preference=NONE,
            )
        self.assertEqual([m.to for m in mail.outbox], [["m@x.com"]])

    def test_password_reset_round_trip(self):
        client = APIClient()
        with self.captureOnCommitCallbacks(execute=True):
            res = client.post("/api/auth/password-reset", {"email": "admin@x.com"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("http://testserver/#RESET_PASSWORD?uid=", mail.outbox[0].body)

        res = client.post("/api/auth/password-reset/confirm", {
            "uid": urlsafe_base64_encode(force_bytes(self.admin.pk)),
            "token": default_token_generator.make_token(self.admin),
            "newPassword": "brand-new-pass",
        }, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        account_services.authenticate_user("admin@x.com", "brand-new-pass")

    def test_password_reset_for_unknown_email_is_silent(self):
        with self.captureOnCommitCallbacks(execute=True):
            res = APIClient().post("/api/auth/password-reset", {"email": "ghost@x.com"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(mail.outbox), 0)


class InboxApiTests(TenantFixturesMixin, TestCase):

    def setUp(self):
        self.org = self.make_org()
        self.user = self.make_user(self.org, "u@x.com")
        self.other = self.make_user(self.org, "o@x.com")
        self.mine = [self._notify(self.user, n) for n in range(2)]
        self.theirs = self._notify(self.other, 0)
        self.client = self.client_for(self.user)

    def _notify(self, user, n):
        return Notification.objects.create(
            organization=self.org,
            kind=Notification.KIND_WELCOME_REGISTRATION,
            recipient=user,
            recipient_email=user.email,
            subject=f"subject {n}",
            message="body",
        )

    def test_list_and_count(self):
        res = self.client.get("/api/notifications/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["unread_count"], 2)
        self.assertEqual({n["id"] for n in res.data["notifications"]}, {n.pk for n in self.mine})

        self.assertEqual(self.client.get("/api/notifications/count/").data["count"], 2)

    def test_mark_read(self):
        res = self.client.post(f"/api/notifications/{self.mine[0].pk}/read/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(self.client.get("/api/notifications/count/").data["count"], 1)

        unread = self.client.get("/api/notifications/?unread=1").data["notifications"]
        self.assertEqual([n["id"] for n in unread], [self.mine[1].pk])

    def test_cannot_mark_someone_elses_notification(self):
        res = self.client.post(f"/api/notifications/{self.theirs.pk}/read/")
        self.assertEqual(res.status_code, 404)
        self.theirs.refresh_from_db()
        self.assertFalse(self.theirs.is_read)

    def test_mark_all_read(self):
        self.client.post("/api/notifications/mark-all-read/")
        self.assertEqual(self.client.get("/api/notifications/count/").data["count"], 0)
        self.theirs.refresh_from_db()
        self.assertFalse(self.theirs.is_read)
