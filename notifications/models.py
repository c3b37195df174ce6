"""
Notification records: one row per recipient per event, doubling as the
in-app inbox and the delivery log of the email channel.
"""
from django.db import models

from accounts.models import User
from core.models import Organization, TenantQuerySet


class Notification(models.Model):
    KIND_WELCOME_REGISTRATION = "welcome_registration"
    KIND_PASSWORD_RESET = "password_reset"
    KIND_PREREG_SUBMITTED_USER = "prereg_submitted_user"
    KIND_PREREG_NOTIFY_ADMIN = "prereg_notify_admin"
    KIND_ACCOUNT_ACTIVATED = "account_activated"
    KIND_TASK_PROPOSED = "task_proposed"
    KIND_TASK_STATUS_UPDATE_ADMIN = "task_status_update_admin"
    KIND_TASK_COMPLETION_APPROVED = "task_completion_approved"

    KIND_CHOICES = [
        (KIND_WELCOME_REGISTRATION, "Welcome"),
        (KIND_PASSWORD_RESET, "Password reset"),
        (KIND_PREREG_SUBMITTED_USER, "Pre-registration submitted"),
        (KIND_PREREG_NOTIFY_ADMIN, "New pre-registration"),
        (KIND_ACCOUNT_ACTIVATED, "Account activated"),
        (KIND_TASK_PROPOSED, "Task proposed"),
        (KIND_TASK_STATUS_UPDATE_ADMIN, "Task status update"),
        (KIND_TASK_COMPLETION_APPROVED, "Task completion approved"),
    ]

    STATUS_SENT = "sent"
    STATUS_FAILED = "failed"
    STATUS_IN_APP = "in_app"

    STATUS_CHOICES = [
        (STATUS_SENT, "Sent"),
        (STATUS_FAILED, "Failed"),
        (STATUS_IN_APP, "In-app only"),
    ]

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    kind = models.CharField(max_length=50, choices=KIND_CHOICES, db_index=True)
    recipient = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    recipient_email = models.EmailField()
    assignment = models.ForeignKey(
        "assignments.Assignment",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    subject = models.CharField(max_length=255)
    message = models.TextField()
    context = models.JSONField(default=dict, blank=True)
    delivery_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_APP)
    error = models.TextField(blank=True, default="")
    is_read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        db_table = "notifications"
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
        ]

    def __str__(self):
        return f"{self.kind} -> {self.recipient_email} - {self.created_at}"
