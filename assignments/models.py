"""
Assignment: one Task proposed to one User of the same organization.
"""
from django.db import models
from django.utils import timezone

from core.models import TenantQuerySet


class AssignmentStatus(models.TextChoices):
    PENDING_ACCEPTANCE = 'pending_acceptance', 'Pending acceptance'
    ACCEPTED_BY_USER = 'accepted_by_user', 'Accepted by user'
    DECLINED_BY_USER = 'declined_by_user', 'Declined by user'
    SUBMITTED_ON_TIME = 'submitted_on_time', 'Submitted on time'
    SUBMITTED_LATE = 'submitted_late', 'Submitted late'
    COMPLETED_ADMIN_APPROVED = 'completed_admin_approved', 'Completed (admin approved)'


# Statuses the assignee sets on their own assignment.
ASSIGNEE_STATUSES = frozenset({
    AssignmentStatus.ACCEPTED_BY_USER.value,
    AssignmentStatus.DECLINED_BY_USER.value,
    AssignmentStatus.SUBMITTED_ON_TIME.value,
    AssignmentStatus.SUBMITTED_LATE.value,
})

# Strict chain, used when ASSIGNMENT_STRICT_TRANSITIONS is on.
NEXT_STATUSES = {
    AssignmentStatus.PENDING_ACCEPTANCE.value: {
        AssignmentStatus.ACCEPTED_BY_USER.value,
        AssignmentStatus.DECLINED_BY_USER.value,
    },
    AssignmentStatus.ACCEPTED_BY_USER.value: {
        AssignmentStatus.SUBMITTED_ON_TIME.value,
        AssignmentStatus.SUBMITTED_LATE.value,
    },
    AssignmentStatus.DECLINED_BY_USER.value: set(),
    AssignmentStatus.SUBMITTED_ON_TIME.value: {AssignmentStatus.COMPLETED_ADMIN_APPROVED.value},
    AssignmentStatus.SUBMITTED_LATE.value: {AssignmentStatus.COMPLETED_ADMIN_APPROVED.value},
    AssignmentStatus.COMPLETED_ADMIN_APPROVED.value: set(),
}


class AssignmentQuerySet(TenantQuerySet):

    def for_person(self, user):
        return self.filter(person=user)


class Assignment(models.Model):
    """
    task_title and person_name are a point-in-time snapshot taken when the
    assignment is created. Later renames of the task or the person are not
    propagated here.
    """
    organization = models.ForeignKey(
        'core.Organization',
        on_delete=models.CASCADE,
        related_name='assignments',
        db_column='organization_id',
    )
    task = models.ForeignKey(
        'programs.Task',
        on_delete=models.CASCADE,
        related_name='assignments',
    )
    person = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='assignments',
    )
    task_title = models.CharField(max_length=255)
    person_name = models.CharField(max_length=255)
    justification = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=32,
        choices=AssignmentStatus.choices,
        default=AssignmentStatus.PENDING_ACCEPTANCE,
        db_index=True,
    )
    deadline = models.DateTimeField(null=True, blank=True)
    submission_date = models.DateTimeField(null=True, blank=True)
    delay_reason = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_assignments',
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AssignmentQuerySet.as_manager()

    class Meta:
        db_table = 'assignments'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'task', 'person'],
                name='uniq_assignment_task_person_per_org',
            ),
        ]

    def __str__(self):
        return f"{self.task_title} -> {self.person_name} ({self.status})"

    @property
    def is_terminal(self):
        return self.status == AssignmentStatus.COMPLETED_ADMIN_APPROVED
