"""
Assignment lifecycle.

pending_acceptance -> accepted_by_user | declined_by_user
                   -> submitted_on_time | submitted_late
                   -> completed_admin_approved (terminal)

Who may change what:
- the assignee sets the four assignee statuses, submission_date and
  delay_reason on their own assignment;
- an admin of the same organization approves completion on any assignment,
  edits justification and deadline, and may change their own assignment
  freely (an admin can also be an assignee);
- everything else is Forbidden.

By default any role-permitted status is reachable in one hop. With
settings.ASSIGNMENT_STRICT_TRANSITIONS each change must follow NEXT_STATUSES.
"""
import logging

from django.conf import settings
from django.db import transaction

from accounts.models import User
from core.exceptions import DuplicateAssignment, Forbidden, NotFound, ValidationError
from core.utils import save_new, user_organization_id
from notifications.models import Notification
from notifications.services import notify_many_on_commit, notify_on_commit, preference_allows
from programs.models import Task
from .models import ASSIGNEE_STATUSES, NEXT_STATUSES, Assignment, AssignmentStatus

logger = logging.getLogger(__name__)

ASSIGNEE_FIELDS = frozenset({'submission_date', 'delay_reason'})
ADMIN_FIELDS = frozenset({'justification', 'deadline'})
UPDATABLE_FIELDS = ASSIGNEE_FIELDS | ADMIN_FIELDS | {'status'}

USER_ACTIONS = {
    AssignmentStatus.ACCEPTED_BY_USER.value: 'accepted',
    AssignmentStatus.DECLINED_BY_USER.value: 'declined',
    AssignmentStatus.SUBMITTED_ON_TIME.value: 'submitted (on time)',
    AssignmentStatus.SUBMITTED_LATE.value: 'submitted (late)',
}


def _require_admin(actor):
    if not actor.is_admin:
        raise Forbidden('Admin access required.')
    return user_organization_id(actor)


def _format_deadline(value):
    return value.strftime('%Y-%m-%d') if value else 'not set'


def assignment_exists(organization, task, person):
    return Assignment.objects.for_tenant(organization).filter(task=task, person=person).exists()


def create_assignment(admin, task_id, person_id, justification='', deadline=None):
    """Propose a task of admin's organization to a user of the same organization."""
    org_id = _require_admin(admin)
    task = Task.objects.for_tenant(org_id).filter(pk=task_id).first()
    if task is None:
        raise NotFound('Task not found in your organization.')
    person = User.objects.for_tenant(org_id).filter(pk=person_id).first()
    if person is None:
        raise NotFound('User not found in your organization.')

    if assignment_exists(org_id, task, person):
        raise DuplicateAssignment()

    assignment = Assignment(
        organization_id=org_id,
        task=task,
        person=person,
        task_title=task.title,
        person_name=person.display_name,
        justification=(justification or '').strip(),
        deadline=deadline or task.deadline,
        created_by=admin,
    )
    with transaction.atomic():
        save_new(assignment, DuplicateAssignment)
        notify_on_commit(
            Notification.KIND_TASK_PROPOSED,
            person,
            {
                'to_name': person.display_name,
                'admin_name': admin.display_name,
                'task_title': assignment.task_title,
                'task_deadline': _format_deadline(assignment.deadline),
            },
            assignment=assignment,
            respect_preference=True,
        )
    logger.info('Task %s assigned to user %s by %s (assignment %s)', task.pk, person.pk, admin.pk, assignment.pk)
    return assignment


def _authorize(actor, assignment, changes):
    """Raise Forbidden unless actor may apply every entry of changes."""
    is_assignee = assignment.person_id == actor.pk
    if actor.is_admin and is_assignee:
        return

    for field, value in changes.items():
        if field == 'status':
            if value == AssignmentStatus.COMPLETED_ADMIN_APPROVED and actor.is_admin:
                continue
            if value in ASSIGNEE_STATUSES and is_assignee:
                continue
            raise Forbidden(f'You are not allowed to set status "{value}" on this assignment.')
        if field in ASSIGNEE_FIELDS and is_assignee:
            continue
        if field in ADMIN_FIELDS and actor.is_admin:
            continue
        raise Forbidden(f'You are not allowed to change "{field}" on this assignment.')


def _check_transition(current, new):
    if current == new:
        return
    if settings.ASSIGNMENT_STRICT_TRANSITIONS and new not in NEXT_STATUSES[current]:
        raise ValidationError(
            {'status': f'Cannot move an assignment from "{current}" to "{new}".'},
            code='invalid_transition',
        )


def update_assignment(actor, assignment_id, **changes):
    """
    Apply changes (status, submission_date, delay_reason, justification,
    deadline). Returns the updated Assignment.
    """
    org_id = user_organization_id(actor)
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError({field: 'This field cannot be updated.' for field in sorted(unknown)})

    with transaction.atomic():
        assignment = (
            Assignment.objects.for_tenant(org_id)
            .select_for_update()
            .filter(pk=assignment_id)
            .first()
        )
        if assignment is None:
            raise NotFound('Assignment not found.')
        if assignment.is_terminal:
            raise ValidationError(
                {'status': 'A completed assignment can no longer be changed.'},
                code='assignment_completed',
            )

        if changes.get('status', assignment.status) not in AssignmentStatus.values:
            raise ValidationError({'status': f'Unknown status "{changes["status"]}".'})
        _authorize(actor, assignment, changes)
        previous_status = assignment.status
        new_status = changes.get('status', previous_status)
        _check_transition(previous_status, new_status)

        for field, value in changes.items():
            if field in ('delay_reason', 'justification'):
                value = (value or '').strip()
            setattr(assignment, field, value)
        if changes:
            assignment.save(update_fields=sorted(changes) + ['updated_at'])

        if new_status != previous_status:
            _fan_out(actor, assignment)
            logger.info('Assignment %s moved %s -> %s by %s', assignment.pk, previous_status, new_status, actor.pk)
    return assignment


def status_recipients(actor, assignment):
    """
    Admins told about an assignee status change: the assignee's referring
    admin when still eligible, otherwise every other admin of the
    organization whose preference allows notifications.
    """
    referrer = assignment.person.referring_admin
    if (
        referrer is not None
        and referrer.is_admin
        and referrer.organization_id == assignment.organization_id
        and referrer.pk != actor.pk
        and preference_allows(referrer)
    ):
        return [referrer]
    admins = User.objects.for_tenant(assignment.organization_id).admins().exclude(pk=actor.pk)
    return [admin for admin in admins if preference_allows(admin)]


def _fan_out(actor, assignment):
    if assignment.status == AssignmentStatus.COMPLETED_ADMIN_APPROVED:
        notify_on_commit(
            Notification.KIND_TASK_COMPLETION_APPROVED,
            assignment.person,
            {
                'to_name': assignment.person.display_name,
                'admin_name': actor.display_name,
                'task_title': assignment.task_title,
            },
            assignment=assignment,
            respect_preference=True,
        )
        return

    if assignment.status in ASSIGNEE_STATUSES:
        notify_many_on_commit(
            Notification.KIND_TASK_STATUS_UPDATE_ADMIN,
            status_recipients(actor, assignment),
            lambda admin: {
                'admin_name': admin.display_name,
                'user_name': assignment.person_name,
                'task_title': assignment.task_title,
                'user_action': USER_ACTIONS[assignment.status],
            },
            assignment=assignment,
            respect_preference=True,
        )


def delete_assignment(admin, assignment_id):
    """Administrative removal outside the state machine; notifications go with it."""
    org_id = _require_admin(admin)
    deleted, _ = Assignment.objects.for_tenant(org_id).filter(pk=assignment_id).delete()
    if not deleted:
        raise NotFound('Assignment not found.')
    logger.info('Assignment %s deleted by %s', assignment_id, admin.pk)


def list_assignments(actor, status=None, task_id=None, person_id=None):
    """Admins see their organization; members see their own assignments."""
    qs = Assignment.objects.for_tenant(user_organization_id(actor))
    if not actor.is_admin:
        qs = qs.for_person(actor)
    elif person_id is not None:
        qs = qs.filter(person_id=person_id)
    if status:
        qs = qs.filter(status=status)
    if task_id is not None:
        qs = qs.filter(task_id=task_id)
    return qs


def get_assignment(actor, assignment_id):
    assignment = Assignment.objects.for_tenant(user_organization_id(actor)).filter(pk=assignment_id).first()
    if assignment is None:
        raise NotFound('Assignment not found.')
    if not actor.is_admin and assignment.person_id != actor.pk:
        raise Forbidden('You can only view your own assignments.')
    return assignment
