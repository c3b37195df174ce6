"""
Program / Task services. All lookups are scoped to the caller's organization.
"""
import logging

from django.db import transaction

from core.exceptions import NotFound, ValidationError
from core.utils import get_in_organization, user_organization_id
from .models import Program, Task

logger = logging.getLogger(__name__)


def resolve_program(user, program_id):
    """Program of user's organization, or None when program_id is empty."""
    if program_id in (None, ''):
        return None
    program = Program.objects.for_tenant(user_organization_id(user)).filter(pk=program_id).first()
    if program is None:
        raise ValidationError({'programId': 'Program not found or does not belong to your organization.'})
    return program


def save_task(admin, data, task=None):
    """Create (task=None) or update a task from validated serializer data."""
    data = dict(data)
    program_set = 'program_id' in data
    program = resolve_program(admin, data.pop('program_id', None))
    if task is None:
        task = Task(organization_id=user_organization_id(admin))
    for field, value in data.items():
        setattr(task, field, value)
    if task.pk is None or program_set:
        task.program = program
        task.program_name = program.name if program else None
    task.save()
    return task


def get_task(user, task_id):
    return get_in_organization(Task.objects.all(), user, detail='Task not found in your organization.', pk=task_id)


@transaction.atomic
def delete_task(admin, task_id):
    """Delete a task together with its assignments (and their notifications)."""
    task = get_task(admin, task_id)
    assignments = task.assignments.count()
    task.delete()
    logger.info('Task %s deleted by %s with %s assignment(s)', task_id, admin.pk, assignments)


def delete_program(admin, program_id):
    deleted, _ = Program.objects.for_tenant(user_organization_id(admin)).filter(pk=program_id).delete()
    if not deleted:
        raise NotFound('Program not found in your organization.')
