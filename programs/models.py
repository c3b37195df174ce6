"""
Program (a named body of work) and Task (unit of work that gets assigned).
"""
from django.db import models

from core.models import TenantQuerySet


class Program(models.Model):
    organization = models.ForeignKey(
        'core.Organization',
        on_delete=models.CASCADE,
        related_name='programs',
        db_column='organization_id',
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        db_table = 'programs'
        ordering = ['name']

    def __str__(self):
        return self.name


class Task(models.Model):
    """
    program_name is copied from the program when the task is saved through
    the API, so task lists render without a join.
    """
    organization = models.ForeignKey(
        'core.Organization',
        on_delete=models.CASCADE,
        related_name='tasks',
        db_column='organization_id',
    )
    title = models.CharField(max_length=255)
    description = models.TextField()
    required_skills = models.TextField()
    program = models.ForeignKey(
        Program,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks',
    )
    program_name = models.CharField(max_length=255, blank=True, null=True)
    deadline = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        db_table = 'tasks'
        ordering = ['-created_at']
        indexes = [models.Index(fields=['organization', '-created_at'], name='tasks_org_created_idx')]

    def __str__(self):
        return self.title
