"""
Free-text operational log kept by the admins of an organization.
"""
from django.db import models

from core.models import TenantQuerySet


class AdminLog(models.Model):
    organization = models.ForeignKey(
        'core.Organization',
        on_delete=models.CASCADE,
        related_name='admin_logs',
        db_column='organization_id',
    )
    admin = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admin_logs',
    )
    # Kept so the entry still reads correctly after the admin is deleted.
    admin_display_name = models.CharField(max_length=255)
    log_text = models.TextField()
    image_preview_url = models.URLField(max_length=1000, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        db_table = 'admin_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.admin_display_name}: {self.log_text[:50]}"
