"""
Core models: Organization (tenant) and the tenant-scoped queryset every
other app builds its managers on.
"""
import uuid

from django.db import models
from django.utils.text import slugify


class TenantQuerySet(models.QuerySet):
    """
    Queryset for organization-tagged rows.
    for_tenant() is the only sanctioned way to read tenant data; the
    unfiltered manager is reserved for pre-tenant lookups (login, bootstrap).
    """

    def for_tenant(self, organization):
        org_id = getattr(organization, 'pk', organization)
        if org_id is None:
            from core.exceptions import MissingTenantContext
            raise MissingTenantContext()
        return self.filter(organization_id=org_id)


class Organization(models.Model):
    """
    Organization / tenant. Created together with its first admin
    (accounts.services.bootstrap_tenant); never deleted in normal operation.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'organizations'
        verbose_name = 'Organization'
        verbose_name_plural = 'Organizations'
        ordering = ['name']

    def __str__(self):
        return self.name

    @staticmethod
    def build_slug(name):
        base = slugify(name or '')[:80] or 'org'
        return f'{base}-{uuid.uuid4().hex[:8]}'

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self.build_slug(self.name)
        super().save(*args, **kwargs)
