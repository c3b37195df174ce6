"""
Core utilities: organization scoping and constraint-safe inserts.
"""
import logging

from django.db import IntegrityError, transaction

from core.exceptions import MissingTenantContext, NotFound

logger = logging.getLogger(__name__)


def user_organization_id(user):
    org_id = getattr(user, 'organization_id', None)
    if org_id is None:
        raise MissingTenantContext()
    return org_id


def filter_by_organization(queryset, user):
    """Filter a TenantQuerySet down to user's organization."""
    return queryset.for_tenant(user_organization_id(user))


def get_in_organization(queryset, user, detail=None, **lookup):
    """
    Fetch a single row inside user's organization.
    Rows of other organizations are reported as missing, never as forbidden.
    """
    obj = filter_by_organization(queryset, user).filter(**lookup).first()
    if obj is None:
        raise NotFound(detail)
    return obj


def save_new(instance, error_cls):
    """
    Insert instance under a savepoint. A unique-constraint violation (the
    loser of a concurrent create) is raised as error_cls instead of leaking
    IntegrityError.
    """
    try:
        with transaction.atomic():
            instance.save(force_insert=True)
    except IntegrityError:
        logger.info('Unique constraint rejected %s insert in org %s', type(instance).__name__,
                    instance.organization_id)
        raise error_cls()
    return instance
