"""
Identity lifecycle: tenant bootstrap, registration, pending approval,
role changes and deletion.

Invariants enforced here:
- email / unique_id are unique inside an organization, across both active
  and pending users (database constraints back the per-table half);
- a bootstrapped admin's identity is unique across all organizations,
  backed by the TenantFounder table;
- every organization keeps at least one admin. Admin-count checks run under
  a row lock on the Organization so concurrent demotions serialize;
- a password is hashed once, when it first enters the system. Approval moves
  the pending Credential to the new User untouched.
"""
import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from core.exceptions import (
    CannotDeleteSelf,
    ConflictAlreadyExists,
    DuplicateIdentity,
    Forbidden,
    ForbiddenCrossTenant,
    InvalidCredentials,
    MissingTenantContext,
    NotFound,
    SoleAdministratorProtected,
    ValidationError,
)
from core.models import Organization
from core.utils import save_new
from notifications.models import Notification
from notifications.services import notify_on_commit
from .credentials import hash_password, verify_password
from .models import NotificationPreference, PendingUser, Role, TenantFounder, User, normalize_identity_email
from .tokens import issue_token

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('position', 'interests', 'phone', 'notification_preference')
IDENTITY_FIELDS = ('email', 'unique_id')


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _clean_identity(email, unique_id, display_name):
    email = normalize_identity_email(email)
    unique_id = (unique_id or '').strip()
    display_name = (display_name or '').strip() or unique_id
    missing = [
        name for name, value in (('email', email), ('uniqueId', unique_id), ('displayName', display_name))
        if not value
    ]
    if missing:
        raise ValidationError({name: 'This field is required.' for name in missing})
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError({'email': 'Enter a valid email address.'})
    return email, unique_id, display_name


def _clean_password(password):
    min_length = settings.PASSWORD_MIN_LENGTH
    if not isinstance(password, str) or len(password) < min_length:
        raise ValidationError({'password': f'Password must be at least {min_length} characters.'})
    return password


def _clean_role(role, default=Role.MEMBER):
    role = (role or default or '').lower()
    if role not in Role.values:
        raise ValidationError({'role': f'role must be one of: {", ".join(Role.values)}'})
    return role


def _clean_profile(profile):
    cleaned = {}
    for field in PROFILE_FIELDS:
        if field in profile and profile[field] is not None:
            cleaned[field] = profile[field].strip() if isinstance(profile[field], str) else profile[field]
    pref = cleaned.get('notification_preference')
    if pref is not None and pref not in NotificationPreference.values:
        raise ValidationError({'notificationPreference': 'Must be email, phone or none.'})
    return cleaned


def _require_admin(actor):
    if actor is None or not actor.is_admin:
        raise Forbidden('Admin access required.')
    if actor.organization_id is None:
        raise MissingTenantContext()


def identity_taken(organization, email=None, unique_id=None, exclude_user=None, exclude_pending=None):
    """True if an active or pending user of organization already holds email or unique_id."""
    users = User.objects.for_tenant(organization).with_identity(email, unique_id)
    pending = PendingUser.objects.for_tenant(organization).with_identity(email, unique_id)
    if exclude_user is not None:
        users = users.exclude(pk=exclude_user.pk)
    if exclude_pending is not None:
        pending = pending.exclude(pk=exclude_pending.pk)
    return users.exists() or pending.exists()


def identity_taken_anywhere(email, unique_id):
    """True if any organization already has a user holding email or unique_id."""
    return User.objects.with_identity(email, unique_id).exists()


def identity_active(organization, email, unique_id):
    return User.objects.for_tenant(organization).with_identity(email, unique_id).exists()


def _lock_organization(organization_id):
    return Organization.objects.select_for_update().get(pk=organization_id)


def _resolve_referring_admin(referring_admin):
    if isinstance(referring_admin, User):
        admin = referring_admin
    else:
        admin = None
        if referring_admin not in (None, ''):
            try:
                admin = User.objects.filter(pk=int(referring_admin)).first()
            except (TypeError, ValueError):
                admin = None
    if admin is None or not admin.is_admin or admin.organization_id is None:
        raise ValidationError({'referringAdminId': 'Referral link is invalid or expired.'})
    return admin


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def bootstrap_tenant(*, email, unique_id, password, display_name=None, company_name=None, **profile):
    """
    Create a new organization and its first admin in one transaction.
    No tenant exists yet, so the identity must be free across all tenants.
    """
    email, unique_id, display_name = _clean_identity(email, unique_id, display_name)
    _clean_password(password)
    profile = _clean_profile(profile)

    if identity_taken_anywhere(email, unique_id):
        raise DuplicateIdentity()

    credential = hash_password(password)
    company_name = (company_name or '').strip() or f"{display_name}'s organization"
    with transaction.atomic():
        organization = Organization.objects.create(name=company_name)
        user = User(
            organization=organization,
            email=email,
            unique_id=unique_id,
            display_name=display_name,
            role=Role.ADMIN,
            **profile,
        )
        user.set_credential(credential)
        save_new(user, DuplicateIdentity)
        # Global claim; the unique columns reject a concurrent bootstrap of the same identity.
        save_new(
            TenantFounder(user=user, organization=organization, email=user.email, unique_id=user.unique_id),
            DuplicateIdentity,
        )
        notify_on_commit(
            Notification.KIND_WELCOME_REGISTRATION,
            user,
            {
                'to_name': user.display_name,
                'user_role': user.role,
                'company_name': organization.name,
                'company_suffix': f' at {organization.name}',
            },
        )
    logger.info('Bootstrapped organization %s with admin %s', organization.pk, user.pk)
    return user


def register(*, email, unique_id, password, display_name=None, role=None, company_name=None,
             organization=None, referring_admin=None, **profile):
    """
    Register an active user.
    role=admin bootstraps a new tenant. role=member joins the given
    organization, or the referring admin's organization.
    """
    role = _clean_role(role)
    if role == Role.ADMIN:
        return bootstrap_tenant(
            email=email, unique_id=unique_id, password=password, display_name=display_name,
            company_name=company_name, **profile,
        )

    admin = _resolve_referring_admin(referring_admin) if referring_admin is not None else None
    org_id = getattr(organization, 'pk', organization)
    if org_id is None and admin is not None:
        org_id = admin.organization_id
    if org_id is None:
        raise MissingTenantContext('A member must join an existing organization.')
    if admin is not None and admin.organization_id != org_id:
        raise ForbiddenCrossTenant()

    email, unique_id, display_name = _clean_identity(email, unique_id, display_name)
    _clean_password(password)
    profile = _clean_profile(profile)
    if identity_taken(org_id, email, unique_id):
        raise DuplicateIdentity()

    user = User(
        organization_id=org_id,
        email=email,
        unique_id=unique_id,
        display_name=display_name,
        role=Role.MEMBER,
        referring_admin=admin,
        **profile,
    )
    user.set_credential(hash_password(password))
    with transaction.atomic():
        save_new(user, DuplicateIdentity)
        notify_on_commit(
            Notification.KIND_WELCOME_REGISTRATION,
            user,
            {'to_name': user.display_name, 'user_role': user.role, 'company_suffix': ''},
        )
    logger.info('Registered member %s in org %s', user.pk, org_id)
    return user


def submit_pending_registration(*, email, unique_id, password, referring_admin_id, display_name=None,
                                role=None, **profile):
    """
    Self-service registration through an admin's referral. The record
    inherits the referrer's organization and is always a member request.
    """
    admin = _resolve_referring_admin(referring_admin_id)
    email, unique_id, display_name = _clean_identity(email, unique_id, display_name)
    _clean_password(password)
    profile = _clean_profile(profile)
    if role and role != Role.MEMBER:
        logger.warning('Pre-registration for %s asked for role %r; stored as member', email, role)

    if identity_taken(admin.organization_id, email, unique_id):
        raise DuplicateIdentity()

    pending = PendingUser(
        organization_id=admin.organization_id,
        email=email,
        unique_id=unique_id,
        display_name=display_name,
        role=Role.MEMBER,
        referring_admin=admin,
        **profile,
    )
    pending.set_credential(hash_password(password))
    with transaction.atomic():
        save_new(pending, DuplicateIdentity)
        notify_on_commit(
            Notification.KIND_PREREG_SUBMITTED_USER,
            None,
            {'to_name': pending.display_name, 'admin_name': admin.display_name},
            email=pending.email,
            organization=pending.organization_id,
        )
        notify_on_commit(
            Notification.KIND_PREREG_NOTIFY_ADMIN,
            admin,
            {
                'admin_name': admin.display_name,
                'pending_user_name': pending.display_name,
                'pending_user_unique_id': pending.unique_id,
            },
        )
    logger.info('Pending registration %s submitted to org %s', pending.pk, pending.organization_id)
    return pending


# ---------------------------------------------------------------------------
# Approval / rejection
# ---------------------------------------------------------------------------

def list_pending_users(admin):
    _require_admin(admin)
    return PendingUser.objects.for_tenant(admin.organization_id).select_related('referring_admin')


def _resolve_final_role(requested, tenant_users):
    """Only a tenant without admins may gain one through approval."""
    requested = _clean_role(requested)
    if requested == Role.ADMIN and tenant_users.admins().exists():
        return Role.MEMBER
    return requested


def approve_pending_user(admin, pending_id, *, role=None, overrides=None):
    """
    Turn a pending registration into an active User of admin's organization.
    Raises NotFound, ForbiddenCrossTenant or ConflictAlreadyExists.
    """
    _require_admin(admin)
    pending = PendingUser.objects.filter(pk=pending_id).first()
    if pending is None:
        raise NotFound('Pending user not found.')
    if pending.organization_id != admin.organization_id:
        raise ForbiddenCrossTenant()
    overrides = dict(overrides or {})
    display_name = (overrides.pop('display_name', None) or '').strip()
    overrides = _clean_profile(overrides)

    collided = False
    with transaction.atomic():
        organization = _lock_organization(admin.organization_id)
        pending = PendingUser.objects.select_for_update().filter(
            pk=pending_id, organization=organization,
        ).first()
        if pending is None:
            # Another approval or a rejection got here first.
            raise NotFound('Pending user not found.')

        tenant_users = User.objects.for_tenant(organization)
        if identity_active(organization, pending.email, pending.unique_id):
            pending.delete()
            collided = True
        else:
            fields = {field: getattr(pending, field) for field in PROFILE_FIELDS}
            fields.update(overrides)
            user = User(
                organization=organization,
                email=pending.email,
                unique_id=pending.unique_id,
                display_name=display_name or pending.display_name,
                role=_resolve_final_role(role, tenant_users),
                referring_admin_id=pending.referring_admin_id,
                **fields,
            )
            user.set_credential(pending.credential)
            try:
                save_new(user, ConflictAlreadyExists)
            except ConflictAlreadyExists:
                # Lost the insert race to a concurrent activation of the same identity.
                pending.delete()
                collided = True
            else:
                pending.delete()
                notify_on_commit(
                    Notification.KIND_ACCOUNT_ACTIVATED,
                    user,
                    {'to_name': user.display_name, 'admin_name': admin.display_name},
                )

    if collided:
        logger.info('Pending user %s dropped on approval: identity already active', pending_id)
        raise ConflictAlreadyExists()
    logger.info('Pending user %s approved by %s as %s (user %s)', pending_id, admin.pk, user.role, user.pk)
    return user


def reject_pending_user(admin, pending_id):
    _require_admin(admin)
    deleted, _ = PendingUser.objects.for_tenant(admin.organization_id).filter(pk=pending_id).delete()
    if not deleted:
        raise NotFound('Pending user not found.')
    logger.info('Pending user %s rejected by %s', pending_id, admin.pk)


# ---------------------------------------------------------------------------
# Active users
# ---------------------------------------------------------------------------

def list_users(admin, role=None, search=None):
    _require_admin(admin)
    qs = User.objects.for_tenant(admin.organization_id)
    if role:
        qs = qs.filter(role=_clean_role(role))
    if search:
        qs = qs.filter(
            Q(email__icontains=search) | Q(display_name__icontains=search) | Q(unique_id__icontains=search)
        )
    return qs


def get_user(actor, user_id):
    if actor.pk == _as_pk(user_id):
        return actor
    _require_admin(actor)
    user = User.objects.for_tenant(actor.organization_id).filter(pk=_as_pk(user_id)).first()
    if user is None:
        raise NotFound('User not found.')
    return user


def _as_pk(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFound('User not found.')


def change_role(actor, user_id, role):
    """Promote or demote a user of actor's organization."""
    _require_admin(actor)
    role = _clean_role(role, default=None)
    with transaction.atomic():
        organization = _lock_organization(actor.organization_id)
        tenant_users = User.objects.for_tenant(organization)
        target = tenant_users.select_for_update().filter(pk=_as_pk(user_id)).first()
        if target is None:
            raise NotFound('User not found.')
        if target.role == role:
            return target
        if target.role == Role.ADMIN and tenant_users.admins().count() <= 1:
            raise SoleAdministratorProtected()
        target.role = role
        target.save(update_fields=['role', 'updated_at'])
    logger.info('User %s role changed to %s by %s', target.pk, role, actor.pk)
    return target


def delete_user(actor, user_id):
    """
    Delete a user of actor's organization. The last admin is protected, and
    an admin can never delete their own account.
    """
    _require_admin(actor)
    with transaction.atomic():
        organization = _lock_organization(actor.organization_id)
        tenant_users = User.objects.for_tenant(organization)
        target = tenant_users.select_for_update().filter(pk=_as_pk(user_id)).first()
        if target is None:
            raise NotFound('User not found.')
        if target.is_admin and tenant_users.admins().count() <= 1:
            raise SoleAdministratorProtected()
        if target.pk == actor.pk:
            raise CannotDeleteSelf()
        target.delete()
    logger.info('User %s deleted by %s', user_id, actor.pk)


def update_user(actor, user_id, **changes):
    """
    Profile update. Members may edit themselves; admins may edit anyone in
    their organization. A role entry is routed through change_role().
    """
    target = get_user(actor, user_id) if actor.is_admin else None
    if target is None:
        if actor.pk != _as_pk(user_id):
            raise Forbidden('You can only edit your own profile.')
        target = actor

    role = changes.pop('role', None)
    display_name = changes.pop('display_name', None)
    email = changes.pop('email', None)
    unique_id = changes.pop('unique_id', None)
    profile = _clean_profile(changes)
    if role is not None and role != target.role and not actor.is_admin:
        raise Forbidden('Only an admin can change roles.')

    update_fields = list(profile)
    for field, value in profile.items():
        setattr(target, field, value)
    if display_name is not None:
        if not display_name.strip():
            raise ValidationError({'displayName': 'This field may not be blank.'})
        target.display_name = display_name.strip()
        update_fields.append('display_name')

    email_changed = email is not None and normalize_identity_email(email) != target.email
    unique_id_changed = unique_id is not None and unique_id.strip() != target.unique_id
    if email_changed or unique_id_changed:
        new_email, new_unique_id, _ = _clean_identity(
            email if email_changed else target.email,
            unique_id if unique_id_changed else target.unique_id,
            target.display_name,
        )
        if identity_taken(
            target.organization_id,
            email=new_email if email_changed else None,
            unique_id=new_unique_id if unique_id_changed else None,
            exclude_user=target,
        ):
            raise DuplicateIdentity()
        target.email, target.unique_id = new_email, new_unique_id
        update_fields += ['email', 'unique_id']

    with transaction.atomic():
        if update_fields:
            update_fields.append('updated_at')
            try:
                with transaction.atomic():
                    target.save(update_fields=update_fields)
                    if 'email' in update_fields:
                        TenantFounder.objects.filter(user=target).update(
                            email=target.email, unique_id=target.unique_id,
                        )
            except IntegrityError:
                raise DuplicateIdentity()
        if role is not None and role != target.role:
            target = change_role(actor, target.pk, role)
    return target


# ---------------------------------------------------------------------------
# Authentication and passwords
# ---------------------------------------------------------------------------

def authenticate_user(email, password, request=None):
    """
    Resolve credentials to (user, access token). Every failure is the same
    InvalidCredentials so callers cannot tell which half was wrong.
    """
    if not email or not isinstance(password, str):
        raise InvalidCredentials()
    user = authenticate(request, email=email, password=password)
    if user is None:
        raise InvalidCredentials()
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user, issue_token(user)


def change_password(user, current_password, new_password):
    if not verify_password(current_password, user.password):
        raise ValidationError({'currentPassword': 'Current password is incorrect.'})
    _clean_password(new_password)
    user.set_credential(hash_password(new_password))
    user.save(update_fields=['password', 'updated_at'])
    logger.info('Password changed for user %s', user.pk)


def request_password_reset(email):
    """Send a reset link to every active account with this email. Silent when none exist."""
    users = User.objects.with_identity(email=email).filter(is_active=True)
    base = settings.FRONTEND_URL.rstrip('/')
    for user in users:
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        notify_on_commit(
            Notification.KIND_PASSWORD_RESET,
            user,
            {'to_name': user.display_name, 'reset_link': f'{base}/#RESET_PASSWORD?uid={uid}&token={token}'},
        )


def confirm_password_reset(uid, token, new_password):
    try:
        user_pk = force_str(urlsafe_base64_decode(uid))
        user = User.objects.filter(pk=int(user_pk), is_active=True).first()
    except (TypeError, ValueError, OverflowError):
        user = None
    if user is None or not default_token_generator.check_token(user, token):
        raise ValidationError({'token': 'Reset link is invalid or has expired.'})
    _clean_password(new_password)
    user.set_credential(hash_password(new_password))
    user.save(update_fields=['password', 'updated_at'])
    logger.info('Password reset completed for user %s', user.pk)
    return user
