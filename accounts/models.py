"""
Custom User Model with Roles, and PendingUser (unapproved registration).
"""
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone

from core.models import Organization, TenantQuerySet
from .credentials import Credential, ensure_credential


class Role(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    MEMBER = 'member', 'Member'


class NotificationPreference(models.TextChoices):
    EMAIL = 'email', 'Email'
    PHONE = 'phone', 'Phone'
    NONE = 'none', 'None'


def normalize_identity_email(email):
    return (email or '').strip().lower()


class UserQuerySet(TenantQuerySet):

    def admins(self):
        return self.filter(role=Role.ADMIN)

    def with_identity(self, email=None, unique_id=None):
        """Rows colliding with an email (case-insensitive) or unique ID."""
        q = models.Q()
        if email:
            q |= models.Q(email__iexact=normalize_identity_email(email))
        if unique_id:
            q |= models.Q(unique_id=unique_id.strip())
        if not q:
            return self.none()
        return self.filter(q)


class UserManager(BaseUserManager.from_queryset(UserQuerySet)):
    """User manager where (organization, email) is the identity."""

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a user. password may be plaintext or a Credential."""
        if not email:
            raise ValueError('The Email field must be set')
        user = self.model(email=normalize_identity_email(email), **extra_fields)
        if password is None:
            user.set_unusable_password()
        else:
            user.set_credential(ensure_credential(password))
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create a platform superuser, inside its own organization unless one is given."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', Role.ADMIN)
        extra_fields.setdefault('unique_id', email)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')
        if not extra_fields.get('organization') and not extra_fields.get('organization_id'):
            extra_fields['organization'] = Organization.objects.create(name='Platform')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User Model
    Email-based authentication (no username). Email and unique_id are unique
    inside an organization, not globally.
    """
    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name='users',
        db_column='organization_id',
    )
    email = models.EmailField(db_index=True)
    unique_id = models.CharField(max_length=100)
    display_name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER, db_index=True)
    position = models.CharField(max_length=255, blank=True, default='')
    interests = models.TextField(blank=True, default='')
    phone = models.CharField(max_length=30, blank=True, default='')
    notification_preference = models.CharField(
        max_length=10,
        choices=NotificationPreference.choices,
        default=NotificationPreference.NONE,
    )
    referring_admin = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='referred_users',
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['display_name']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'email'], name='uniq_user_email_per_org'),
            models.UniqueConstraint(fields=['organization', 'unique_id'], name='uniq_user_unique_id_per_org'),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.email})"

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    @property
    def credential(self):
        return Credential.from_encoded(self.password)

    def set_credential(self, credential: Credential):
        """Store an already-hashed credential as-is."""
        self.password = credential.encoded
        self._password = None

    def set_password(self, raw_password):
        # Route through the credential store so a Credential is never re-hashed.
        if raw_password is None:
            self.set_unusable_password()
            return
        self.set_credential(ensure_credential(raw_password))
        self._password = raw_password if isinstance(raw_password, str) else None

    def save(self, *args, **kwargs):
        self.email = normalize_identity_email(self.email)
        self.unique_id = (self.unique_id or '').strip()
        super().save(*args, **kwargs)


class PendingUser(models.Model):
    """
    Self-service registration awaiting admin approval.
    Always referred by an admin, whose organization it inherits.
    """
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='pending_users',
        db_column='organization_id',
    )
    email = models.EmailField(db_index=True)
    unique_id = models.CharField(max_length=100)
    password = models.CharField(max_length=255)
    display_name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER)
    position = models.CharField(max_length=255, blank=True, default='')
    interests = models.TextField(blank=True, default='')
    phone = models.CharField(max_length=30, blank=True, default='')
    notification_preference = models.CharField(
        max_length=10,
        choices=NotificationPreference.choices,
        default=NotificationPreference.NONE,
    )
    referring_admin = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='referred_pending_users',
    )
    submitted_at = models.DateTimeField(default=timezone.now)

    objects = UserQuerySet.as_manager()

    class Meta:
        db_table = 'pending_users'
        verbose_name = 'Pending User'
        verbose_name_plural = 'Pending Users'
        ordering = ['-submitted_at']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'email'], name='uniq_pending_email_per_org'),
            models.UniqueConstraint(fields=['organization', 'unique_id'], name='uniq_pending_unique_id_per_org'),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.email}) - pending"

    @property
    def credential(self):
        return Credential.from_encoded(self.password)

    def set_credential(self, credential: Credential):
        self.password = credential.encoded

    def save(self, *args, **kwargs):
        self.email = normalize_identity_email(self.email)
        self.unique_id = (self.unique_id or '').strip()
        self.role = Role.MEMBER
        super().save(*args, **kwargs)


class TenantFounder(models.Model):
    """
    Identity claimed by the admin who bootstrapped an organization.
    email and unique_id are unique across all organizations, so two
    concurrent bootstraps with the same identity cannot both commit.
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='founder_claim')
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='founders',
        db_column='organization_id',
    )
    email = models.EmailField(unique=True)
    unique_id = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'tenant_founders'

    def __str__(self):
        return f"{self.email} founded {self.organization_id}"
