"""
Core models for the course marketplace.
Contains base models used across all modules: User, Role, AuditLog, SiteSettings.
"""

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils.translation import gettext_lazy as _


class Role(models.Model):
    """
    Role model for permission management.
    Examples: admin, learner.
    """
    ADMIN = 'admin'
    LEARNER = 'learner'

    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'roles'
        ordering = ['name']

    def __str__(self):
        return self.name


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError(_('The Email field must be set'))
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.
    Learners and admins share this model; admin access comes from the 'admin' role.
    """
    # Remove username, use email for authentication
    username = None
    email = models.EmailField(_('email address'), unique=True)

    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)

    roles = models.ManyToManyField(Role, related_name='users', blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['full_name']

    class Meta:
        db_table = 'users'
        ordering = ['full_name']

    def __str__(self):
        return f"{self.full_name} ({self.email})"

    def get_full_name(self):
        return self.full_name

    def get_short_name(self):
        return self.full_name.split()[0] if self.full_name else self.email

    def has_role(self, role_name):
        """Check if user has a specific role."""
        return self.roles.filter(name__iexact=role_name).exists()

    @property
    def is_site_admin(self):
        """Superusers and holders of the 'admin' role run the back office."""
        return self.is_superuser or self.has_role(Role.ADMIN)


class AuditLog(models.Model):
    """
    Audit trail for back-office and purchase actions.
    """
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                             related_name='audit_logs')
    action_type = models.CharField(max_length=50, db_index=True,
                                   help_text="e.g., create, update, delete, approve, reject")
    target_type = models.CharField(max_length=50, null=True, blank=True,
                                   help_text="e.g., purchase, promo_code, certificate")
    target_id = models.CharField(max_length=50, null=True, blank=True,
                                 help_text="ID of the target object")
    log_message = models.TextField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user', '-timestamp'], name='audit_user_ts_idx'),
            models.Index(fields=['action_type', '-timestamp'], name='audit_action_ts_idx'),
        ]

    def __str__(self):
        user_str = self.user.full_name if self.user else "System"
        return f"{user_str} - {self.action_type} - {self.timestamp}"


class SiteSettings(models.Model):
    """
    Process-wide configuration edited from the admin portal.
    Only one row exists (pk=1); read it through apps.core.config.get_site_config().
    """
    site_name = models.CharField(max_length=255, default='Mindly Academy')
    site_description = models.CharField(max_length=255, blank=True,
                                        default='Online learning platform')
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)

    # Shown to learners in the bank transfer instruction
    bank_name = models.CharField(max_length=255, blank=True)
    bank_account_number = models.CharField(max_length=64, blank=True)
    bank_account_name = models.CharField(max_length=255, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'site_settings'
        verbose_name_plural = 'Site settings'

    def __str__(self):
        return self.site_name

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)
        from .config import clear_site_config_cache
        clear_site_config_cache()

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj
