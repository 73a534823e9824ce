"""
User models for the storefront admin console
Email-based authentication with a role and optional explicit permission grants.
"""

from __future__ import annotations

from typing import Any, ClassVar

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _

from .permissions import Role, get_role_level


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication"""

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any) -> User:
        """Create and return a regular user with email and password"""
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any) -> User:
        """Create and return a superuser with email and password"""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", Role.SUPER_ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Admin console user.

    permissions holds explicit grants; when empty the role defaults apply
    (see apps.users.permissions.effective_permissions).
    """

    username = None  # Remove username field, using email instead
    email = models.EmailField(_("email address"), unique=True)

    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=Role.choices,
        default=Role.VIEWER,
        help_text=_("Role that supplies default permissions and the hierarchy level"),
    )

    permissions = models.JSONField(
        _("Permissions"),
        default=list,
        blank=True,
        help_text=_('Explicit permission grants, e.g. ["products.view", "pages.*"]. Replaces role defaults.'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = []

    class Meta:
        db_table = "users"
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        indexes: ClassVar[tuple[models.Index, ...]] = (models.Index(fields=["role"], name="users_role_idx"),)

    def __str__(self) -> str:
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self) -> str:
        """Get user's full name or email if name not available"""
        full_name = super().get_full_name()
        return full_name if full_name.strip() else self.email

    @property
    def role_level(self) -> int:
        return get_role_level(self.role)
