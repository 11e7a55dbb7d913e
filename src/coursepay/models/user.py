# coursepay/models/user.py
"""
User and authentication-related models.

This module contains:
- Role: Learner / admin role constants carried in JWT claims
- UserManager: Custom manager for creating users
- User: Email-authenticated account used by learners and payment admins
"""

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import models

from .base import BaseModel


class Role:
    """User role constants."""

    ADMIN = "Admin"
    USER = "User"

    CHOICES = [
        (ADMIN, "Administrator"),
        (USER, "Learner"),
    ]


class UserManager(BaseUserManager):
    """
    Custom manager for User model.

    Provides create_user() and create_superuser() methods
    compatible with Django's auth system.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and return a learner account with an email and password.
        """
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        extra_fields.setdefault("role", Role.USER)
        extra_fields.setdefault("is_active", 1)
        extra_fields.setdefault("is_deleted", 0)
        extra_fields.setdefault("is_staff", False)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and return an admin who can verify payments.
        """
        extra_fields.setdefault("role", Role.ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, BaseModel):
    """
    Account model for learners and admins.

    Extends AbstractBaseUser (Django auth) and BaseModel (timestamps/soft-delete).
    Learners submit payments and refund requests; admins verify them.
    """

    user_id = models.AutoField(
        db_column="UserID",
        primary_key=True,
        help_text="Unique identifier for the user",
    )
    full_name = models.CharField(
        db_column="FullName",
        max_length=255,
        help_text="User's full name",
    )
    email = models.CharField(
        db_column="Email",
        unique=True,
        max_length=255,
        help_text="User's email address (used for login and payment notices)",
    )
    password = models.CharField(
        db_column="PasswordHash",
        max_length=255,
        help_text="Hashed password",
    )
    role = models.CharField(
        db_column="Role",
        max_length=12,
        choices=Role.CHOICES,
        help_text="User role determining permissions",
    )
    phone = models.CharField(
        db_column="Phone",
        max_length=20,
        blank=True,
        null=True,
        help_text="Contact number, used for mobile-wallet payment follow-ups",
    )

    is_staff = models.BooleanField(
        default=False,
        help_text="Designates whether the user can log into the admin site.",
    )
    is_superuser = models.BooleanField(
        default=False,
        help_text="Designates that this user has all permissions.",
    )
    last_login = models.DateTimeField(
        db_column="LastLogin",
        blank=True,
        null=True,
        help_text="Last login timestamp",
    )

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        managed = True
        db_table = "Users"
        verbose_name = "User"
        verbose_name_plural = "Users"
        indexes = [
            models.Index(fields=["email", "is_active"], name="user_email_active_idx"),
            models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
        ]
        app_label = "coursepay"

    def __str__(self) -> str:
        return f"{self.full_name} ({self.email})"

    @property
    def id(self) -> int:
        """Alias for user_id to support generic access patterns."""
        return self.user_id

    def clean(self) -> None:
        """Validate email format before saving."""
        if self.email:
            try:
                validate_email(self.email)
            except ValidationError:
                raise ValidationError(
                    {"email": "Enter a valid email address."}
                ) from None

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def has_perm(self, perm, obj=None) -> bool:
        if self.is_superuser:
            return True
        return self.role == Role.ADMIN

    def has_module_perms(self, app_label) -> bool:
        if self.is_superuser:
            return True
        return self.role == Role.ADMIN
