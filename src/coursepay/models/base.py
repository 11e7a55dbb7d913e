# coursepay/models/base.py
"""
Base model classes providing common functionality for all models.

This module provides:
- BaseModel: Audit columns plus the is_active / is_deleted soft-delete flags
- AppendOnlyModel: Rows that can be inserted but never updated or deleted
"""

from typing import Any

from django.db import models


class LiveQuerySet(models.QuerySet):
    """QuerySet helpers for models carrying the soft-delete flags."""

    def live(self) -> "LiveQuerySet":
        """Rows that are not soft-deleted."""
        return self.filter(is_deleted=0)

    def enabled(self) -> "LiveQuerySet":
        """Rows that are active and not soft-deleted."""
        return self.filter(is_active=1, is_deleted=0)


class BaseModel(models.Model):
    """
    Abstract base model with common fields for admin-authored records.

    Provides:
    - is_active: Active status flag
    - is_deleted: Soft delete flag
    - created_at / updated_at: Auto-populated timestamps
    - created_by / updated_by: IDs of the users who wrote the record
    """

    is_active = models.IntegerField(
        db_column="IsActive",
        blank=True,
        null=True,
        default=1,
        help_text="Flag indicating if the record is active (1=active, 0=inactive)",
    )
    is_deleted = models.IntegerField(
        db_column="IsDeleted",
        blank=True,
        null=True,
        default=0,
        help_text="Flag indicating if the record is soft-deleted (1=deleted, 0=not deleted)",
    )
    created_at = models.DateTimeField(
        db_column="CreatedAt",
        auto_now_add=True,
        null=True,
        help_text="Timestamp when the record was created",
    )
    updated_at = models.DateTimeField(
        db_column="UpdatedAt",
        auto_now=True,
        null=True,
        help_text="Timestamp when the record was last updated",
    )
    created_by = models.IntegerField(
        db_column="CreatedBy",
        blank=True,
        null=True,
        help_text="ID of the user who created this record",
    )
    updated_by = models.IntegerField(
        db_column="UpdatedBy",
        blank=True,
        null=True,
        help_text="ID of the user who last updated this record",
    )

    objects = LiveQuerySet.as_manager()

    class Meta:
        abstract = True
        get_latest_by = "created_at"

    def soft_delete(self, user_id: int | None = None) -> None:
        """Mark the record as deleted without removing it from the database."""
        self.is_deleted = 1
        self.is_active = 0
        self.updated_by = user_id
        self.save(update_fields=["is_deleted", "is_active", "updated_by", "updated_at"])

    def deactivate(self, user_id: int | None = None) -> None:
        """Soft-disable the record; it stays visible to history and reports."""
        self.is_active = 0
        self.updated_by = user_id
        self.save(update_fields=["is_active", "updated_by", "updated_at"])

    def activate(self, user_id: int | None = None) -> None:
        """Mark the record as active."""
        self.is_active = 1
        self.updated_by = user_id
        self.save(update_fields=["is_active", "updated_by", "updated_at"])


class AppendOnlyError(Exception):
    """Raised when code tries to rewrite or remove an append-only row."""


class AppendOnlyQuerySet(models.QuerySet):
    def update(self, **kwargs: Any) -> int:
        raise AppendOnlyError(f"{self.model.__name__} rows cannot be updated.")

    def delete(self) -> tuple[int, dict[str, int]]:
        raise AppendOnlyError(f"{self.model.__name__} rows cannot be deleted.")


class AppendOnlyModel(models.Model):
    """
    Abstract base for audit rows.

    Rows are inserted once; saving an existing row, deleting it, or bulk
    updating/deleting through the queryset raises AppendOnlyError.
    """

    created_at = models.DateTimeField(
        db_column="CreatedAt",
        auto_now_add=True,
        help_text="Timestamp when the entry was recorded",
    )

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        abstract = True
        get_latest_by = "created_at"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise AppendOnlyError(f"{type(self).__name__} entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> tuple[int, dict[str, int]]:
        raise AppendOnlyError(f"{type(self).__name__} entries cannot be deleted.")
