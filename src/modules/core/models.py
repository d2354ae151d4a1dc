"""Abstract models shared by the accounts and orders modules.

``TimestampedModel`` gives every row a UUIDv7 key and creation/update
stamps.  ``SoftDeleteModel`` adds the administrative delete used for
orders: the row stays in the table with ``deleted_at`` set and the name
of the admin who removed it, and every station view skips it.

``created_at`` defaults to ``timezone.now`` rather than ``auto_now_add``
so seed data can backdate orders; the calendar-day edit window and the
batch grouping both read it.
"""

from __future__ import annotations

from typing import Any

import uuid6
from django.db import models
from django.utils import timezone


class TimestampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args: Any, **kwargs: Any) -> None:
        # auto_now is skipped when update_fields leaves it out
        fields = kwargs.get("update_fields")
        if fields is not None and "updated_at" not in fields:
            kwargs["update_fields"] = [*fields, "updated_at"]
        super().save(*args, **kwargs)


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self) -> SoftDeleteQuerySet:
        return self.filter(deleted_at__isnull=True)

    def delete(self, deleted_by_name: str = "") -> tuple[int, dict[str, int]]:
        """Mark every live row in the queryset as deleted."""
        stamp = timezone.now()
        count = self.alive().update(
            deleted_at=stamp, deleted_by_name=deleted_by_name, updated_at=stamp
        )
        return count, {self.model._meta.label: count}


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Unfiltered manager; call ``alive()`` to hide deleted rows."""


class SoftDeleteModel(TimestampedModel):
    deleted_at = models.DateTimeField(null=True, blank=True, default=None, db_index=True)
    deleted_by_name = models.CharField(max_length=100, blank=True, default="")

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def delete(
        self, using: Any = None, keep_parents: bool = False, deleted_by_name: str = ""
    ) -> tuple[int, dict[str, int]]:
        """Soft delete; returns ``(0, {})`` when the row is already deleted."""
        if self.is_deleted:
            return 0, {}
        self.deleted_at = timezone.now()
        self.deleted_by_name = deleted_by_name
        self.save(update_fields=["deleted_at", "deleted_by_name"])
        return 1, {self._meta.label: 1}
