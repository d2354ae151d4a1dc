"""Account model: the provisioned login identity.

Business rules implemented:
- Email is the login name, unique and stored lower-cased.
- STAFF accounts carry a fixed station; MANAGER/ADMIN carry none and pick
  a working station per session (enforced by ``clean`` and a check
  constraint).
- Accounts are hard-deleted by an ADMIN: removing the row revokes every
  token issued to it, since authentication re-reads the account on each
  request.
"""

from __future__ import annotations

from typing import Any

import structlog
from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.models import PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from modules.accounts.constants import (
    NAME_MAX_LENGTH,
    STATION_SELECTING_ROLES,
    USERNAME_MAX_LENGTH,
    Role,
    Station,
)
from modules.core.models import TimestampedModel

logger = structlog.get_logger(__name__)


class AccountManager(BaseUserManager):
    use_in_migrations = True

    def _create(self, email: str, password: str | None, **extra: Any) -> Account:
        if not email:
            raise ValueError("Email is required.")
        email = self.normalize_email(email).strip().lower()
        account = self.model(email=email, **extra)
        account.set_password(password)
        account.save(using=self._db)
        return account

    def create_user(
        self, email: str, password: str | None = None, **extra: Any
    ) -> Account:
        extra.setdefault("role", Role.STAFF)
        extra.setdefault("is_staff", False)
        extra.setdefault("is_superuser", False)
        return self._create(email, password, **extra)

    def create_superuser(
        self, email: str, password: str | None = None, **extra: Any
    ) -> Account:
        extra.setdefault("role", Role.ADMIN)
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        extra.setdefault("name", email.split("@")[0])
        return self._create(email, password, **extra)


class Account(AbstractBaseUser, PermissionsMixin, TimestampedModel):
    """Employee account used to sign in at a station terminal."""

    email = models.EmailField(max_length=254, unique=True)
    name = models.CharField(max_length=NAME_MAX_LENGTH)
    username = models.CharField(max_length=USERNAME_MAX_LENGTH, blank=True, default="")
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.STAFF)
    station = models.CharField(  # noqa: DJ01
        max_length=2,
        choices=Station.choices,
        null=True,
        blank=True,
        default=None,
    )
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    objects = AccountManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        db_table = "accounts"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(role=Role.STAFF) | models.Q(station__isnull=False),
                name="accounts_staff_has_station",
            ),
        ]

    # ------------------------------------------------------------------
    # Role helpers
    # ------------------------------------------------------------------

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def selects_station(self) -> bool:
        """``True`` for roles that choose their station at login."""
        return self.role in STATION_SELECTING_ROLES

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.email:
            self.email = self.email.strip().lower()
        if self.role == Role.STAFF and not self.station:
            raise ValidationError({"station": "Staff accounts require a station."})
        if self.selects_station:
            self.station = None

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        where = self.station or "*"
        return f"{self.name} <{self.email}> [{self.role}@{where}]"
