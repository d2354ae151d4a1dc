"""Account DTOs for the Service Layer.

Pydantic v2 contracts between the API layer and ``AccountService``.
Input rules mirror the employee-provisioning validation: email pattern,
minimum password length, trimmed display name, known role, and the
station rule (STAFF need one, MANAGER/ADMIN never store one).

- ``RegisterEmployeeDTO``: input for provisioning a new account.
- ``ReassignAccountDTO``: input for changing role and/or station.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.accounts.constants import (
    EMAIL_PATTERN,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
)

_EMAIL_RE = re.compile(EMAIL_PATTERN)


class RoleEnum(StrEnum):
    STAFF = "STAFF"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class StationEnum(StrEnum):
    HT = "HT"
    PA = "PA"
    SG = "SG"


def _station_for_role(
    role: Optional[RoleEnum], station: Optional[StationEnum]
) -> Optional[StationEnum]:
    if role == RoleEnum.STAFF and station is None:
        raise ValueError("Nhân viên (STAFF) phải được gán trạm.")
    if role in (RoleEnum.MANAGER, RoleEnum.ADMIN):
        return None
    return station


class RegisterEmployeeDTO(BaseModel):
    """Immutable DTO for the admin "create employee" action."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: str
    name: str
    role: RoleEnum
    username: str = ""
    station: Optional[StationEnum] = None

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        value = (v or "").strip().lower()
        if not _EMAIL_RE.match(value):
            raise ValueError("Email không hợp lệ.")
        return value

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v or "") < PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Mật khẩu phải có ít nhất {PASSWORD_MIN_LENGTH} ký tự."
            )
        return v

    @field_validator("name")
    @classmethod
    def name_trimmed(cls, v: str) -> str:
        value = (v or "").strip()
        if len(value) < NAME_MIN_LENGTH:
            raise ValueError(f"Tên phải có ít nhất {NAME_MIN_LENGTH} ký tự.")
        return value[:NAME_MAX_LENGTH]

    @field_validator("username")
    @classmethod
    def username_trimmed(cls, v: str) -> str:
        return (v or "").strip()[:USERNAME_MAX_LENGTH]

    @model_validator(mode="after")
    def station_matches_role(self):
        object.__setattr__(self, "station", _station_for_role(self.role, self.station))
        return self


class ReassignAccountDTO(BaseModel):
    """Immutable DTO for an admin role/station reassignment."""

    model_config = ConfigDict(frozen=True)

    role: Optional[RoleEnum] = None
    station: Optional[StationEnum] = None
