"""Account domain constants: roles and the fixed station set."""

from django.db import models


class Role(models.TextChoices):
    STAFF = "STAFF", "Nhân viên"
    MANAGER = "MANAGER", "Quản lý"
    ADMIN = "ADMIN", "Quản trị"


class Station(models.TextChoices):
    HT = "HT", "Trạm HT"
    PA = "PA", "Trạm PA"
    SG = "SG", "Trạm SG"


# Roles that choose a working station at login instead of having one assigned
STATION_SELECTING_ROLES: frozenset[str] = frozenset({Role.MANAGER, Role.ADMIN})

# JWT claim carrying the station selected for the session
STATION_CLAIM = "station"

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PASSWORD_MIN_LENGTH = 8
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
USERNAME_MAX_LENGTH = 50
