"""Account DRF serializers.

``StationTokenObtainPairSerializer`` is the login contract: credentials
plus the working station.  The issued refresh/access pair carries the
resolved station in the ``station`` claim (copied into refreshed access
tokens by SimpleJWT).
"""

from __future__ import annotations

import structlog
from django.contrib.auth.models import update_last_login
from rest_framework import serializers
from rest_framework_simplejwt.serializers import (
    TokenObtainPairSerializer,
    TokenObtainSerializer,
)
from rest_framework_simplejwt.settings import api_settings

from modules.accounts.constants import STATION_CLAIM, Role, Station
from modules.accounts.context import SessionIdentity
from modules.accounts.exceptions import StationSelectionError
from modules.accounts.models import Account

logger = structlog.get_logger(__name__)


class IdentitySerializer(serializers.Serializer):
    """Read-only view of a ``SessionIdentity``."""

    account_id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True)
    station = serializers.CharField(read_only=True)


class StationTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Login: verify credentials, resolve the session station, issue tokens."""

    station = serializers.ChoiceField(
        choices=Station.choices, required=False, allow_null=True
    )

    def validate(self, attrs):
        attrs[self.username_field] = attrs[self.username_field].strip().lower()
        # Authenticates and sets ``self.user``; tokens are minted below once
        # the station is known.
        data = TokenObtainSerializer.validate(self, attrs)

        try:
            identity = SessionIdentity.establish(self.user, attrs.get("station"))
        except StationSelectionError as exc:
            raise serializers.ValidationError({"station": str(exc)}) from exc

        refresh = self.get_token(self.user)
        refresh[STATION_CLAIM] = identity.station

        data["refresh"] = str(refresh)
        data["access"] = str(refresh.access_token)
        data["identity"] = IdentitySerializer(identity).data

        if api_settings.UPDATE_LAST_LOGIN:
            update_last_login(None, self.user)

        logger.info(
            "auth.login_succeeded",
            account_id=str(identity.account_id),
            role=identity.role,
            station=identity.station,
        )
        return data


class AccountSerializer(serializers.ModelSerializer):
    """Read serializer for accounts (never exposes the password hash)."""

    class Meta:
        model = Account
        fields = [
            "id",
            "email",
            "name",
            "username",
            "role",
            "station",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class RegisterEmployeeSerializer(serializers.Serializer):
    """Shape check for the create-employee payload (rules live in the DTO)."""

    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    name = serializers.CharField()
    role = serializers.ChoiceField(choices=Role.choices)
    username = serializers.CharField(required=False, default="", allow_blank=True)
    station = serializers.ChoiceField(
        choices=Station.choices, required=False, allow_null=True, default=None
    )


class ReassignAccountSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    station = serializers.ChoiceField(
        choices=Station.choices, required=False, allow_null=True
    )
