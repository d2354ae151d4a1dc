"""Session identity: the resolved (account, selected station) pair.

The identity is an explicit value handed to every visibility and
permission function; nothing reads it from ambient state.  It is rebuilt
on each request from the account row the authentication backend just
loaded, so role and name always come from the account store.  The only
value taken from the token is the station a MANAGER/ADMIN selected at
login; a STAFF session is always pinned to the account's own station.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from modules.accounts.constants import STATION_CLAIM, Role, Station
from modules.accounts.exceptions import StationSelectionError

if TYPE_CHECKING:
    from modules.accounts.models import Account


@dataclass(frozen=True)
class SessionIdentity:
    """Read-only identity of the signed-in employee for one session."""

    account_id: UUID
    name: str
    role: str
    station: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    @property
    def is_staff_member(self) -> bool:
        return self.role == Role.STAFF

    @classmethod
    def establish(
        cls, account: Account, selected_station: Optional[str] = None
    ) -> SessionIdentity:
        """Bind *account* to its working station for the session.

        STAFF ignore *selected_station* and get their assigned station.
        MANAGER/ADMIN must pick one of the fixed stations.

        Raises:
            StationSelectionError: no valid station can be resolved.
        """
        if account.role == Role.STAFF:
            if not account.station:
                raise StationSelectionError(
                    "Tài khoản nhân viên chưa được gán trạm."
                )
            station = account.station
        else:
            if selected_station not in Station.values:
                raise StationSelectionError("Vui lòng chọn trạm làm việc hợp lệ.")
            station = selected_station

        return cls(
            account_id=account.id,
            name=account.name,
            role=account.role,
            station=station,
        )


def selected_station_from(claims: Any) -> Optional[str]:
    """Read the session station claim from a validated token (or ``None``)."""
    if claims is None:
        return None
    value = claims.get(STATION_CLAIM)
    return value if isinstance(value, str) else None


def session_identity(request: Any) -> Optional[SessionIdentity]:
    """Resolve the identity of an authenticated DRF request.

    Returns ``None`` for anonymous requests.

    Raises:
        StationSelectionError: the token carries no usable station.
    """
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return SessionIdentity.establish(user, selected_station_from(request.auth))
