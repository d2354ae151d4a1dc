"""JWT authentication that re-resolves the account on every request.

Extends SimpleJWT's ``JWTAuthentication``: the token only proves *who*
the caller is.  The account row is loaded fresh from the database, so a
role change or a deleted account takes effect on the very next request,
and cached claims such as role are never trusted.

Security decisions
------------------
* **Fail Closed** — any decode / validation error returns 401.
* A token whose ``station`` claim cannot be turned into a session identity
  (e.g. a MANAGER token without a station) is rejected with 401.
"""

from __future__ import annotations

import structlog
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from modules.accounts.context import SessionIdentity, selected_station_from
from modules.accounts.exceptions import StationSelectionError

logger = structlog.get_logger(__name__)


class StationJWTAuthentication(JWTAuthentication):
    """DRF authentication class for station-bound Bearer tokens."""

    def authenticate(self, request):
        """Return ``(Account, token)`` or ``None`` (no credentials)."""
        result = super().authenticate(request)
        if result is None:
            return None

        account, token = result
        try:
            identity = SessionIdentity.establish(
                account, selected_station_from(token)
            )
        except StationSelectionError as exc:
            logger.warning(
                "auth.station_unresolved",
                account_id=str(account.id),
                role=account.role,
            )
            raise AuthenticationFailed(str(exc)) from exc

        structlog.contextvars.bind_contextvars(
            account_id=str(identity.account_id),
            role=identity.role,
            station=identity.station,
        )
        return account, token
