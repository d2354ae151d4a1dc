"""Account domain exceptions.

Raised by ``AccountService`` and the identity helpers.  Views translate
them into HTTP responses.
"""

from __future__ import annotations


class AccountNotFound(Exception):
    """The requested account does not exist."""


class AccountAlreadyExists(Exception):
    """An account with the same email is already provisioned."""


class AdminRequired(Exception):
    """The acting account is not an ADMIN (role re-read from the store)."""


class SelfDeletionForbidden(Exception):
    """An ADMIN tried to delete their own account."""


class StationSelectionError(Exception):
    """The session station cannot be resolved for this account."""


class InvalidStationAssignment(Exception):
    """A role/station change would leave a STAFF account without a station."""
