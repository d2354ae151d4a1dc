"""Order domain exceptions.

Raised by the service layer and the visibility engine.  The API layer
catches them and translates them into HTTP responses.  Edit permission
itself is a decision value (``permissions.Denied``); ``OrderEditDenied``
only carries that decision out of a command the evaluator refused.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modules.orders.permissions import DenialReason


class OrderNotFound(Exception):
    """The order does not exist, was deleted, or is not visible to the caller."""


class AllViewForbidden(Exception):
    """A non-ADMIN identity asked for the unrestricted order view."""


class ReportForbidden(Exception):
    """Dashboards and reports are reserved to MANAGER and ADMIN."""


class OrderDeleteForbidden(Exception):
    """Only an ADMIN may delete an order."""


class OrderEditDenied(Exception):
    """The edit-permission evaluator refused the mutation."""

    def __init__(self, reason: DenialReason) -> None:
        super().__init__(reason.message)
        self.reason = reason


class InvalidOrderData(Exception):
    """Order input failed validation (e.g. same sender and receiver station)."""


class OrderStoreError(Exception):
    """The order store failed to persist a change; nothing was applied."""
