"""Edit-permission evaluator for orders.

A single decision table answers "may this identity mutate this order?"
(field edits as well as payment/delivery transitions).  Rows are evaluated
top to bottom, first match wins:

======== =========== ================== ===========================
Role     Owns order  Created today      Result
======== =========== ================== ===========================
(none)   -           -                  Denied(NOT_AUTHENTICATED)
ADMIN    -           -                  Allowed
MANAGER  -           -                  Allowed
STAFF    no          -                  Denied(NOT_OWNER)
STAFF    yes         no                 Denied(TOO_OLD)
STAFF    yes         yes                Allowed
======== =========== ================== ===========================

"Created today" is a local calendar-day comparison (midnight to midnight
in ``settings.TIME_ZONE``), not a rolling 24 hour window: an order created
at 23:59 is closed to its STAFF creator at 00:00.

Everything here is pure: no I/O, no mutation of the identity or the order.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Optional, Union

from django.utils import timezone

from modules.accounts.constants import Role

if TYPE_CHECKING:
    from modules.accounts.context import SessionIdentity


class DenialReason(enum.Enum):
    """Why an edit was refused, with the message shown to the employee."""

    NOT_AUTHENTICATED = "Vui lòng đăng nhập lại."
    NOT_OWNER = "Bạn chỉ được sửa đơn do chính mình tạo."
    TOO_OLD = "Đơn đã quá ngày tạo, không thể chỉnh sửa."

    @property
    def code(self) -> str:
        return self.name

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class Allowed:
    allowed: bool = True


@dataclass(frozen=True)
class Denied:
    reason: DenialReason
    allowed: bool = False


EditDecision = Union[Allowed, Denied]


def local_date(value: datetime) -> date:
    """Calendar date of *value* in the configured local time zone."""
    if timezone.is_naive(value):
        return value.date()
    return timezone.localtime(value).date()


def evaluation_date(now: Optional[datetime]) -> date:
    return local_date(now) if now is not None else timezone.localdate()


def owns(identity: SessionIdentity, order: Any) -> bool:
    created_by_id = getattr(order, "created_by_id", None)
    return created_by_id is not None and str(created_by_id) == str(
        identity.account_id
    )


def is_within_edit_window(order: Any, now: Optional[datetime] = None) -> bool:
    """``True`` when *order* was created on the same local calendar day as *now*.

    Orders without a creation timestamp are never in the window.
    """
    created_at = getattr(order, "created_at", None) if order is not None else None
    if created_at is None:
        return False
    return local_date(created_at) == evaluation_date(now)


def evaluate_edit(
    identity: Optional[SessionIdentity],
    order: Any,
    now: Optional[datetime] = None,
) -> EditDecision:
    """Apply the decision table to ``(identity, order)`` at instant *now*."""
    if identity is None:
        return Denied(DenialReason.NOT_AUTHENTICATED)
    if identity.role in (Role.ADMIN, Role.MANAGER):
        return Allowed()
    if not owns(identity, order):
        return Denied(DenialReason.NOT_OWNER)
    if not is_within_edit_window(order, now):
        return Denied(DenialReason.TOO_OLD)
    return Allowed()


def can_edit(
    identity: Optional[SessionIdentity], order: Any, now: Optional[datetime] = None
) -> bool:
    return evaluate_edit(identity, order, now).allowed


def shows_edit_affordance(
    identity: Optional[SessionIdentity], order: Any, now: Optional[datetime] = None
) -> bool:
    """Whether list screens should offer an edit button for *order*.

    ADMIN always; everyone else only inside the edit window, and STAFF
    additionally only on their own orders.
    """
    if identity is None:
        return False
    if identity.role == Role.ADMIN:
        return True
    if not is_within_edit_window(order, now):
        return False
    return identity.role != Role.STAFF or owns(identity, order)
