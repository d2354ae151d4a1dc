"""Payment and delivery transitions, computed as values.

A transition is planned from the current order state without touching the
order or the store.  The repository persists the planned field changes
and log entries in one atomic unit; only after it succeeds does the
service call ``Transition.apply`` on the in-memory order.  A failed write
therefore never leaves a half-updated order behind.

Both flags move one way only.  Planning against an order that already
has the target state yields ``None`` (nothing to do, nothing to log).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.utils import timezone

from modules.orders.constants import (
    HISTORY_DELIVERED,
    HISTORY_PAID,
    PAYMENT_COLLECTED_NOTE,
    DeliveryStatus,
    PaymentStatus,
)

if TYPE_CHECKING:
    from modules.accounts.context import SessionIdentity


@dataclass(frozen=True)
class PaymentEntry:
    status: str
    changed_by_id: Any
    changed_by_name: str
    note: str
    at: datetime


@dataclass(frozen=True)
class HistoryEntry:
    action: str
    user_name: str
    at: datetime


@dataclass(frozen=True)
class Transition:
    """Field changes plus the log entries that must be written with them."""

    order_id: Any
    kind: str
    changes: Dict[str, str]
    history: HistoryEntry
    payment: Optional[PaymentEntry] = None
    previous: Dict[str, str] = field(default_factory=dict)

    def apply(self, order: Any) -> None:
        """Mirror the persisted changes onto *order*."""
        for name, value in self.changes.items():
            setattr(order, name, value)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else timezone.now()


def plan_mark_paid(
    order: Any, actor: SessionIdentity, now: Optional[datetime] = None
) -> Optional[Transition]:
    """Collect the freight charge.

    Collecting payment implies the goods were handed over, so the order is
    also marked DELIVERED.  Returns ``None`` for an already PAID order.
    """
    if order.payment_status == PaymentStatus.PAID:
        return None
    at = _now(now)
    return Transition(
        order_id=order.id,
        kind="paid",
        changes={
            "payment_status": PaymentStatus.PAID,
            "delivery_status": DeliveryStatus.DELIVERED,
        },
        previous={
            "payment_status": order.payment_status,
            "delivery_status": order.delivery_status,
        },
        history=HistoryEntry(action=HISTORY_PAID, user_name=actor.name, at=at),
        payment=PaymentEntry(
            status=PaymentStatus.PAID,
            changed_by_id=actor.account_id,
            changed_by_name=actor.name,
            note=PAYMENT_COLLECTED_NOTE,
            at=at,
        ),
    )


def plan_mark_delivered(
    order: Any, actor: SessionIdentity, now: Optional[datetime] = None
) -> Optional[Transition]:
    """Hand the goods over without touching the payment status."""
    if order.delivery_status == DeliveryStatus.DELIVERED:
        return None
    return Transition(
        order_id=order.id,
        kind="delivered",
        changes={"delivery_status": DeliveryStatus.DELIVERED},
        previous={"delivery_status": order.delivery_status},
        history=HistoryEntry(
            action=HISTORY_DELIVERED, user_name=actor.name, at=_now(now)
        ),
    )
