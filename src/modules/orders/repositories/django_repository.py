"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` so an order
and its PaymentRecord / OrderHistory entries are persisted together or
not at all.

There is no version column: concurrent transitions are last-write-wins,
and transitions write only the fields they change.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.orders.models import Order, OrderHistory, PaymentRecord
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.transitions import HistoryEntry, PaymentEntry, Transition

logger = structlog.get_logger(__name__)


def _history_row(order_id: Any, entry: HistoryEntry) -> OrderHistory:
    return OrderHistory(
        order_id=order_id,
        action=entry.action,
        user_name=entry.user_name,
        created_at=entry.at,
    )


def _payment_row(order_id: Any, entry: PaymentEntry) -> PaymentRecord:
    return PaymentRecord(
        order_id=order_id,
        status=entry.status,
        changed_by_id=entry.changed_by_id,
        changed_by_name=entry.changed_by_name,
        note=entry.note,
        created_at=entry.at,
    )


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a live order with eager-loaded logs.

        Returns ``None`` for missing, soft-deleted or invalid IDs.
        """
        try:
            return (
                Order.objects.alive()
                .prefetch_related("payment_history", "history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """The live order snapshot the visibility engine works on."""
        queryset = Order.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(
        self,
        data: Dict[str, Any],
        history: HistoryEntry,
        payment: Optional[PaymentEntry] = None,
    ) -> Order:
        order = Order(**data)
        order.full_clean(exclude=["code"])
        order.save()

        _history_row(order.id, history).save()
        if payment is not None:
            _payment_row(order.id, payment).save()

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            code=order.code,
            prepaid=payment is not None,
        )
        return order

    @transaction.atomic
    def update(
        self, order: Order, changes: Dict[str, Any], history: HistoryEntry
    ) -> Order:
        # the caller's instance only changes once the row is written
        candidate = copy.copy(order)
        for field, value in changes.items():
            setattr(candidate, field, value)
        candidate.full_clean(exclude=["code"])
        candidate.save(update_fields=list(changes))
        _history_row(order.id, history).save()
        for field, value in changes.items():
            setattr(order, field, getattr(candidate, field))
        order.updated_at = candidate.updated_at

        logger.info("order.updated", order_id=str(order.id), fields=sorted(changes))
        return order

    @transaction.atomic
    def apply_transition(self, transition: Transition) -> None:
        updated = Order.objects.alive().filter(id=transition.order_id).update(
            **transition.changes, updated_at=timezone.now()
        )
        if not updated:
            raise Order.DoesNotExist(f"Order {transition.order_id} not found.")

        if transition.payment is not None:
            _payment_row(transition.order_id, transition.payment).save()
        _history_row(transition.order_id, transition.history).save()

        logger.info(
            "order.transition_persisted",
            order_id=str(transition.order_id),
            kind=transition.kind,
            changes=transition.changes,
        )

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str, deleted_by_name: str = "") -> bool:
        """Soft-delete an order by ID, recording who removed it."""
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete(deleted_by_name=deleted_by_name)
        logger.info("order.soft_deleted", order_id=str(id))
        return True
