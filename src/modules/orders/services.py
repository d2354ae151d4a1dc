"""Order service layer (Use Cases).

Orchestrates order creation, field edits, payment/delivery transitions
and the station views.  Every command takes the caller's
``SessionIdentity`` explicitly and consults the pure engines before
touching the store:

- visibility (``visibility.is_visible_to``): an order outside the
  caller's station is reported as not found;
- edit permission (``permissions.evaluate_edit``): a denial is raised as
  ``OrderEditDenied`` carrying the reason, before any write happens.

Write operations are atomic (the repository defines the unit of work).
Domain events are published on the in-process bus once the transaction
commits.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from modules.orders.constants import (
    HISTORY_CREATED,
    HISTORY_UPDATED,
    PREPAID_NOTE,
    OrderView,
    PaymentStatus,
)
from modules.orders.dtos import SAME_STATION_MESSAGE
from modules.orders.events import OrderCreated, OrderDelivered, OrderPaid
from modules.orders.exceptions import (
    InvalidOrderData,
    OrderDeleteForbidden,
    OrderEditDenied,
    OrderNotFound,
    OrderStoreError,
    ReportForbidden,
)
from modules.orders.models import Order
from modules.orders.permissions import Denied, evaluate_edit
from modules.orders.reports import Summary, summarize
from modules.orders.transitions import (
    HistoryEntry,
    PaymentEntry,
    Transition,
    plan_mark_delivered,
    plan_mark_paid,
)
from modules.orders.visibility import (
    Batch,
    OrderFilters,
    apply_filters,
    group_batches,
    is_visible_to,
    station_scope,
    visible_view,
)
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.accounts.context import SessionIdentity
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

STORE_ERROR_MESSAGE = "Không thể lưu thay đổi, vui lòng thử lại."


def _now(now: Optional[datetime] = None) -> datetime:
    return now if now is not None else timezone.now()


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(exc.messages)


class OrderService:
    """Application service for Order use-cases.

    Receives the order repository via constructor injection (DIP).
    """

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, identity: SessionIdentity, dto: CreateOrderDTO) -> Order:
        """Create a shipment order at the caller's station.

        ``sender_station`` defaults to the session station.  An order
        created as PAID (prepaid by the sender) gets its payment record
        immediately; delivery still starts PENDING.

        Raises:
            InvalidOrderData: same sender/receiver station, or a field
                rejected by model validation.
            OrderStoreError: the store rejected the write.
        """
        sender_station = str(dto.sender_station or identity.station)
        receiver_station = str(dto.receiver_station)
        if sender_station == receiver_station:
            raise InvalidOrderData(SAME_STATION_MESSAGE)

        log = logger.bind(
            account_id=str(identity.account_id),
            sender_station=sender_station,
            receiver_station=receiver_station,
        )
        log.info("order.creation_started")

        data = dto.model_dump(exclude={"sender_station", "receiver_station"})
        data.update(
            sender_station=sender_station,
            receiver_station=receiver_station,
            payment_status=str(dto.payment_status),
            created_by_id=identity.account_id,
            created_by_name=identity.name,
        )
        history = HistoryEntry(
            action=HISTORY_CREATED, user_name=identity.name, at=_now()
        )
        payment = None
        if dto.payment_status == PaymentStatus.PAID:
            payment = PaymentEntry(
                status=PaymentStatus.PAID,
                changed_by_id=identity.account_id,
                changed_by_name=identity.name,
                note=PREPAID_NOTE,
                at=history.at,
            )

        try:
            with transaction.atomic():
                order = self._order_repo.create(data, history, payment)
                order.add_domain_event(
                    OrderCreated(
                        aggregate_id=order.id,
                        sender_station=sender_station,
                        receiver_station=receiver_station,
                    )
                )
                self._publish_on_commit(order)
        except ValidationError as exc:
            log.warning("order.creation_rejected", errors=exc.messages)
            raise InvalidOrderData(_validation_message(exc)) from exc
        except DatabaseError as exc:
            log.error("order.creation_failed", error=str(exc))
            raise OrderStoreError(STORE_ERROR_MESSAGE) from exc

        log.info("order.created", order_id=str(order.id), code=order.code)
        return self._order_repo.get_by_id(str(order.id)) or order

    def update_order(
        self,
        identity: SessionIdentity,
        order_id: str,
        dto: UpdateOrderDTO,
        now: Optional[datetime] = None,
    ) -> Order:
        """Edit order fields, gated by the edit-permission evaluator.

        Raises:
            OrderNotFound: order missing or not visible to the caller.
            OrderEditDenied: evaluator refused the edit.
            InvalidOrderData: the merged order would be invalid.
            OrderStoreError: the store rejected the write; nothing changed.
        """
        order = self.get_visible_order(identity, order_id)
        self._ensure_editable(identity, order, now, action="update")

        changes = {
            name: value
            for name, value in dto.changes().items()
            if getattr(order, name) != value
        }
        sender = changes.get("sender_station", order.sender_station)
        receiver = changes.get("receiver_station", order.receiver_station)
        if sender == receiver:
            raise InvalidOrderData(SAME_STATION_MESSAGE)

        if not changes:
            return order

        history = HistoryEntry(
            action=HISTORY_UPDATED, user_name=identity.name, at=_now(now)
        )
        try:
            self._order_repo.update(order, changes, history)
        except ValidationError as exc:
            raise InvalidOrderData(_validation_message(exc)) from exc
        except DatabaseError as exc:
            logger.error("order.edit_failed", order_id=str(order.id), error=str(exc))
            raise OrderStoreError(STORE_ERROR_MESSAGE) from exc

        logger.info(
            "order.edited",
            order_id=str(order.id),
            account_id=str(identity.account_id),
            fields=sorted(changes),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    def mark_paid(
        self, identity: SessionIdentity, order_id: str, now: Optional[datetime] = None
    ) -> Order:
        """Collect the freight charge (also marks the order DELIVERED).

        Idempotent: an already PAID order is returned unchanged and no
        log entry is written.

        Raises:
            OrderNotFound: order missing or not visible to the caller.
            OrderEditDenied: evaluator refused the transition.
            OrderStoreError: the store rejected the write; nothing changed.
        """
        order = self.get_visible_order(identity, order_id)
        self._ensure_editable(identity, order, now, action="mark_paid")
        return self._transition(
            order, plan_mark_paid(order, identity, now), OrderPaid, identity
        )

    def mark_delivered(
        self, identity: SessionIdentity, order_id: str, now: Optional[datetime] = None
    ) -> Order:
        """Hand the goods over; payment status is left as is.

        Raises:
            OrderNotFound: order missing or not visible to the caller.
            OrderEditDenied: evaluator refused the transition.
            OrderStoreError: the store rejected the write; nothing changed.
        """
        order = self.get_visible_order(identity, order_id)
        self._ensure_editable(identity, order, now, action="mark_delivered")
        return self._transition(
            order, plan_mark_delivered(order, identity, now), OrderDelivered, identity
        )

    def delete_order(self, identity: SessionIdentity, order_id: str) -> None:
        """Soft-delete an order (administrative action).

        Raises:
            OrderDeleteForbidden: caller is not an ADMIN.
            OrderNotFound: order does not exist.
        """
        if not identity.is_admin:
            logger.warning(
                "order.delete_denied",
                order_id=str(order_id),
                account_id=str(identity.account_id),
            )
            raise OrderDeleteForbidden("Chỉ Admin được xóa đơn hàng.")
        deleted = self._order_repo.delete(str(order_id), deleted_by_name=identity.name)
        if not deleted:
            raise OrderNotFound(f"Order {order_id} not found.")
        logger.info(
            "order.deleted",
            order_id=str(order_id),
            account_id=str(identity.account_id),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_visible_order(self, identity: SessionIdentity, order_id: str) -> Order:
        """Retrieve a single order the caller is allowed to see.

        Raises:
            OrderNotFound: order missing, deleted, or outside the caller's
                station.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if order is None or not is_visible_to(order, identity):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_view(
        self,
        identity: SessionIdentity,
        view: str,
        filters: Optional[OrderFilters] = None,
        now: Optional[datetime] = None,
    ) -> List[Order]:
        """Inbound / outbound / all view of the current snapshot.

        Raises:
            AllViewForbidden: the ALL view was requested by a non-ADMIN.
        """
        return visible_view(self._order_repo.list(), identity, view, filters, now)

    def batches(
        self,
        identity: SessionIdentity,
        filters: Optional[OrderFilters] = None,
        now: Optional[datetime] = None,
    ) -> List[Batch]:
        """Inbound orders grouped by sender station and day."""
        return group_batches(
            self.list_view(identity, OrderView.INBOUND, filters, now)
        )

    def summary(
        self,
        identity: SessionIdentity,
        filters: Optional[OrderFilters] = None,
        now: Optional[datetime] = None,
    ) -> Summary:
        """Aggregates for the dashboard and reports screens.

        ADMIN aggregates every order, MANAGER only orders touching their
        station.

        Raises:
            ReportForbidden: the caller is a STAFF member.
        """
        if not (identity.is_admin or identity.is_manager):
            raise ReportForbidden("Chỉ Quản lý hoặc Admin được xem báo cáo.")
        orders = station_scope(self._order_repo.list(), identity)
        if filters is not None:
            orders = apply_filters(orders, filters, OrderView.ALL, now)
        return summarize(orders)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_editable(
        self,
        identity: SessionIdentity,
        order: Order,
        now: Optional[datetime],
        action: str,
    ) -> None:
        decision = evaluate_edit(identity, order, now)
        if isinstance(decision, Denied):
            logger.warning(
                "order.edit_denied",
                order_id=str(order.id),
                account_id=str(identity.account_id),
                action=action,
                reason=decision.reason.code,
            )
            raise OrderEditDenied(decision.reason)

    def _transition(
        self,
        order: Order,
        transition: Optional[Transition],
        event_class: Any,
        identity: SessionIdentity,
    ) -> Order:
        log = logger.bind(order_id=str(order.id), account_id=str(identity.account_id))
        if transition is None:
            log.info("order.transition_skipped", reason="already_applied")
            return order

        try:
            with transaction.atomic():
                self._order_repo.apply_transition(transition)
                order.add_domain_event(
                    event_class(aggregate_id=order.id, actor_name=identity.name)
                )
                self._publish_on_commit(order)
        except Order.DoesNotExist as exc:
            order.clear_domain_events()
            raise OrderNotFound(f"Order {order.id} not found.") from exc
        except DatabaseError as exc:
            order.clear_domain_events()
            log.error("order.transition_failed", kind=transition.kind, error=str(exc))
            raise OrderStoreError(STORE_ERROR_MESSAGE) from exc

        transition.apply(order)
        log.info(f"order.mark_{transition.kind}", changes=transition.changes)
        return self._order_repo.get_by_id(str(order.id)) or order

    def _publish_on_commit(self, order: Order) -> None:
        events = order.domain_events
        order.clear_domain_events()

        def publish() -> None:
            for event in events:
                event_bus.publish(event)

        transaction.on_commit(publish)
