"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCreated, OrderDelivered, OrderPaid
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            sender_station=event.sender_station,
            receiver_station=event.receiver_station,
        )


class OrderPaidHandler(IEventHandler[OrderPaid]):
    def handle(self, event: OrderPaid) -> None:
        logger.info(
            "order.event.paid",
            order_id=str(event.aggregate_id),
            actor_name=event.actor_name,
        )


class OrderDeliveredHandler(IEventHandler[OrderDelivered]):
    def handle(self, event: OrderDelivered) -> None:
        logger.info(
            "order.event.delivered",
            order_id=str(event.aggregate_id),
            actor_name=event.actor_name,
        )


order_created_handler = OrderCreatedHandler()
order_paid_handler = OrderPaidHandler()
order_delivered_handler = OrderDeliveredHandler()
