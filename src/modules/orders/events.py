"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created at a sender station."""

    sender_station: str = ""
    receiver_station: str = ""


@dataclass(frozen=True)
class OrderPaid(DomainEvent):
    """Raised when the freight charge of an order is collected."""

    actor_name: str = ""


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    """Raised when an order is handed over to its receiver."""

    actor_name: str = ""
