"""Contracts between the order service, the event bus and its subscribers.

Order commands publish ``OrderCreated``, ``OrderPaid`` and
``OrderDelivered`` after commit; subscribers only observe, they never
change the order that raised the event.
"""

from __future__ import annotations

from typing import Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

EventT = TypeVar("EventT", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[EventT]):
    def handle(self, event: EventT) -> None: ...


class IEventBus(Protocol):
    def subscribe(
        self, event_class: Type[EventT], handler: IEventHandler[EventT]
    ) -> None: ...

    def publish(self, event: DomainEvent) -> None: ...
