"""Unit tests for domain events and the in-process bus."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.accounts.constants import Station
from modules.orders.events import OrderCreated, OrderPaid
from modules.orders.models import Order
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class _Recorder:
    def __init__(self) -> None:
        self.events = []

    def handle(self, event) -> None:
        self.events.append(event)


def test_order_registers_and_clears_domain_events():
    order = Order(sender_station=Station.HT, receiver_station=Station.PA)

    assert order.domain_events == []

    event = OrderCreated(
        aggregate_id=order.id, sender_station="HT", receiver_station="PA"
    )
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderCreated"

    order.clear_domain_events()
    assert order.domain_events == []


def test_bus_dispatches_by_exact_event_class():
    bus = InMemoryEventBus()
    recorder = _Recorder()
    bus.subscribe(OrderPaid, recorder)

    paid = OrderPaid(aggregate_id=uuid4(), actor_name="Nhân viên PA")
    bus.publish(paid)
    bus.publish(OrderCreated(aggregate_id=uuid4()))

    assert recorder.events == [paid]


def test_subscribing_twice_registers_once():
    bus = InMemoryEventBus()
    recorder = _Recorder()
    bus.subscribe(OrderPaid, recorder)
    bus.subscribe(OrderPaid, recorder)
    assert bus.handlers_for(OrderPaid) == [recorder]
