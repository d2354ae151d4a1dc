"""Unit tests for the Django order repository's field edits."""

from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.orders.constants import HISTORY_UPDATED
from modules.orders.models import Order, OrderHistory
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.transitions import HistoryEntry

pytestmark = pytest.mark.unit


def _history():
    return HistoryEntry(action=HISTORY_UPDATED, user_name="Tester", at=timezone.now())


class TestUpdate:
    def test_applies_changes_and_appends_history(self, staff_ht, make_order):
        order = make_order(staff_ht, quantity=1)
        OrderDjangoRepository().update(order, {"quantity": 4}, _history())

        assert order.quantity == 4
        assert Order.objects.get(id=order.id).quantity == 4
        assert OrderHistory.objects.filter(order=order).count() == 1

    def test_rejected_changes_leave_instance_untouched(self, staff_ht, make_order):
        order = make_order(staff_ht, quantity=1, note="gốc")
        with pytest.raises(ValidationError):
            OrderDjangoRepository().update(
                order, {"note": "mới", "receiver_station": "XX"}, _history()
            )

        assert order.note == "gốc"
        assert order.receiver_station == "PA"
        assert Order.objects.get(id=order.id).note == "gốc"
        assert not OrderHistory.objects.filter(order=order).exists()
