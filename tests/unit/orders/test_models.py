"""Unit tests for the Order model and its log models."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.accounts.constants import Station
from modules.orders.constants import ORDER_CODE_PREFIX, DeliveryStatus, PaymentStatus
from modules.orders.models import Order, OrderHistory

pytestmark = pytest.mark.unit


class TestOrderModel:
    def test_defaults(self, make_order):
        order = make_order()
        assert order.payment_status == PaymentStatus.UNPAID
        assert order.delivery_status == DeliveryStatus.PENDING
        assert order.is_paid is False
        assert order.is_delivered is False
        assert order.deleted_at is None

    def test_code_generated_on_first_save(self, make_order):
        order = make_order()
        today = timezone.localdate()
        assert order.code.startswith(f"{ORDER_CODE_PREFIX}{today:%y%m%d}")
        assert len(order.code) == len(ORDER_CODE_PREFIX) + 6 + 4

    def test_code_is_stable_across_saves(self, make_order):
        order = make_order()
        code = order.code
        order.note = "Hàng dễ vỡ"
        order.save()
        assert order.code == code

    def test_clean_rejects_same_stations(self):
        order = Order(
            sender_station=Station.HT,
            receiver_station=Station.HT,
            sender_name="A",
            sender_phone="0912345678",
        )
        with pytest.raises(ValidationError):
            order.clean()

    def test_database_rejects_same_stations(self, make_order):
        with pytest.raises(IntegrityError), transaction.atomic():
            make_order(sender_station=Station.SG, receiver_station=Station.SG)

    def test_database_rejects_negative_cost(self, make_order):
        with pytest.raises(IntegrityError), transaction.atomic():
            make_order(cost=Decimal("-1"))

    def test_soft_delete_hides_from_alive(self, make_order):
        order = make_order()
        order.delete()
        assert Order.objects.alive().count() == 0
        assert Order.objects.filter(deleted_at__isnull=False).count() == 1

    def test_creator_deletion_keeps_order(self, make_order, staff_ht):
        order = make_order(creator=staff_ht)
        staff_ht.delete()
        order.refresh_from_db()
        assert order.created_by_id is None
        assert order.created_by_name == "Nhân viên HT"

    def test_history_ordered_oldest_first(self, make_order):
        order = make_order()
        OrderHistory.objects.create(order=order, action="Tạo đơn", user_name="A")
        OrderHistory.objects.create(order=order, action="Cập nhật đơn", user_name="B")
        actions = list(order.history.values_list("action", flat=True))
        assert actions == ["Tạo đơn", "Cập nhật đơn"]
