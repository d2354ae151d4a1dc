"""Unit tests for the shared soft-delete base model (exercised via Order)."""

from __future__ import annotations

import pytest

from modules.orders.models import Order

pytestmark = pytest.mark.unit


class TestSoftDelete:
    def test_instance_delete_sets_deleted_at(self, make_order):
        order = make_order()
        assert order.delete() == (1, {"orders.Order": 1})
        assert order.is_deleted
        assert Order.objects.filter(id=order.id).exists()

    def test_second_delete_is_noop(self, make_order):
        order = make_order()
        order.delete()
        assert order.delete() == (0, {})

    def test_queryset_delete_is_soft(self, make_order):
        make_order()
        make_order()
        count, _ = Order.objects.all().delete()
        assert count == 2
        assert Order.objects.alive().count() == 0
        assert Order.objects.count() == 2

    def test_records_who_deleted(self, make_order):
        order = make_order()
        order.delete(deleted_by_name="Quản trị")
        order.refresh_from_db()
        assert order.deleted_by_name == "Quản trị"

    def test_queryset_delete_records_who_deleted(self, make_order):
        make_order()
        Order.objects.all().delete(deleted_by_name="Quản trị")
        assert set(Order.objects.values_list("deleted_by_name", flat=True)) == {
            "Quản trị"
        }

    def test_update_fields_always_bumps_updated_at(self, make_order):
        order = make_order()
        before = order.updated_at
        order.note = "Giao giờ hành chính"
        order.save(update_fields=["note"])
        order.refresh_from_db()
        assert order.updated_at >= before
        assert order.note == "Giao giờ hành chính"
