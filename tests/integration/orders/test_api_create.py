"""Integration tests for POST /api/v1/orders/."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from modules.accounts.constants import Station
from modules.orders.constants import HISTORY_CREATED, PREPAID_NOTE
from modules.orders.models import Order

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/v1/orders/"


def _payload(**overrides):
    data = {
        "receiver_station": "SG",
        "sender_name": "Hoàng Văn Đức",
        "sender_phone": "0909123456",
        "receiver_name": "Ngô Thị Mai",
        "receiver_phone": "0911222333",
        "goods_type": "Phụ tùng xe máy",
        "quantity": 2,
        "cost": "75000",
    }
    data.update(overrides)
    return data


class TestCreateOrder:
    def test_staff_creates_from_own_station(self, client_for, staff_ht):
        response = client_for(staff_ht).post(ORDERS_URL, _payload(), format="json")

        assert response.status_code == 201
        assert response.data["sender_station"] == Station.HT
        assert response.data["receiver_station"] == Station.SG
        assert response.data["payment_status"] == "UNPAID"
        assert response.data["delivery_status"] == "PENDING"
        assert response.data["created_by_name"] == staff_ht.name
        assert response.data["editable"] is True
        assert [h["action"] for h in response.data["history"]] == [HISTORY_CREATED]

    def test_explicit_sender_station_kept(self, client_for, staff_ht):
        response = client_for(staff_ht).post(
            ORDERS_URL, _payload(sender_station="PA"), format="json"
        )
        assert response.status_code == 201
        assert response.data["sender_station"] == Station.PA

    def test_manager_sends_from_selected_station(self, client_for, manager):
        response = client_for(manager, Station.PA).post(
            ORDERS_URL, _payload(), format="json"
        )
        assert response.data["sender_station"] == Station.PA

    def test_prepaid_order(self, client_for, staff_ht):
        response = client_for(staff_ht).post(
            ORDERS_URL, _payload(payment_status="PAID"), format="json"
        )
        assert response.data["payment_status"] == "PAID"
        assert response.data["delivery_status"] == "PENDING"
        assert [p["note"] for p in response.data["payment_history"]] == [PREPAID_NOTE]

    def test_same_station_rejected(self, client_for, staff_sg):
        response = client_for(staff_sg).post(ORDERS_URL, _payload(), format="json")
        assert response.status_code == 400
        assert Order.objects.count() == 0

    @pytest.mark.parametrize(
        "override",
        [
            {"quantity": 0},
            {"cost": "-5000"},
            {"sender_name": ""},
            {"receiver_station": "HN"},
        ],
    )
    def test_invalid_payload_rejected(self, client_for, staff_ht, override):
        response = client_for(staff_ht).post(
            ORDERS_URL, _payload(**override), format="json"
        )
        assert response.status_code == 400
        assert Order.objects.count() == 0

    def test_missing_receiver_station_rejected(self, client_for, staff_ht):
        payload = _payload()
        del payload["receiver_station"]
        response = client_for(staff_ht).post(ORDERS_URL, payload, format="json")
        assert response.status_code == 400

    def test_store_failure_returns_503(self, client_for, staff_ht):
        with patch(
            "modules.orders.repositories.django_repository."
            "OrderDjangoRepository.create",
            side_effect=DatabaseError("disk full"),
        ):
            response = client_for(staff_ht).post(ORDERS_URL, _payload(), format="json")

        assert response.status_code == 503
        assert response.data["detail"]
        assert Order.objects.count() == 0
