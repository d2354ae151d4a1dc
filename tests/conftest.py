from __future__ import annotations

import itertools
from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from modules.accounts.constants import STATION_CLAIM, Role, Station
from modules.accounts.context import SessionIdentity
from modules.accounts.models import Account
from modules.orders.models import Order

DEFAULT_PASSWORD = "matkhau123"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_account():
    counter = itertools.count(1)

    def _make(role=Role.STAFF, station=Station.HT, name=None, email=None):
        n = next(counter)
        return Account.objects.create_user(
            email or f"nv{n}@tranghoa.vn",
            DEFAULT_PASSWORD,
            name=name or f"Nhân viên {n}",
            role=role,
            station=station if role == Role.STAFF else None,
        )

    return _make


@pytest.fixture()
def admin(make_account):
    return make_account(Role.ADMIN, name="Quản trị", email="admin@tranghoa.vn")


@pytest.fixture()
def manager(make_account):
    return make_account(Role.MANAGER, name="Quản lý", email="manager@tranghoa.vn")


@pytest.fixture()
def staff_ht(make_account):
    return make_account(
        Role.STAFF, Station.HT, name="Nhân viên HT", email="ht@tranghoa.vn"
    )


@pytest.fixture()
def staff_pa(make_account):
    return make_account(
        Role.STAFF, Station.PA, name="Nhân viên PA", email="pa@tranghoa.vn"
    )


@pytest.fixture()
def staff_sg(make_account):
    return make_account(
        Role.STAFF, Station.SG, name="Nhân viên SG", email="sg@tranghoa.vn"
    )


@pytest.fixture()
def identity_of():
    def _identity(account, station=None):
        return SessionIdentity.establish(account, station)

    return _identity


@pytest.fixture()
def client_for():
    """APIClient authenticated as *account* working at *station*."""

    def _client(account, station=None):
        refresh = RefreshToken.for_user(account)
        selected = station or account.station
        if selected:
            refresh[STATION_CLAIM] = selected
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_order():
    def _make(
        creator=None,
        sender_station=Station.HT,
        receiver_station=Station.PA,
        **fields,
    ):
        data = {
            "sender_name": "Nguyễn Thị Lan",
            "sender_phone": "0912345678",
            "receiver_name": "Trần Văn Bình",
            "receiver_phone": "0987654321",
            "goods_type": "Thùng carton",
            "quantity": 1,
            "cost": Decimal("50000"),
        }
        data.update(fields)
        return Order.objects.create(
            sender_station=sender_station,
            receiver_station=receiver_station,
            created_by=creator,
            created_by_name=creator.name if creator else "",
            **data,
        )

    return _make
