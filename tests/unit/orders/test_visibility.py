"""Unit tests for the visibility / partition engine.

Covers:
- Inbound / outbound partition by the identity's station.
- ALL view restricted to ADMIN.
- Secondary filters (date keywords, exact date, range, counterpart
  station, payment status, search) and their fail-open behaviour.
- Deterministic newest-first ordering.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from modules.accounts.constants import Role, Station
from modules.accounts.context import SessionIdentity
from modules.orders.constants import OrderView, PaymentStatus
from modules.orders.exceptions import AllViewForbidden
from modules.orders.visibility import (
    OrderFilters,
    all_orders,
    apply_filters,
    date_predicate,
    inbound,
    is_visible_to,
    outbound,
    partition,
    visible_view,
)

pytestmark = pytest.mark.unit

VN = ZoneInfo("Asia/Ho_Chi_Minh")
NOW = datetime(2024, 5, 15, 10, 0, tzinfo=VN)


def _identity(role=Role.STAFF, station=Station.HT):
    return SessionIdentity(
        account_id=uuid4(), name="Tester", role=role, station=station
    )


def _order(sender, receiver, days_ago=0, hour=9, **extra):
    created = (NOW - timedelta(days=days_ago)).replace(hour=hour, minute=0)
    fields = {
        "id": uuid4(),
        "code": f"VD{created:%y%m%d}{1000 + days_ago}",
        "sender_station": sender,
        "receiver_station": receiver,
        "created_at": created,
        "sender_name": "Nguyễn Thị Lan",
        "sender_phone": "0912345678",
        "receiver_name": "Trần Văn Bình",
        "receiver_phone": "0987654321",
        "payment_status": PaymentStatus.UNPAID,
        "quantity": 1,
        "cost": Decimal("30000"),
    }
    fields.update(extra)
    return SimpleNamespace(**fields)


@pytest.fixture()
def snapshot():
    return [
        _order(Station.PA, Station.HT, days_ago=0),
        _order(Station.HT, Station.SG, days_ago=1),
        _order(Station.SG, Station.HT, days_ago=2, payment_status=PaymentStatus.PAID),
        _order(Station.PA, Station.SG, days_ago=0),
        _order(Station.HT, Station.PA, days_ago=40),
    ]


class TestPartition:
    def test_inbound_contains_only_orders_to_my_station(self, snapshot):
        result = inbound(snapshot, _identity())
        assert result
        assert all(o.receiver_station == Station.HT for o in result)
        assert len(result) == 2

    def test_outbound_contains_only_orders_from_my_station(self, snapshot):
        result = outbound(snapshot, _identity())
        assert all(o.sender_station == Station.HT for o in result)
        assert len(result) == 2

    def test_station_with_no_traffic_gets_empty_views(self):
        orders = [_order(Station.PA, Station.SG)]
        me = _identity(station=Station.HT)
        assert inbound(orders, me) == []
        assert outbound(orders, me) == []

    def test_same_station_order_appears_in_both_views(self):
        looped = _order(Station.HT, Station.HT)
        me = _identity()
        assert inbound([looped], me) == [looped]
        assert outbound([looped], me) == [looped]

    def test_all_view_for_admin_returns_everything(self, snapshot):
        result = all_orders(snapshot, _identity(Role.ADMIN))
        assert len(result) == len(snapshot)

    @pytest.mark.parametrize("role", [Role.STAFF, Role.MANAGER])
    def test_all_view_rejected_for_non_admin(self, snapshot, role):
        with pytest.raises(AllViewForbidden):
            all_orders(snapshot, _identity(role))

    def test_partition_dispatches_on_view(self, snapshot):
        me = _identity()
        assert partition(snapshot, me, OrderView.INBOUND) == inbound(snapshot, me)
        assert partition(snapshot, me, "OUTBOUND") == outbound(snapshot, me)

    def test_results_sorted_newest_first(self, snapshot):
        result = outbound(snapshot, _identity())
        stamps = [o.created_at for o in result]
        assert stamps == sorted(stamps, reverse=True)

    def test_ties_broken_deterministically(self):
        a = _order(Station.PA, Station.HT)
        b = _order(Station.SG, Station.HT)
        me = _identity()
        assert inbound([a, b], me) == inbound([b, a], me)

    def test_snapshot_not_modified(self, snapshot):
        before = list(snapshot)
        inbound(snapshot, _identity())
        apply_filters(snapshot, OrderFilters(search="lan"), OrderView.ALL, NOW)
        assert snapshot == before


class TestVisibility:
    def test_staff_sees_orders_touching_station(self):
        me = _identity(station=Station.PA)
        assert is_visible_to(_order(Station.HT, Station.PA), me)
        assert is_visible_to(_order(Station.PA, Station.SG), me)
        assert not is_visible_to(_order(Station.HT, Station.SG), me)

    def test_admin_sees_everything(self):
        admin = _identity(Role.ADMIN, Station.PA)
        assert is_visible_to(_order(Station.HT, Station.SG), admin)


class TestDateFilters:
    def test_today(self, snapshot):
        result = apply_filters(snapshot, OrderFilters(date="TODAY"), OrderView.ALL, NOW)
        assert len(result) == 2

    def test_yesterday(self, snapshot):
        result = apply_filters(
            snapshot, OrderFilters(date="yesterday"), OrderView.ALL, NOW
        )
        assert len(result) == 1
        assert result[0].sender_station == Station.HT

    def test_week_is_trailing_seven_days(self, snapshot):
        result = apply_filters(snapshot, OrderFilters(date="WEEK"), OrderView.ALL, NOW)
        assert len(result) == 4

    def test_week_boundary(self):
        inside = _order(Station.HT, Station.PA, days_ago=6)
        outside = _order(Station.HT, Station.PA, days_ago=7)
        result = apply_filters(
            [inside, outside], OrderFilters(date="WEEK"), OrderView.ALL, NOW
        )
        assert result == [inside]

    def test_month_is_current_calendar_month(self, snapshot):
        result = apply_filters(snapshot, OrderFilters(date="MONTH"), OrderView.ALL, NOW)
        assert all(o.created_at.month == 5 for o in result)
        assert len(result) == 4

    def test_exact_date(self, snapshot):
        result = apply_filters(
            snapshot, OrderFilters(date="2024-05-13"), OrderView.ALL, NOW
        )
        assert len(result) == 1

    def test_range_is_inclusive(self, snapshot):
        filters = OrderFilters(date_from="2024-05-13", date_to="2024-05-14")
        result = apply_filters(snapshot, filters, OrderView.ALL, NOW)
        assert len(result) == 2

    def test_open_ended_range(self, snapshot):
        filters = OrderFilters(date_from="2024-05-14")
        result = apply_filters(snapshot, filters, OrderView.ALL, NOW)
        assert len(result) == 3

    @pytest.mark.parametrize("value", ["ALL", "", None, "LAST_YEAR", "2024-02-30"])
    def test_unknown_or_impossible_values_fail_open(self, snapshot, value):
        result = apply_filters(snapshot, OrderFilters(date=value), OrderView.ALL, NOW)
        assert len(result) == len(snapshot)

    def test_date_predicate_none_for_all(self):
        assert date_predicate("ALL", NOW) is None


class TestOtherFilters:
    def test_station_filter_uses_sender_for_inbound(self, snapshot):
        me = _identity()
        view = visible_view(
            snapshot, me, OrderView.INBOUND, OrderFilters(station="SG"), NOW
        )
        assert [o.sender_station for o in view] == [Station.SG]

    def test_station_filter_uses_receiver_for_outbound(self, snapshot):
        me = _identity()
        view = visible_view(
            snapshot, me, OrderView.OUTBOUND, OrderFilters(station="PA"), NOW
        )
        assert [o.receiver_station for o in view] == [Station.PA]

    def test_station_filter_never_widens_partition(self, snapshot):
        me = _identity()
        view = visible_view(
            snapshot, me, OrderView.INBOUND, OrderFilters(station="HT"), NOW
        )
        assert view == []

    def test_unknown_station_fails_open(self, snapshot):
        me = _identity()
        view = visible_view(
            snapshot, me, OrderView.INBOUND, OrderFilters(station="XX"), NOW
        )
        assert len(view) == 2

    def test_payment_status_filter(self, snapshot):
        result = apply_filters(
            snapshot, OrderFilters(payment_status="PAID"), OrderView.ALL, NOW
        )
        assert len(result) == 1
        assert result[0].payment_status == PaymentStatus.PAID

    def test_search_matches_code_and_receiver_case_insensitively(self):
        order = _order(Station.HT, Station.PA, receiver_name="Lê Hoàng Nam")
        other = _order(Station.HT, Station.PA, receiver_name="Phạm Thu Trang")
        result = apply_filters(
            [order, other], OrderFilters(search="hoàng"), OrderView.OUTBOUND, NOW
        )
        assert result == [order]
        by_code = apply_filters(
            [order, other],
            OrderFilters(search=order.code.lower()),
            OrderView.OUTBOUND,
            NOW,
        )
        assert order in by_code

    def test_sender_fields_searched_only_in_all_view(self):
        order = _order(Station.HT, Station.PA, sender_name="Võ Minh Tuấn")
        filters = OrderFilters(search="tuấn")
        assert apply_filters([order], filters, OrderView.OUTBOUND, NOW) == []
        assert apply_filters([order], filters, OrderView.ALL, NOW) == [order]

    def test_from_params_reads_known_keys(self):
        filters = OrderFilters.from_params({"date": "TODAY", "search": "VD", "x": 1})
        assert filters.date == "TODAY"
        assert filters.search == "VD"
        assert filters.station is None
