"""Unit tests for the edit-permission evaluator.

Covers:
- Decision table rows (no identity, ADMIN, MANAGER, STAFF owner/non-owner).
- Calendar-day window in local time (23:59 vs 00:01 boundaries).
- List affordance rule.
- Purity: inputs are never modified.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from types import SimpleNamespace
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from modules.accounts.constants import Role, Station
from modules.accounts.context import SessionIdentity
from modules.orders.permissions import (
    Allowed,
    Denied,
    DenialReason,
    can_edit,
    evaluate_edit,
    is_within_edit_window,
    shows_edit_affordance,
)

pytestmark = pytest.mark.unit

VN = ZoneInfo("Asia/Ho_Chi_Minh")


def _identity(role=Role.STAFF, station=Station.HT, account_id=None):
    return SessionIdentity(
        account_id=account_id or uuid4(), name="Tester", role=role, station=station
    )


def _order(created_by_id=None, created_at=None):
    return SimpleNamespace(
        id=uuid4(),
        created_by_id=created_by_id,
        created_at=created_at or datetime(2024, 5, 10, 9, 0, tzinfo=VN),
        sender_station=Station.HT,
        receiver_station=Station.PA,
    )


NOW = datetime(2024, 5, 10, 15, 0, tzinfo=VN)


class TestDecisionTable:
    def test_no_identity_is_not_authenticated(self):
        decision = evaluate_edit(None, _order(), NOW)
        assert decision == Denied(DenialReason.NOT_AUTHENTICATED)
        assert decision.allowed is False

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER])
    def test_admin_and_manager_may_edit_any_order_of_any_age(self, role):
        old = _order(created_at=NOW - timedelta(days=30))
        assert evaluate_edit(_identity(role), old, NOW) == Allowed()

    def test_staff_cannot_edit_someone_elses_order(self):
        order = _order(created_by_id=uuid4())
        decision = evaluate_edit(_identity(), order, NOW)
        assert decision == Denied(DenialReason.NOT_OWNER)

    def test_staff_cannot_edit_orphaned_order(self):
        decision = evaluate_edit(_identity(), _order(created_by_id=None), NOW)
        assert decision == Denied(DenialReason.NOT_OWNER)

    def test_staff_owner_same_day_allowed(self):
        me = _identity()
        order = _order(created_by_id=me.account_id)
        assert evaluate_edit(me, order, NOW) == Allowed()

    def test_owner_compared_as_string(self):
        me = _identity()
        order = _order(created_by_id=str(me.account_id))
        assert evaluate_edit(me, order, NOW).allowed is True

    def test_staff_owner_previous_day_too_old(self):
        me = _identity()
        order = _order(
            created_by_id=me.account_id, created_at=NOW - timedelta(days=1)
        )
        assert evaluate_edit(me, order, NOW) == Denied(DenialReason.TOO_OLD)

    def test_not_owner_checked_before_age(self):
        order = _order(created_by_id=uuid4(), created_at=NOW - timedelta(days=3))
        assert evaluate_edit(_identity(), order, NOW).reason is DenialReason.NOT_OWNER

    def test_denial_reason_carries_message(self):
        assert DenialReason.TOO_OLD.code == "TOO_OLD"
        assert DenialReason.TOO_OLD.message


    def test_can_edit_follows_decision(self):
        me = _identity()
        assert can_edit(me, _order(created_by_id=me.account_id), NOW) is True
        assert can_edit(me, _order(created_by_id=uuid4()), NOW) is False
        assert can_edit(None, _order(), NOW) is False

class TestCalendarDayWindow:
    def test_created_2359_checked_0001_next_day_is_too_old(self):
        me = _identity()
        order = _order(
            created_by_id=me.account_id,
            created_at=datetime(2024, 5, 10, 23, 59, tzinfo=VN),
        )
        now = datetime(2024, 5, 11, 0, 1, tzinfo=VN)
        assert evaluate_edit(me, order, now) == Denied(DenialReason.TOO_OLD)

    def test_created_0001_checked_2359_same_day_is_allowed(self):
        me = _identity()
        order = _order(
            created_by_id=me.account_id,
            created_at=datetime(2024, 5, 10, 0, 1, tzinfo=VN),
        )
        now = datetime(2024, 5, 10, 23, 59, tzinfo=VN)
        assert evaluate_edit(me, order, now) == Allowed()

    def test_window_uses_local_day_not_utc_day(self):
        # 06:30 local on the 11th is still the 10th in UTC.
        created = datetime(2024, 5, 10, 23, 30, tzinfo=ZoneInfo("UTC"))
        now = datetime(2024, 5, 11, 20, 0, tzinfo=VN)
        assert is_within_edit_window(_order(created_at=created), now) is True

    def test_missing_created_at_is_never_in_window(self):
        order = SimpleNamespace(created_at=None, created_by_id=None)
        assert is_within_edit_window(order, NOW) is False

    def test_naive_timestamps_compare_by_date(self):
        order = _order(created_at=datetime(2024, 5, 10, 8, 0))
        assert is_within_edit_window(order, datetime(2024, 5, 10, 22, 0)) is True
        assert is_within_edit_window(order, datetime(2024, 5, 11, 0, 0)) is False


class TestEditAffordance:
    def test_none_identity_never_sees_affordance(self):
        assert shows_edit_affordance(None, _order(), NOW) is False

    def test_admin_always_sees_affordance(self):
        old = _order(created_at=NOW - timedelta(days=10))
        assert shows_edit_affordance(_identity(Role.ADMIN), old, NOW) is True

    def test_manager_only_within_window(self):
        manager = _identity(Role.MANAGER)
        assert shows_edit_affordance(manager, _order(), NOW) is True
        old = _order(created_at=NOW - timedelta(days=1))
        assert shows_edit_affordance(manager, old, NOW) is False

    def test_staff_needs_ownership_and_window(self):
        me = _identity()
        mine = _order(created_by_id=me.account_id)
        theirs = _order(created_by_id=uuid4())
        assert shows_edit_affordance(me, mine, NOW) is True
        assert shows_edit_affordance(me, theirs, NOW) is False


class TestPurity:
    def test_evaluation_does_not_modify_inputs(self):
        me = _identity()
        order = _order(created_by_id=me.account_id)
        before = dict(vars(order))
        evaluate_edit(me, order, NOW)
        shows_edit_affordance(me, order, NOW)
        assert vars(order) == before
