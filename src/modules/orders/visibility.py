"""Visibility / partition engine over an order snapshot.

Given the full order snapshot and a ``SessionIdentity``, derive the views
used by the station screens:

- ``inbound``  — orders addressed to the identity's station (hàng đến).
- ``outbound`` — orders sent from the identity's station (hàng đi).
- ``all_orders`` — the whole snapshot, ADMIN only.

Secondary filters (``OrderFilters``) only narrow a view that has already
been partitioned; they never change which stations are eligible.  A filter
*value* that cannot be understood fails open (no restriction), while the
station partition itself is never optional.

All functions are pure and deterministic: the snapshot is never mutated
and results are sorted by ``created_at`` descending (ties by id).
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence

import structlog

from modules.accounts.constants import Role, Station
from modules.orders.constants import (
    EXACT_DATE_PATTERN,
    WEEK_WINDOW_DAYS,
    DateKeyword,
    OrderView,
    PaymentStatus,
)
from modules.orders.exceptions import AllViewForbidden
from modules.orders.permissions import evaluation_date, local_date

if TYPE_CHECKING:
    from modules.accounts.context import SessionIdentity

logger = structlog.get_logger(__name__)

_EXACT_DATE_RE = re.compile(EXACT_DATE_PATTERN)

DatePredicate = Callable[[date], bool]


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderFilters:
    """Secondary refinements applied after the station partition.

    Every field is the raw client value; ``None``/``""``/``"ALL"`` mean
    "no restriction".
    """

    date: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    station: Optional[str] = None
    payment_status: Optional[str] = None
    search: Optional[str] = None

    @classmethod
    def from_params(cls, params: Any) -> OrderFilters:
        """Build filters from a query-param mapping (e.g. ``request.query_params``)."""
        return cls(
            **{name: params.get(name) for name in cls.__dataclass_fields__}
        )


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value or not _EXACT_DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def date_predicate(
    keyword: Optional[str], now: Optional[datetime] = None
) -> Optional[DatePredicate]:
    """Translate a date keyword or ``YYYY-MM-DD`` into a predicate on local dates.

    Returns ``None`` (no restriction) for ``ALL``, empty, unknown keywords
    and impossible dates.
    """
    if not keyword:
        return None
    value = keyword.strip()

    if _EXACT_DATE_RE.match(value):
        exact = _parse_date(value)
        if exact is None:
            logger.info("orders.filter_ignored", filter="date", value=value)
            return None
        return lambda d: d == exact

    today = evaluation_date(now)
    key = value.upper()
    if key == DateKeyword.TODAY:
        return lambda d: d == today
    if key == DateKeyword.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return lambda d: d == yesterday
    if key == DateKeyword.WEEK:
        start = today - timedelta(days=WEEK_WINDOW_DAYS - 1)
        return lambda d: start <= d <= today
    if key == DateKeyword.MONTH:
        return lambda d: (d.year, d.month) == (today.year, today.month)
    if key != DateKeyword.ALL:
        logger.info("orders.filter_ignored", filter="date", value=value)
    return None


def range_predicate(
    date_from: Optional[str], date_to: Optional[str]
) -> Optional[DatePredicate]:
    """Inclusive ``[date_from, date_to]``; an unparsable end is left open."""
    start = _parse_date(date_from)
    end = _parse_date(date_to)
    if start is None and end is None:
        return None
    return lambda d: (start is None or d >= start) and (end is None or d <= end)


def _counterpart_matcher(view: str, station: str) -> Callable[[Any], bool]:
    if view == OrderView.INBOUND:
        return lambda o: o.sender_station == station
    if view == OrderView.OUTBOUND:
        return lambda o: o.receiver_station == station
    return lambda o: station in (o.sender_station, o.receiver_station)


def _search_fields(view: str) -> tuple[str, ...]:
    fields = ("code", "receiver_name", "receiver_phone")
    if view == OrderView.ALL:
        fields += ("sender_name", "sender_phone")
    return fields


def apply_filters(
    orders: Iterable[Any],
    filters: OrderFilters,
    view: str = OrderView.ALL,
    now: Optional[datetime] = None,
) -> List[Any]:
    """Narrow an already-partitioned view with *filters*."""
    predicates: list[Callable[[Any], bool]] = []

    for date_check in (
        date_predicate(filters.date, now),
        range_predicate(filters.date_from, filters.date_to),
    ):
        if date_check is not None:
            predicates.append(
                lambda o, check=date_check: check(local_date(o.created_at))
            )

    station = (filters.station or "").strip().upper()
    if station in Station.values:
        predicates.append(_counterpart_matcher(view, station))

    payment = (filters.payment_status or "").strip().upper()
    if payment in PaymentStatus.values:
        predicates.append(lambda o: o.payment_status == payment)

    term = (filters.search or "").strip().lower()
    if term:
        fields = _search_fields(view)
        predicates.append(
            lambda o: any(term in str(getattr(o, f, "") or "").lower() for f in fields)
        )

    return sort_newest_first(o for o in orders if all(p(o) for p in predicates))


# ---------------------------------------------------------------------------
# Partition
# ---------------------------------------------------------------------------


def sort_newest_first(orders: Iterable[Any]) -> List[Any]:
    return sorted(orders, key=lambda o: (o.created_at, str(o.id)), reverse=True)


def inbound(orders: Iterable[Any], identity: SessionIdentity) -> List[Any]:
    """Orders whose receiver station is the identity's station."""
    return sort_newest_first(
        o for o in orders if o.receiver_station == identity.station
    )


def outbound(orders: Iterable[Any], identity: SessionIdentity) -> List[Any]:
    """Orders whose sender station is the identity's station."""
    return sort_newest_first(o for o in orders if o.sender_station == identity.station)


def all_orders(orders: Iterable[Any], identity: SessionIdentity) -> List[Any]:
    """The unrestricted snapshot.

    Raises:
        AllViewForbidden: the identity is not an ADMIN.
    """
    if identity.role != Role.ADMIN:
        logger.warning(
            "orders.all_view_denied",
            account_id=str(identity.account_id),
            role=identity.role,
        )
        raise AllViewForbidden("Chỉ Admin được xem toàn bộ đơn hàng.")
    return sort_newest_first(orders)


_PARTITIONS = {
    OrderView.INBOUND: inbound,
    OrderView.OUTBOUND: outbound,
    OrderView.ALL: all_orders,
}


def partition(
    orders: Iterable[Any], identity: SessionIdentity, view: str
) -> List[Any]:
    """Dispatch to the view named by *view* (an ``OrderView`` value)."""
    return _PARTITIONS[OrderView(view)](orders, identity)


def visible_view(
    orders: Iterable[Any],
    identity: SessionIdentity,
    view: str,
    filters: Optional[OrderFilters] = None,
    now: Optional[datetime] = None,
) -> List[Any]:
    """Partition then refine: the full pipeline behind every list screen."""
    scoped = partition(orders, identity, view)
    if filters is None:
        return scoped
    return apply_filters(scoped, filters, view, now)


def is_visible_to(order: Any, identity: SessionIdentity) -> bool:
    """ADMIN sees every order; others only orders touching their station."""
    if identity.role == Role.ADMIN:
        return True
    return identity.station in (order.sender_station, order.receiver_station)


def station_scope(orders: Iterable[Any], identity: SessionIdentity) -> List[Any]:
    """Snapshot for aggregates: everything for ADMIN, own-station traffic otherwise."""
    return sort_newest_first(o for o in orders if is_visible_to(o, identity))


# ---------------------------------------------------------------------------
# Batches (phơi hàng)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Batch:
    """Inbound orders sharing a sender station and a local creation date."""

    sender_station: str
    date: date
    count: int
    total_quantity: int
    total_cost: Decimal
    unpaid_count: int
    unpaid_cost: Decimal
    order_ids: tuple[str, ...] = field(default_factory=tuple)


def group_batches(orders: Sequence[Any]) -> List[Batch]:
    """Group orders into batches keyed by ``(sender_station, local date)``.

    The result does not depend on input ordering: batches are sorted by
    date (newest first) then station, and member ids are sorted.
    """
    members: dict[tuple[str, date], list[Any]] = defaultdict(list)
    for order in orders:
        members[(order.sender_station, local_date(order.created_at))].append(order)

    batches = []
    for (station, day), group in members.items():
        unpaid = [o for o in group if o.payment_status != PaymentStatus.PAID]
        batches.append(
            Batch(
                sender_station=station,
                date=day,
                count=len(group),
                total_quantity=sum(int(o.quantity) for o in group),
                total_cost=sum((Decimal(o.cost) for o in group), Decimal("0")),
                unpaid_count=len(unpaid),
                unpaid_cost=sum((Decimal(o.cost) for o in unpaid), Decimal("0")),
                order_ids=tuple(sorted(str(o.id) for o in group)),
            )
        )
    batches.sort(key=lambda b: b.sender_station)
    batches.sort(key=lambda b: b.date, reverse=True)
    return batches
