"""Aggregates behind the dashboard and reports screens.

``summarize`` is pure: it receives an already scoped and filtered order
snapshot and returns totals.  Revenue counts PAID orders only; per-station
figures are attributed to the sender station.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Sequence, Tuple

from modules.accounts.constants import Station
from modules.orders.constants import PaymentStatus
from modules.orders.permissions import local_date
from modules.orders.visibility import sort_newest_first

RECENT_UNPAID_LIMIT = 5

ZERO = Decimal("0")


@dataclass(frozen=True)
class StationTotals:
    station: str
    orders: int
    revenue: Decimal


@dataclass(frozen=True)
class Summary:
    total_orders: int
    revenue: Decimal
    unpaid_total: Decimal
    unpaid_count: int
    stations: Tuple[StationTotals, ...]
    revenue_by_day: Tuple[Tuple[date, Decimal], ...]
    recent_unpaid: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def grand_total(self) -> Decimal:
        return self.revenue + self.unpaid_total


def _cost(order: Any) -> Decimal:
    return Decimal(order.cost)


def summarize(orders: Sequence[Any]) -> Summary:
    """Totals, per-station split, daily revenue and the newest unpaid orders."""
    paid = [o for o in orders if o.payment_status == PaymentStatus.PAID]
    unpaid = [o for o in orders if o.payment_status != PaymentStatus.PAID]

    per_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for order in paid:
        per_day[local_date(order.created_at)] += _cost(order)

    stations: List[StationTotals] = []
    for station in Station.values:
        sent = [o for o in orders if o.sender_station == station]
        stations.append(
            StationTotals(
                station=station,
                orders=len(sent),
                revenue=sum(
                    (_cost(o) for o in sent if o.payment_status == PaymentStatus.PAID),
                    ZERO,
                ),
            )
        )

    return Summary(
        total_orders=len(orders),
        revenue=sum((_cost(o) for o in paid), ZERO),
        unpaid_total=sum((_cost(o) for o in unpaid), ZERO),
        unpaid_count=len(unpaid),
        stations=tuple(stations),
        revenue_by_day=tuple(sorted(per_day.items())),
        recent_unpaid=tuple(sort_newest_first(unpaid)[:RECENT_UNPAID_LIMIT]),
    )
