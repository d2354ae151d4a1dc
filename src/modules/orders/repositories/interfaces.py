"""Order repository interface (the order store).

Extends ``IRepository[Order]`` with the writes the Order aggregate needs:
creation together with its first log entries, field edits with their
history entry, and atomic persistence of a planned payment/delivery
``Transition``.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.transitions import HistoryEntry, PaymentEntry, Transition


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes its PaymentRecord and OrderHistory logs.
    Every mutation writes the order and its log entries atomically.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a live order with prefetched payment and general history."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Snapshot of live orders, optionally narrowed by ORM filters."""

    @abstractmethod
    def create(
        self,
        data: Dict[str, Any],
        history: HistoryEntry,
        payment: Optional[PaymentEntry] = None,
    ) -> Order:
        """Create an order with its creation history (and prepaid record)."""

    @abstractmethod
    def update(
        self, order: Order, changes: Dict[str, Any], history: HistoryEntry
    ) -> Order:
        """Apply field *changes* to *order* and append *history*."""

    @abstractmethod
    def apply_transition(self, transition: Transition) -> None:
        """Persist a planned transition (fields + log entries) atomically.

        Raises:
            Order.DoesNotExist: the order vanished before the write.
        """

    @abstractmethod
    def delete(self, id: str, deleted_by_name: str = "") -> bool:
        """Soft-delete a live order; ``False`` when there is none."""
