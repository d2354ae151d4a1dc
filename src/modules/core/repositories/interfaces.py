"""Repository contract shared by the account store and the order store.

Services receive a concrete repository through their constructor and
only call the methods below (plus the extras each module's interface
adds), so tests can hand them a fake store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

EntityT = TypeVar("EntityT")


class IRepository(ABC, Generic[EntityT]):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[EntityT]:
        """``None`` for unknown or malformed ids."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[EntityT]:
        ...

    @abstractmethod
    def save(self, entity: EntityT) -> EntityT:
        ...

    @abstractmethod
    def delete(self, id: str) -> bool:
        """``True`` when a row was removed (or soft-deleted)."""
