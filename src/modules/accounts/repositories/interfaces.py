"""Account repository interface (the account store).

``AccountService`` depends on this contract only.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Account


class IAccountRepository(IRepository["Account"]):
    """Repository contract for provisioned accounts."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Account]":
        """List accounts with optional filters."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Account]:
        """Retrieve an account by its (lower-cased) email."""

    @abstractmethod
    def create_account(self, email: str, password: str, **fields: Any) -> Account:
        """Create an account with a hashed password."""
