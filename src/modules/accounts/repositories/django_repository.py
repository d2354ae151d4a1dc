"""Django ORM implementation of the Account repository.

Look-ups return ``None`` for missing or malformed ids; the service layer
decides how to report a missing account.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.accounts.models import Account
from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountDjangoRepository(IAccountRepository):
    """Concrete account store backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_email(self, email: str) -> Optional[Account]:
        return Account.objects.filter(email=email.strip().lower()).first()

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Account]":
        queryset = Account.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def create_account(self, email: str, password: str, **fields: Any) -> Account:
        account = Account.objects.create_user(email, password, **fields)
        logger.info("account.created", account_id=str(account.id), role=account.role)
        return account

    @transaction.atomic
    def save(self, entity: Account) -> Account:
        entity.full_clean(exclude=["password"])
        entity.save()
        logger.info("account.saved", account_id=str(entity.id), role=entity.role)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Hard-delete an account; its tokens stop resolving immediately."""
        account = self.get_by_id(id)
        if not account:
            return False
        account.delete()
        logger.info("account.deleted", account_id=str(id))
        return True
