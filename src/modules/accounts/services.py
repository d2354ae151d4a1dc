"""Account service layer: employee provisioning (admin actions).

Every command re-reads the acting account from the store and checks its
role there; a role cached in the client or in a token is never consulted.

Rules enforced:
- Only an ADMIN may register, reassign, list, or delete employees.
- An ADMIN may not delete their own account.
- Email is unique across accounts.
- STAFF accounts always carry a station; MANAGER/ADMIN never store one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.accounts.constants import Role
from modules.accounts.exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    AdminRequired,
    InvalidStationAssignment,
    SelfDeletionForbidden,
)

if TYPE_CHECKING:
    from django.db import models

    from modules.accounts.dtos import ReassignAccountDTO, RegisterEmployeeDTO
    from modules.accounts.models import Account
    from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountService:
    """Application service for account provisioning use-cases."""

    def __init__(self, repository: IAccountRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def require_admin(self, actor_id: UUID | str) -> Account:
        """Return the acting account if the store says it is an active ADMIN.

        Raises:
            AdminRequired: actor missing, inactive, or not ADMIN.
        """
        actor = self._repo.get_by_id(str(actor_id))
        if actor is None or not actor.is_active or actor.role != Role.ADMIN:
            logger.warning("account.admin_required", actor_id=str(actor_id))
            raise AdminRequired("Không có quyền Admin.")
        return actor

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def register_employee(
        self, actor_id: UUID | str, dto: RegisterEmployeeDTO
    ) -> Account:
        """Provision a new employee account.

        Raises:
            AdminRequired: caller is not an ADMIN.
            AccountAlreadyExists: email already registered.
        """
        self.require_admin(actor_id)
        log = logger.bind(actor_id=str(actor_id), role=str(dto.role))

        if self._repo.get_by_email(dto.email):
            log.warning("account.duplicate_email")
            raise AccountAlreadyExists("Email đã được đăng ký.")

        account = self._repo.create_account(
            dto.email,
            dto.password,
            name=dto.name,
            username=dto.username,
            role=str(dto.role),
            station=str(dto.station) if dto.station else None,
        )
        log.info("account.registered", account_id=str(account.id))
        return account

    @transaction.atomic
    def reassign(
        self, actor_id: UUID | str, target_id: str, dto: ReassignAccountDTO
    ) -> Account:
        """Change the role and/or station of an existing account.

        Raises:
            AdminRequired: caller is not an ADMIN.
            AccountNotFound: target does not exist.
            InvalidStationAssignment: the result would be a STAFF account
                without station.
        """
        self.require_admin(actor_id)
        account = self.get_account(target_id)

        role = str(dto.role) if dto.role else account.role
        station = str(dto.station) if dto.station else account.station
        if role == Role.STAFF and not station:
            raise InvalidStationAssignment("Nhân viên (STAFF) phải được gán trạm.")
        if role != Role.STAFF:
            station = None

        account.role = role
        account.station = station
        self._repo.save(account)
        logger.info(
            "account.reassigned",
            actor_id=str(actor_id),
            account_id=str(account.id),
            role=role,
            station=station,
        )
        return account

    @transaction.atomic
    def delete_employee(self, actor_id: UUID | str, target_id: str) -> None:
        """Delete an account and, with it, its credential.

        Raises:
            AdminRequired: caller is not an ADMIN.
            SelfDeletionForbidden: caller targets their own account.
            AccountNotFound: target does not exist.
        """
        actor = self.require_admin(actor_id)
        if str(actor.id) == str(target_id):
            raise SelfDeletionForbidden("Không thể tự xóa tài khoản của chính mình.")
        if not self._repo.delete(str(target_id)):
            raise AccountNotFound(f"Account {target_id} not found.")
        logger.info(
            "account.employee_deleted", actor_id=str(actor_id), account_id=str(target_id)
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_account(self, account_id: str) -> Account:
        account = self._repo.get_by_id(str(account_id))
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found.")
        return account

    def list_accounts(
        self, actor_id: UUID | str, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Account]:
        self.require_admin(actor_id)
        return self._repo.list(filters)
