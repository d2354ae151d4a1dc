"""Order, PaymentRecord, and OrderHistory models.

Business rules implemented:
- Sender and receiver station must differ (check constraint + DTO rule).
- Quantity is at least 1; cost is a non-negative VND amount.
- Payment (UNPAID → PAID) and delivery (PENDING → DELIVERED) are
  independent one-way flags; transitions are planned in ``transitions.py``.
- Every payment change appends a ``PaymentRecord``; every mutation appends
  an ``OrderHistory`` entry.  Both logs are append-only.
- ``code`` is a human-readable identifier generated on first save.
- ``created_by`` is kept nullable so deleting an employee never deletes
  their orders; ``created_by_name`` snapshots the display name.
- Soft delete via ``deleted_at`` and ``deleted_by_name`` (SoftDeleteModel).
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.accounts.constants import Station
from modules.core.models import SoftDeleteModel, TimestampedModel
from modules.orders.constants import (
    ORDER_CODE_MAX_RETRIES,
    ORDER_CODE_PREFIX,
    DeliveryStatus,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, SoftDeleteModel):
    """Shipment order (phiếu gửi) between two stations."""

    code: models.CharField = models.CharField(max_length=20, unique=True, editable=False)
    sender_station: models.CharField = models.CharField(
        max_length=2, choices=Station.choices
    )
    receiver_station: models.CharField = models.CharField(
        max_length=2, choices=Station.choices
    )

    sender_name: models.CharField = models.CharField(max_length=100)
    sender_phone: models.CharField = models.CharField(max_length=20)
    receiver_name: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    receiver_phone: models.CharField = models.CharField(
        max_length=20, blank=True, default=""
    )
    receiver_address: models.TextField = models.TextField(blank=True, default="")

    goods_type: models.CharField = models.CharField(max_length=255, blank=True, default="")
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    note: models.TextField = models.TextField(blank=True, default="")

    cost: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=0,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    payment_status: models.CharField = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    delivery_status: models.CharField = models.CharField(
        max_length=10,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.PENDING,
    )

    created_by: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_orders",
    )
    created_by_name: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["receiver_station"], name="orders_receiver_idx"),
            models.Index(fields=["sender_station"], name="orders_sender_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(sender_station=models.F("receiver_station")),
                name="orders_distinct_stations",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="orders_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(cost__gte=0),
                name="orders_cost_not_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def is_delivered(self) -> bool:
        return self.delivery_status == DeliveryStatus.DELIVERED

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sender_station and self.sender_station == self.receiver_station:
            raise ValidationError(
                {"receiver_station": "Trạm nhận phải khác trạm gửi."}
            )

    # ------------------------------------------------------------------
    # Code generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_code() -> str:
        """Generate a human-readable code: ``VDyymmddNNNN``."""
        today = timezone.localdate()
        return f"{ORDER_CODE_PREFIX}{today:%y%m%d}{1000 + secrets.randbelow(9000)}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.code:
            for _attempt in range(ORDER_CODE_MAX_RETRIES):
                candidate = self.generate_code()
                if not Order.objects.filter(code=candidate).exists():
                    self.code = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order code after "
                    f"{ORDER_CODE_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.code} ({self.sender_station}→{self.receiver_station})"


class PaymentRecord(TimestampedModel):
    """Append-only payment history entry (lịch sử thu cước).

    ``changed_by`` is nullable so the record survives the deletion of the
    employee; ``changed_by_name`` keeps the name shown in the log.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="payment_history",
    )
    status: models.CharField = models.CharField(
        max_length=10, choices=PaymentStatus.choices
    )
    changed_by: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    changed_by_name: models.CharField = models.CharField(max_length=100)
    note: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_payment_records"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="opr_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.status} by {self.changed_by_name}"


class OrderHistory(TimestampedModel):
    """Append-only free-text audit entry for an order."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="history",
    )
    action: models.CharField = models.CharField(max_length=255)
    user_name: models.CharField = models.CharField(max_length=100)

    class Meta:
        db_table = "order_history"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="oh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.action} ({self.user_name})"
