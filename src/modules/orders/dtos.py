"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: input for a new shipment order.
- ``UpdateOrderDTO``: partial field edit of an existing order.

Payment status can be chosen at creation (prepaid by the sender) but is
not editable afterwards; collection goes through ``OrderService.mark_paid``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.accounts.dtos import StationEnum
from modules.orders.constants import PaymentStatus

SAME_STATION_MESSAGE = "Trạm nhận phải khác trạm gửi."


def _require_text(value: str, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


def _quantity_at_least_one(v: Optional[int]) -> Optional[int]:
    if v is not None and v < 1:
        raise ValueError("Số lượng phải lớn hơn hoặc bằng 1.")
    return v


def _cost_not_negative(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v < 0:
        raise ValueError("Cước phí không được âm.")
    return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    ``sender_station`` may be omitted; the service then uses the station
    of the session that creates the order.
    """

    model_config = ConfigDict(frozen=True)

    receiver_station: StationEnum
    sender_name: str
    sender_phone: str
    cost: Decimal
    sender_station: Optional[StationEnum] = None
    receiver_name: str = ""
    receiver_phone: str = ""
    receiver_address: str = ""
    goods_type: str = ""
    quantity: int = 1
    note: str = ""
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    @field_validator("sender_name")
    @classmethod
    def sender_name_required(cls, v: str) -> str:
        return _require_text(v, "Vui lòng điền tên người gửi.")

    @field_validator("sender_phone")
    @classmethod
    def sender_phone_required(cls, v: str) -> str:
        return _require_text(v, "Vui lòng điền số điện thoại người gửi.")

    @field_validator("receiver_name", "receiver_phone", "goods_type")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        return _quantity_at_least_one(v)

    @field_validator("cost")
    @classmethod
    def cost_must_not_be_negative(cls, v: Decimal) -> Decimal:
        return _cost_not_negative(v)

    @model_validator(mode="after")
    def stations_must_differ(self):
        if (
            self.sender_station is not None
            and self.sender_station == self.receiver_station
        ):
            raise ValueError(SAME_STATION_MESSAGE)
        return self


class UpdateOrderDTO(BaseModel):
    """Immutable DTO for a partial order edit.

    Only fields explicitly sent are applied (see ``changes``).
    """

    model_config = ConfigDict(frozen=True)

    sender_station: Optional[StationEnum] = None
    receiver_station: Optional[StationEnum] = None
    sender_name: Optional[str] = None
    sender_phone: Optional[str] = None
    receiver_name: Optional[str] = None
    receiver_phone: Optional[str] = None
    receiver_address: Optional[str] = None
    goods_type: Optional[str] = None
    quantity: Optional[int] = None
    note: Optional[str] = None
    cost: Optional[Decimal] = None

    @field_validator("sender_name")
    @classmethod
    def sender_name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _require_text(v, "Vui lòng điền tên người gửi.")

    @field_validator("sender_phone")
    @classmethod
    def sender_phone_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return _require_text(v, "Vui lòng điền số điện thoại người gửi.")

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: Optional[int]) -> Optional[int]:
        return _quantity_at_least_one(v)

    @field_validator("cost")
    @classmethod
    def cost_must_not_be_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _cost_not_negative(v)

    @model_validator(mode="after")
    def stations_must_differ(self):
        if (
            self.sender_station is not None
            and self.sender_station == self.receiver_station
        ):
            raise ValueError(SAME_STATION_MESSAGE)
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, as plain values."""
        data = self.model_dump(exclude_unset=True)
        return {
            name: str(value) if isinstance(value, StationEnum) else value
            for name, value in data.items()
            if value is not None
        }
