"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.

Output serializers expect the caller's ``SessionIdentity`` in the
serializer context (``context["identity"]``) to compute ``editable``
and, on the detail serializer, ``can_edit`` (whether the edit and
mark-paid / mark-delivered endpoints would accept the caller).
"""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.constants import Station
from modules.orders.constants import PaymentStatus
from modules.orders.models import Order, OrderHistory, PaymentRecord
from modules.orders.permissions import can_edit, shows_edit_affordance

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderSerializer(serializers.Serializer):
    """Validates the shape of an order creation payload."""

    sender_station = serializers.ChoiceField(
        choices=Station.choices, required=False, allow_null=True, default=None
    )
    receiver_station = serializers.ChoiceField(choices=Station.choices)
    sender_name = serializers.CharField(max_length=100)
    sender_phone = serializers.CharField(max_length=20)
    receiver_name = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    receiver_phone = serializers.CharField(
        max_length=20, required=False, default="", allow_blank=True
    )
    receiver_address = serializers.CharField(
        required=False, default="", allow_blank=True
    )
    goods_type = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )
    quantity = serializers.IntegerField(required=False, default=1)
    note = serializers.CharField(required=False, default="", allow_blank=True)
    cost = serializers.DecimalField(max_digits=12, decimal_places=0)
    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices, required=False, default=PaymentStatus.UNPAID
    )


class UpdateOrderSerializer(serializers.Serializer):
    """Validates the shape of a partial order edit.

    ``payment_status`` and ``delivery_status`` are deliberately absent:
    they only change through the transition endpoints.
    """

    sender_station = serializers.ChoiceField(choices=Station.choices, required=False)
    receiver_station = serializers.ChoiceField(choices=Station.choices, required=False)
    sender_name = serializers.CharField(max_length=100, required=False)
    sender_phone = serializers.CharField(max_length=20, required=False)
    receiver_name = serializers.CharField(
        max_length=100, required=False, allow_blank=True
    )
    receiver_phone = serializers.CharField(
        max_length=20, required=False, allow_blank=True
    )
    receiver_address = serializers.CharField(required=False, allow_blank=True)
    goods_type = serializers.CharField(
        max_length=255, required=False, allow_blank=True
    )
    quantity = serializers.IntegerField(required=False)
    note = serializers.CharField(required=False, allow_blank=True)
    cost = serializers.DecimalField(max_digits=12, decimal_places=0, required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class PaymentRecordSerializer(serializers.ModelSerializer):
    """Read serializer for payment history entries."""

    class Meta:
        model = PaymentRecord
        fields = [
            "id",
            "status",
            "changed_by_id",
            "changed_by_name",
            "note",
            "created_at",
        ]
        read_only_fields = fields


class OrderHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderHistory
        fields = ["id", "action", "user_name", "created_at"]
        read_only_fields = fields


class EditableMixin(serializers.Serializer):
    editable = serializers.SerializerMethodField()

    def get_editable(self, order: Order) -> bool:
        return shows_edit_affordance(
            self.context.get("identity"), order, self.context.get("now")
        )


class OrderListSerializer(EditableMixin, serializers.ModelSerializer):
    """Row serializer for the station list screens (no nested logs)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "created_at",
            "sender_station",
            "receiver_station",
            "sender_name",
            "sender_phone",
            "receiver_name",
            "receiver_phone",
            "goods_type",
            "quantity",
            "cost",
            "payment_status",
            "delivery_status",
            "created_by_name",
            "editable",
        ]
        read_only_fields = fields


class OrderSerializer(EditableMixin, serializers.ModelSerializer):
    """Read serializer for orders with nested payment and general history."""

    payment_history = PaymentRecordSerializer(many=True, read_only=True)
    history = OrderHistorySerializer(many=True, read_only=True)
    can_edit = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "created_at",
            "updated_at",
            "sender_station",
            "receiver_station",
            "sender_name",
            "sender_phone",
            "receiver_name",
            "receiver_phone",
            "receiver_address",
            "goods_type",
            "quantity",
            "note",
            "cost",
            "payment_status",
            "delivery_status",
            "created_by_id",
            "created_by_name",
            "editable",
            "can_edit",
            "payment_history",
            "history",
        ]
        read_only_fields = fields

    def get_can_edit(self, order: Order) -> bool:
        return can_edit(self.context.get("identity"), order, self.context.get("now"))


class BatchSerializer(serializers.Serializer):
    """Read-only view of a ``visibility.Batch``."""

    sender_station = serializers.CharField()
    date = serializers.DateField()
    count = serializers.IntegerField()
    total_quantity = serializers.IntegerField()
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=0)
    unpaid_count = serializers.IntegerField()
    unpaid_cost = serializers.DecimalField(max_digits=14, decimal_places=0)
    order_ids = serializers.ListField(child=serializers.CharField())


class StationTotalsSerializer(serializers.Serializer):
    station = serializers.CharField()
    orders = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=0)


class SummarySerializer(serializers.Serializer):
    """Read-only view of a ``reports.Summary``."""

    total_orders = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=0)
    unpaid_total = serializers.DecimalField(max_digits=14, decimal_places=0)
    unpaid_count = serializers.IntegerField()
    grand_total = serializers.DecimalField(max_digits=14, decimal_places=0)
    stations = StationTotalsSerializer(many=True)
    revenue_by_day = serializers.SerializerMethodField()
    recent_unpaid = serializers.SerializerMethodField()

    def get_revenue_by_day(self, summary) -> list:
        return [
            {"date": day.isoformat(), "revenue": str(amount)}
            for day, amount in summary.revenue_by_day
        ]

    def get_recent_unpaid(self, summary) -> list:
        return OrderListSerializer(
            summary.recent_unpaid, many=True, context=self.context
        ).data
