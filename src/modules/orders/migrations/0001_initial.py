import decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid6
from django.conf import settings
from django.db import migrations, models

STATIONS = [("HT", "Trạm HT"), ("PA", "Trạm PA"), ("SG", "Trạm SG")]
PAYMENT = [("UNPAID", "Chưa thu"), ("PAID", "Đã thu")]
DELIVERY = [("PENDING", "Chờ giao"), ("DELIVERED", "Đã giao")]


def _base_fields():
    return [
        (
            "id",
            models.UUIDField(
                default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
            ),
        ),
        (
            "created_at",
            models.DateTimeField(default=django.utils.timezone.now, editable=False),
        ),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                *_base_fields(),
                (
                    "deleted_at",
                    models.DateTimeField(
                        blank=True, db_index=True, default=None, null=True
                    ),
                ),
                (
                    "deleted_by_name",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                ("code", models.CharField(editable=False, max_length=20, unique=True)),
                ("sender_station", models.CharField(choices=STATIONS, max_length=2)),
                ("receiver_station", models.CharField(choices=STATIONS, max_length=2)),
                ("sender_name", models.CharField(max_length=100)),
                ("sender_phone", models.CharField(max_length=20)),
                (
                    "receiver_name",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                (
                    "receiver_phone",
                    models.CharField(blank=True, default="", max_length=20),
                ),
                ("receiver_address", models.TextField(blank=True, default="")),
                (
                    "goods_type",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("note", models.TextField(blank=True, default="")),
                (
                    "cost",
                    models.DecimalField(
                        decimal_places=0,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(
                                decimal.Decimal("0")
                            )
                        ],
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(choices=PAYMENT, default="UNPAID", max_length=10),
                ),
                (
                    "delivery_status",
                    models.CharField(
                        choices=DELIVERY, default="PENDING", max_length=10
                    ),
                ),
                (
                    "created_by_name",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                    models.Index(
                        fields=["receiver_station"], name="orders_receiver_idx"
                    ),
                    models.Index(fields=["sender_station"], name="orders_sender_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("sender_station", models.F("receiver_station")),
                            _negated=True,
                        ),
                        name="orders_distinct_stations",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="orders_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("cost__gte", 0)),
                        name="orders_cost_not_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                *_base_fields(),
                ("status", models.CharField(choices=PAYMENT, max_length=10)),
                ("changed_by_name", models.CharField(max_length=100)),
                ("note", models.TextField(blank=True, default="")),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment_history",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_payment_records",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["order", "created_at"], name="opr_order_created_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderHistory",
            fields=[
                *_base_fields(),
                ("action", models.CharField(max_length=255)),
                ("user_name", models.CharField(max_length=100)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_history",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["order", "created_at"], name="oh_order_created_idx"
                    )
                ],
            },
        ),
    ]
