"""Order domain constants.

Payment and delivery are two independent one-way flags, not a single
composite status: UNPAID → PAID and PENDING → DELIVERED.
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    UNPAID = "UNPAID", "Chưa thu"
    PAID = "PAID", "Đã thu"


class DeliveryStatus(models.TextChoices):
    PENDING = "PENDING", "Chờ giao"
    DELIVERED = "DELIVERED", "Đã giao"


class OrderView(models.TextChoices):
    INBOUND = "INBOUND", "Hàng đến"
    OUTBOUND = "OUTBOUND", "Hàng đi"
    ALL = "ALL", "Tất cả"


class DateKeyword(models.TextChoices):
    ALL = "ALL", "Tất cả"
    TODAY = "TODAY", "Hôm nay"
    YESTERDAY = "YESTERDAY", "Hôm qua"
    WEEK = "WEEK", "7 ngày"
    MONTH = "MONTH", "Tháng này"


# Trailing window for ``DateKeyword.WEEK``, today included
WEEK_WINDOW_DAYS = 7

EXACT_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

ORDER_CODE_PREFIX = "VD"
ORDER_CODE_MAX_RETRIES = 5

PAYMENT_COLLECTED_NOTE = "Thu cước khi giao hàng"
PREPAID_NOTE = "Thu cước khi nhận gửi"

HISTORY_CREATED = "Tạo đơn"
HISTORY_UPDATED = "Cập nhật đơn"
HISTORY_PAID = "Đã thu cước"
HISTORY_DELIVERED = "Đã giao hàng"
