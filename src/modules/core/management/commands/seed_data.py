from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.accounts.constants import Role, Station
from modules.accounts.context import SessionIdentity
from modules.accounts.models import Account
from modules.orders.constants import PaymentStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order, OrderHistory, PaymentRecord
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

SEED_ACCOUNTS = [
    ("admin@tranghoa.vn", "Quản trị hệ thống", Role.ADMIN, None),
    ("manager@tranghoa.vn", "Trần Quản Lý", Role.MANAGER, None),
    ("ht@tranghoa.vn", "Nguyễn Văn Hà", Role.STAFF, Station.HT),
    ("pa@tranghoa.vn", "Lê Thị Phương", Role.STAFF, Station.PA),
    ("sg@tranghoa.vn", "Phạm Minh Sơn", Role.STAFF, Station.SG),
]

CONTACTS = [
    ("Nguyễn Thị Lan", "0912345678"),
    ("Trần Văn Bình", "0987654321"),
    ("Lê Hoàng Nam", "0903123456"),
    ("Phạm Thu Trang", "0938111222"),
    ("Võ Minh Tuấn", "0977333444"),
    ("Đặng Ngọc Hân", "0868555666"),
]

GOODS = ["Thùng carton", "Bao gạo", "Hàng điện tử", "Quần áo", "Giấy tờ", "Phụ tùng"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=50)
        parser.add_argument("--password", default="tranghoa123")

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        accounts, created = self._seed_accounts(options["password"])
        orders_created = self._seed_orders(accounts, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: accounts={created}, orders={orders_created}"
            )
        )

    def _seed_accounts(self, password: str) -> tuple[list[Account], int]:
        self.stdout.write("Creating accounts...")
        accounts: list[Account] = []
        created = 0
        for email, name, role, station in SEED_ACCOUNTS:
            account = Account.objects.filter(email=email).first()
            if account is None:
                account = Account.objects.create_user(
                    email,
                    password,
                    name=name,
                    role=role,
                    station=station,
                    is_staff=role == Role.ADMIN,
                    is_superuser=role == Role.ADMIN,
                )
                created += 1
            accounts.append(account)
        self.stdout.write(self.style.SUCCESS("Creating accounts... Done!"))
        return accounts, created

    def _seed_orders(self, accounts: list[Account], count: int) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = OrderService(order_repository=OrderDjangoRepository())
        staff = [a for a in accounts if a.role == Role.STAFF]
        stations = list(Station.values)

        for _ in range(count):
            creator = random.choice(staff)
            identity = SessionIdentity.establish(creator)
            receiver_station = random.choice(
                [s for s in stations if s != identity.station]
            )
            sender_name, sender_phone = random.choice(CONTACTS)
            receiver_name, receiver_phone = random.choice(CONTACTS)
            dto = CreateOrderDTO(
                receiver_station=receiver_station,
                sender_name=sender_name,
                sender_phone=sender_phone,
                receiver_name=receiver_name,
                receiver_phone=receiver_phone,
                goods_type=random.choice(GOODS),
                quantity=random.randint(1, 5),
                cost=Decimal(random.randint(3, 40) * 5000),
                payment_status=random.choice(
                    [PaymentStatus.UNPAID, PaymentStatus.UNPAID, PaymentStatus.PAID]
                ),
            )
            order = service.create_order(identity, dto)

            created_at = timezone.now() - timedelta(
                days=random.randint(0, 30), minutes=random.randint(0, 600)
            )
            Order.objects.filter(id=order.id).update(created_at=created_at)
            OrderHistory.objects.filter(order_id=order.id).update(created_at=created_at)
            PaymentRecord.objects.filter(order_id=order.id).update(
                created_at=created_at
            )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
