from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import InsufficientStock
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.constants import ProductStatus
from modules.products.dtos import CreateProductDTO, ProductAttributeInputDTO
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

CATALOG = [
    # product_code, name, price, discount_rate, brand
    ("ELEC-001", 'Monitor 27"', Decimal("329000"), 10, "Vista"),
    ("ELEC-002", "Mechanical Keyboard", Decimal("129000"), None, "Keyco"),
    ("ELEC-003", "Wireless Mouse", Decimal("39000"), 5, "Keyco"),
    ("ELEC-004", 'Laptop 14"', Decimal("1490000"), None, "Vista"),
    ("ELEC-005", "Headset", Decimal("89000"), 20, "Sonora"),
    ("HOME-001", "Desk Lamp", Decimal("45000"), None, "Lumen"),
    ("HOME-002", "Ergonomic Chair", Decimal("459000"), 15, "Sitwell"),
    ("HOME-003", "Bookshelf", Decimal("199000"), None, "Sitwell"),
    ("OFF-001", "A4 Paper (500)", Decimal("6900"), None, "Papyr"),
    ("OFF-002", "Gel Pen Set", Decimal("12000"), None, "Papyr"),
]


class Command(BaseCommand):
    help = "Seed database with demo users, a product catalog and orders."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=20)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_products()
        orders_created, cancelled = self._seed_orders(products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}, "
                f"cancelled={cancelled}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        for username in ("shopper", "shopper2"):
            if not User.objects.filter(username=username).exists():
                User.objects.create_user(username, password=f"{username}123")
                created += 1
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        service = ProductService(repository=ProductDjangoRepository())
        seller = get_user_model().objects.get(username="admin")

        products: list[Product] = []
        for code, name, price, rate, brand in CATALOG:
            existing = Product.objects.alive().filter(product_code=code).first()
            if existing:
                products.append(existing)
                continue
            dto = CreateProductDTO(
                name=name,
                price=price,
                discount_rate=rate,
                stock_quantity=random.randint(20, 200),
                status=ProductStatus.ACTIVE,
                product_code=code,
                shipping_fee=Decimal("3000"),
                attributes=[ProductAttributeInputDTO(name="brand", value=brand)],
            )
            products.append(service.create_product(dto, seller_id=seller.pk))
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, products: list[Product], count: int) -> tuple[int, int]:
        self.stdout.write("Creating orders...")
        User = get_user_model()
        shoppers = list(User.objects.filter(username__startswith="shopper"))
        if not shoppers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no users/products)."))
            return 0, 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

        created = cancelled = 0
        for _ in range(count):
            user = random.choice(shoppers)
            lines = random.sample(products, k=random.randint(1, 3))
            dto = CreateOrderDTO(
                items=[
                    CreateOrderItemDTO(product_id=p.id, quantity=random.randint(1, 3))
                    for p in lines
                ],
                shipping_address="123 Demo Street, Seoul",
                payment_method="card",
            )
            try:
                order = service.create_order(user.pk, dto)
            except InsufficientStock as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc}"))
                continue
            created += 1

            if random.random() < 0.2:
                service.cancel_order(order.id, user.pk, reason="Changed my mind")
                cancelled += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created, cancelled
