from __future__ import annotations

import random
import uuid
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandParser
from django.db import transaction
from django.utils import timezone

from modules.clients.models import Client
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderDetail
from modules.products.models import Product

DEFAULT_SUPPLIER_ID = uuid.UUID("0190a000-0000-7000-8000-000000000001")


class Command(BaseCommand):
    help = "Seed a supplier catalog with clients and orders for local development."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("--supplier", type=uuid.UUID, default=DEFAULT_SUPPLIER_ID)
        parser.add_argument("--orders", type=int, default=20)

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        supplier_id = options["supplier"]
        self.stdout.write(f"Seeding supplier {supplier_id}...")

        clients = self._seed_clients()
        products = self._seed_products(supplier_id)
        orders_created = self._seed_orders(supplier_id, clients, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"clients={len(clients)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_clients(self) -> list[Client]:
        seed_clients = [
            ("Ana Torres", "+51 987 654 321"),
            ("Bruno Díaz", "+51 912 345 678"),
            ("Carla Mendoza", "+51 955 111 222"),
            ("Diego Quispe", "+51 944 333 444"),
            ("Elena Rojas", "+51 933 555 666"),
        ]
        clients = []
        for name, phone in seed_clients:
            client, _ = Client.objects.get_or_create(name=name, defaults={"phone": phone})
            clients.append(client)
        return clients

    def _seed_products(self, supplier_id: uuid.UUID) -> list[Product]:
        catalog = [
            ("Camiseta básica", "M", "Polos", Decimal("35.00")),
            ("Camiseta básica", "L", "Polos", Decimal("35.00")),
            ("Pantalón jean", "32", "Pantalones", Decimal("89.90")),
            ("Casaca denim", "M", "Casacas", Decimal("149.00")),
            ("Vestido floral", "S", "Vestidos", Decimal("119.50")),
            ("Zapatillas urbanas", "40", "Calzado", Decimal("199.00")),
        ]
        products = []
        for name, size, category, price in catalog:
            product, _ = Product.objects.get_or_create(
                supplier_id=supplier_id,
                name=name,
                size=size,
                defaults={
                    "category": category,
                    "price": price,
                    "quantity": random.randint(5, 60),
                },
            )
            products.append(product)
        return products

    def _seed_orders(
        self,
        supplier_id: uuid.UUID,
        clients: list[Client],
        products: list[Product],
        count: int,
    ) -> int:
        last = (
            Order.objects.filter(supplier_id=supplier_id)
            .order_by("-sequence_number")
            .values_list("sequence_number", flat=True)
            .first()
        ) or 0

        statuses = [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.CANCELLED]
        weights = [0.5, 0.35, 0.15]

        for offset in range(1, count + 1):
            number = last + offset
            order = Order.objects.create(
                supplier_id=supplier_id,
                client_id=random.choice(clients).id,
                sequence_number=number,
                tracking_code=f"TRK-{number:05d}",
                status=random.choices(statuses, weights=weights, k=1)[0],
                notes=f"Seed order {number}",
            )
            Order.objects.filter(id=order.id).update(
                created_at=timezone.now() - timedelta(days=random.randint(0, 30))
            )

            total = Decimal("0.00")
            for product in random.sample(products, k=random.randint(1, 3)):
                quantity = random.randint(1, 3)
                detail = OrderDetail.objects.create(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                    size=product.size,
                    subtotal=quantity * product.price,
                )
                total += detail.subtotal
                # Checkout deducted stock; cancelled orders already gave it back.
                if order.status != OrderStatus.CANCELLED:
                    product.quantity = max(product.quantity - quantity, 0)
                    product.save(update_fields=["quantity"])

            Order.objects.filter(id=order.id).update(total=total)

        return count
