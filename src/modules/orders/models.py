"""Order and OrderDetail models.

Business rules implemented:
- ``sequence_number`` is unique per supplier and is what the supplier
  sees as "Order #N".
- ``client_id`` and ``product_id`` are plain UUID columns: the rows they
  reference may be missing at read time and the read side tolerates it.
- OrderDetail ``subtotal`` is optional; readers derive
  ``quantity * unit_price`` when it is not stored.
- Status changes are written with a ``status = pending`` predicate by the
  repository, never through ``save()``.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus


class Order(BaseModel):
    supplier_id = models.UUIDField()
    client_id = models.UUIDField()
    sequence_number = models.PositiveIntegerField()
    tracking_code = models.CharField(max_length=40, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-sequence_number"]
        indexes = [
            models.Index(
                fields=["supplier_id", "-sequence_number"],
                name="orders_supplier_seq_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["supplier_id", "sequence_number"],
                name="orders_supplier_sequence_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"#{self.sequence_number} ({self.status})"


class OrderDetail(BaseModel):
    """Line of an order.  ``unit_price`` is the price at purchase time."""

    order_id = models.UUIDField(db_index=True)
    product_id = models.UUIDField()
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    size = models.CharField(max_length=20, blank=True, default="")
    subtotal = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "order_details"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_details_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity}"
