"""Product model with supplier scoping and on-hand stock.

Business rules implemented:
- On-hand ``quantity`` cannot be negative (DB check constraint).
- ``quantity`` is decremented by the checkout flow and incremented only
  by stock reconciliation when an order is cancelled.
- ``image_url`` is stored as delivered by the object-storage client: a
  bare URL or a JSON blob carrying ``publicURL``.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class Product(BaseModel):
    """Catalog entry owned by one supplier."""

    supplier_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=0)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    size = models.CharField(max_length=20, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    image_url = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01

    class Meta:
        db_table = "products"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="products_quantity_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} [{self.size}] x{self.quantity}"
