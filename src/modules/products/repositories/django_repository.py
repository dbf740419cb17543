"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's async QuerySet API.
Error handling follows the Null Object pattern: read misses return
``None`` and writes report whether a row matched; database failures
surface as ``BackendError``.
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

import structlog
from django.db.models import F
from django.utils import timezone

from modules.core.repositories.interfaces import backend_call
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    async def get_by_id(self, id: UUID) -> Optional[Product]:
        with backend_call("products.get_by_id"):
            return await Product.objects.filter(id=id).afirst()

    async def get_many(self, ids: Iterable[UUID]) -> List[Product]:
        id_set = set(ids)
        if not id_set:
            return []
        with backend_call("products.get_many"):
            return [p async for p in Product.objects.filter(id__in=id_set)]

    async def list_for_supplier(self, supplier_id: UUID) -> List[Product]:
        with backend_call("products.list_for_supplier"):
            return [
                p
                async for p in Product.objects.filter(supplier_id=supplier_id).order_by(
                    "name", "id"
                )
            ]

    # ------------------------------------------------------------------
    # Stock primitives
    # ------------------------------------------------------------------

    async def get_quantity(self, id: UUID) -> Optional[int]:
        with backend_call("products.get_quantity"):
            return await (
                Product.objects.filter(id=id)
                .values_list("quantity", flat=True)
                .afirst()
            )

    async def set_quantity(self, id: UUID, quantity: int) -> bool:
        with backend_call("products.set_quantity"):
            updated = await Product.objects.filter(id=id).aupdate(
                quantity=quantity, updated_at=timezone.now()
            )
        return updated > 0

    async def increment_quantity(self, id: UUID, delta: int) -> bool:
        """Single ``UPDATE ... SET quantity = quantity + delta`` statement.

        The ``quantity >= -delta`` predicate keeps a negative delta from
        driving stock below zero; for restorations it always holds.
        """
        with backend_call("products.increment_quantity"):
            updated = await Product.objects.filter(
                id=id, quantity__gte=-delta
            ).aupdate(quantity=F("quantity") + delta, updated_at=timezone.now())
        if not updated:
            logger.warning("product.increment_no_match", product_id=str(id), delta=delta)
        return updated > 0

    async def delete_for_supplier(self, supplier_id: UUID, id: UUID) -> bool:
        with backend_call("products.delete"):
            deleted, _ = await Product.objects.filter(
                id=id, supplier_id=supplier_id
            ).adelete()
        return deleted > 0
