"""Product service layer (Use Cases).

Use-cases over the supplier catalog: the inventory listing and product
deletion.  Product create/edit and image upload live in the mobile
client and are not served here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.conf import settings

from modules.core.exceptions import BackendError
from modules.products.dtos import ProductOutputDTO
from modules.products.exceptions import InventoryUnavailable, ProductNotFound

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for the supplier inventory.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IProductRepository,
        low_stock_threshold: Optional[int] = None,
    ) -> None:
        self._repo = repository
        if low_stock_threshold is None:
            low_stock_threshold = settings.LOW_STOCK_THRESHOLD
        self._low_stock_threshold = low_stock_threshold

    async def list_inventory(self, supplier_id: UUID) -> List[ProductOutputDTO]:
        """Return the supplier's products ordered by name.

        Raises:
            InventoryUnavailable: the backend could not be read.
        """
        log = logger.bind(supplier_id=str(supplier_id))
        try:
            products = await self._repo.list_for_supplier(supplier_id)
        except BackendError as exc:
            log.error("inventory.load_failed", error=str(exc))
            raise InventoryUnavailable("Could not load products.") from exc

        items = [
            ProductOutputDTO.from_entity(p, self._low_stock_threshold)
            for p in products
        ]
        log.info(
            "inventory.loaded",
            count=len(items),
            low_stock=sum(1 for i in items if i.low_stock),
        )
        return items

    async def delete_product(self, supplier_id: UUID, product_id: UUID) -> None:
        """Delete one of the supplier's products.

        Orders that referenced it keep their details and show the
        product placeholder from then on.

        Raises:
            ProductNotFound: no such product for this supplier.
            InventoryUnavailable: the backend rejected the delete.
        """
        log = logger.bind(supplier_id=str(supplier_id), product_id=str(product_id))
        try:
            deleted = await self._repo.delete_for_supplier(supplier_id, product_id)
        except BackendError as exc:
            log.error("product.delete_failed", error=str(exc))
            raise InventoryUnavailable("Could not delete the product.") from exc

        if not deleted:
            raise ProductNotFound(f"Product {product_id} not found.")
        log.info("product.deleted")
