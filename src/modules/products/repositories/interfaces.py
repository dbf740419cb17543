"""Product repository interface.

Besides the batched look-ups used to build order views, the contract
exposes the stock primitives used by reconciliation: a plain
read/write pair and a single-statement atomic increment.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for catalog products."""

    @abstractmethod
    async def list_for_supplier(self, supplier_id: UUID) -> List[Product]:
        """All products owned by a supplier, ordered by name."""

    @abstractmethod
    async def get_quantity(self, id: UUID) -> Optional[int]:
        """Current on-hand quantity, ``None`` when the product is missing."""

    @abstractmethod
    async def set_quantity(self, id: UUID, quantity: int) -> bool:
        """Overwrite the on-hand quantity.  ``False`` when no row matched."""

    @abstractmethod
    async def increment_quantity(self, id: UUID, delta: int) -> bool:
        """Apply ``quantity = quantity + delta`` in one statement.

        The update is conditional on the result staying non-negative.
        Returns ``False`` when no row matched.
        """

    @abstractmethod
    async def delete_for_supplier(self, supplier_id: UUID, id: UUID) -> bool:
        """Hard-delete a product owned by *supplier_id*.

        Returns ``False`` when no row matched, including a product that
        belongs to another supplier.  Order details keep their dangling
        ``product_id``.
        """
