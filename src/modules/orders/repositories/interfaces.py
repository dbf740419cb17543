"""Order repository interface.

Covers the two relations the fulfillment engine owns: ``orders`` (read,
plus the terminal status write) and ``order_details`` (read-only).

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderDetail


class IOrderRepository(IRepository["Order"]):
    """Repository contract for orders and their details."""

    @abstractmethod
    async def list_for_supplier(self, supplier_id: UUID) -> List[Order]:
        """Orders of a supplier, newest ``sequence_number`` first."""

    @abstractmethod
    async def get_status(self, id: UUID) -> Optional[str]:
        """Current status of an order, ``None`` when it does not exist."""

    @abstractmethod
    async def list_details(self, order_ids: Iterable[UUID]) -> List[OrderDetail]:
        """Details of every order in *order_ids*, in one batched look-up."""

    @abstractmethod
    async def update_status(
        self,
        id: UUID,
        status: str,
        expected_status: str,
        updated_at: datetime,
    ) -> bool:
        """Write ``status`` and ``updated_at`` if the order is still in *expected_status*.

        Returns ``False`` when no row matched the predicate.
        """
