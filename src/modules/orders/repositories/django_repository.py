"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's async QuerySet API.
The status write is a single conditional ``UPDATE ... WHERE status =
<expected>``: the predicate, not a row lock, rejects a transition that
lost a race.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

import structlog

from modules.core.repositories.interfaces import backend_call
from modules.orders.models import Order, OrderDetail
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, id: UUID) -> Optional[Order]:
        with backend_call("orders.get_by_id"):
            return await Order.objects.filter(id=id).afirst()

    async def get_many(self, ids: Iterable[UUID]) -> List[Order]:
        id_set = set(ids)
        if not id_set:
            return []
        with backend_call("orders.get_many"):
            return [o async for o in Order.objects.filter(id__in=id_set)]

    async def list_for_supplier(self, supplier_id: UUID) -> List[Order]:
        with backend_call("orders.list_for_supplier"):
            return [
                o
                async for o in Order.objects.filter(supplier_id=supplier_id).order_by(
                    "-sequence_number"
                )
            ]

    async def get_status(self, id: UUID) -> Optional[str]:
        with backend_call("orders.get_status"):
            return await (
                Order.objects.filter(id=id).values_list("status", flat=True).afirst()
            )

    async def list_details(self, order_ids: Iterable[UUID]) -> List[OrderDetail]:
        id_set = set(order_ids)
        if not id_set:
            return []
        with backend_call("order_details.list"):
            return [
                d
                async for d in OrderDetail.objects.filter(order_id__in=id_set).order_by(
                    "created_at", "id"
                )
            ]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def update_status(
        self,
        id: UUID,
        status: str,
        expected_status: str,
        updated_at: datetime,
    ) -> bool:
        with backend_call("orders.update_status"):
            updated = await Order.objects.filter(
                id=id, status=expected_status
            ).aupdate(status=status, updated_at=updated_at)

        logger.info(
            "order.status_written",
            order_id=str(id),
            new_status=status,
            expected_status=expected_status,
            matched=bool(updated),
        )
        return updated > 0
