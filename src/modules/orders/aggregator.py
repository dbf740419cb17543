"""Order read-model assembly.

``OrderAggregator`` builds ``OrderView`` objects from four independently
fetched relations (orders, clients, order details, products) and joins
them in memory through id-keyed maps.  Each relation is fetched once
per load with a batched ``IN`` look-up; no query runs per row.

Missing foreign rows are not an error: a detail whose product is gone
or an order whose client is gone gets a placeholder (see
``ClientView.placeholder`` / ``ProductView.placeholder``).  A failed
fetch, on the other hand, aborts the whole load with ``FetchFailure``.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Awaitable, Dict, List, Sequence, TypeVar
from uuid import UUID

import structlog

from modules.core.exceptions import BackendError
from modules.orders.dtos import OrderView
from modules.orders.exceptions import FetchFailure, OrderNotFound

if TYPE_CHECKING:
    from modules.clients.repositories.interfaces import IClientRepository
    from modules.orders.models import Order, OrderDetail
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

R = TypeVar("R")


class OrderAggregator:
    def __init__(
        self,
        order_repository: IOrderRepository,
        client_repository: IClientRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._client_repo = client_repository
        self._product_repo = product_repository

    async def load_orders(self, supplier_id: UUID) -> List[OrderView]:
        """Every order of *supplier_id*, newest sequence number first.

        Re-fetches on every call.

        Raises:
            FetchFailure: any of the four reads failed.
        """
        log = logger.bind(supplier_id=str(supplier_id))
        orders = await self._fetch(
            "orders", self._order_repo.list_for_supplier(supplier_id)
        )
        if not orders:
            log.info("orders.loaded", count=0)
            return []

        orders = sorted(orders, key=lambda o: o.sequence_number, reverse=True)
        views = await self._assemble(orders)
        log.info(
            "orders.loaded",
            count=len(views),
            placeholders=sum(1 for v in views if v.client.is_placeholder),
        )
        return views

    async def load_order(self, order_id: UUID) -> OrderView:
        """Single-order variant of ``load_orders``.

        Raises:
            OrderNotFound: no order with this id.
            FetchFailure: any of the four reads failed.
        """
        order = await self._fetch("orders", self._order_repo.get_by_id(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        views = await self._assemble([order])
        return views[0]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _assemble(self, orders: Sequence[Order]) -> List[OrderView]:
        client_ids = {o.client_id for o in orders if o.client_id is not None}
        clients = await self._fetch("clients", self._client_repo.get_many(client_ids))

        details: List[OrderDetail] = await self._fetch(
            "order_details", self._order_repo.list_details([o.id for o in orders])
        )

        products = []
        if details:
            product_ids = {d.product_id for d in details}
            products = await self._fetch(
                "products", self._product_repo.get_many(product_ids)
            )

        clients_by_id = {c.id: c for c in clients}
        products_by_id = {p.id: p for p in products}
        details_by_order: Dict[UUID, List[OrderDetail]] = defaultdict(list)
        for detail in details:
            details_by_order[detail.order_id].append(detail)

        missing_products = {
            d.product_id for d in details if d.product_id not in products_by_id
        }
        if missing_products:
            logger.warning(
                "orders.missing_products",
                product_ids=sorted(str(p) for p in missing_products),
            )

        return [
            OrderView.assemble(
                order, clients_by_id, details_by_order.get(order.id, []), products_by_id
            )
            for order in orders
        ]

    async def _fetch(self, relation: str, call: Awaitable[R]) -> R:
        try:
            return await call
        except BackendError as exc:
            logger.error("orders.load_failed", relation=relation, error=str(exc))
            raise FetchFailure(relation, str(exc)) from exc
