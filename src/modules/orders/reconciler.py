"""Stock restoration for cancelled orders.

For every detail of a cancelled order the on-hand quantity of its
product goes back up by the detail quantity.  Details are processed in
the order given and independently: a failure is logged and recorded in
the report, and the loop carries on with the next detail.

Two write strategies:

``atomic``
    One ``quantity = quantity + n`` statement per detail.  Two
    cancellations touching the same product cannot lose an update.
``read_modify_write``
    Read the quantity, add, write it back.  Last write wins if another
    writer touches the product between the two round trips.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

import structlog
from django.conf import settings

from modules.core.exceptions import BackendError
from modules.orders.constants import StockRestoreMode
from modules.orders.exceptions import ReconciliationFailure

if TYPE_CHECKING:
    from modules.orders.dtos import OrderDetailView
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RestoredLine:
    detail_id: Any
    product_id: Any
    quantity: int


@dataclass
class RestorationReport:
    restored: List[RestoredLine] = field(default_factory=list)
    failed_products: List[Any] = field(default_factory=list)
    skipped_details: List[Any] = field(default_factory=list)

    @property
    def touched_stock(self) -> bool:
        return bool(self.restored)

    @property
    def complete(self) -> bool:
        return not self.failed_products

    @property
    def restored_units(self) -> int:
        return sum(line.quantity for line in self.restored)


class StockReconciler:
    def __init__(
        self,
        product_repository: IProductRepository,
        mode: Optional[str] = None,
    ) -> None:
        self._products = product_repository
        self._mode = StockRestoreMode(mode or settings.STOCK_RESTORE_MODE)

    @property
    def mode(self) -> StockRestoreMode:
        return self._mode

    async def restore_stock(self, details: Sequence[OrderDetailView]) -> RestorationReport:
        """Give back the quantity of every detail to its product.

        Never raises for a single detail; see ``RestorationReport.failed_products``.
        Calling it twice for the same details restores twice: callers
        must make sure a cancellation reaches this point once.
        """
        report = RestorationReport()
        log = logger.bind(mode=self._mode.value, detail_count=len(details))
        log.info("stock.restore_started")

        for detail in details:
            if detail.quantity <= 0:
                log.warning(
                    "stock.restore_skipped",
                    detail_id=str(detail.id),
                    quantity=detail.quantity,
                )
                report.skipped_details.append(detail.id)
                continue
            try:
                await self._restore_line(detail)
            except ReconciliationFailure as exc:
                log.error(
                    "stock.restore_failed",
                    detail_id=str(detail.id),
                    product_id=str(detail.product_id),
                    error=str(exc),
                )
                report.failed_products.append(detail.product_id)
                continue
            report.restored.append(
                RestoredLine(detail.id, detail.product_id, detail.quantity)
            )

        log.info(
            "stock.restore_finished",
            restored=len(report.restored),
            failed=len(report.failed_products),
            skipped=len(report.skipped_details),
            units=report.restored_units,
        )
        return report

    async def _restore_line(self, detail: OrderDetailView) -> None:
        if self._mode is StockRestoreMode.ATOMIC:
            await self._increment(detail)
        else:
            await self._read_modify_write(detail)

    async def _increment(self, detail: OrderDetailView) -> None:
        try:
            matched = await self._products.increment_quantity(
                detail.product_id, detail.quantity
            )
        except BackendError as exc:
            raise ReconciliationFailure(detail.product_id, str(exc)) from exc
        if not matched:
            raise ReconciliationFailure(detail.product_id, "product not found")
        logger.info(
            "stock.restored",
            product_id=str(detail.product_id),
            quantity=detail.quantity,
        )

    async def _read_modify_write(self, detail: OrderDetailView) -> None:
        try:
            current = await self._products.get_quantity(detail.product_id)
        except BackendError as exc:
            raise ReconciliationFailure(detail.product_id, str(exc)) from exc
        if current is None:
            raise ReconciliationFailure(detail.product_id, "product not found")

        restored = current + detail.quantity
        try:
            matched = await self._products.set_quantity(detail.product_id, restored)
        except BackendError as exc:
            raise ReconciliationFailure(detail.product_id, str(exc)) from exc
        if not matched:
            raise ReconciliationFailure(detail.product_id, "product not found")
        logger.info(
            "stock.restored",
            product_id=str(detail.product_id),
            quantity=detail.quantity,
            previous_stock=current,
            restored_stock=restored,
        )
