"""Order status state machine.

``pending`` is the only state with successors (``confirmed`` and
``cancelled``), both terminal.  A transition:

1. rejects any target outside the terminal pair before touching
   anything;
2. reads the current status and rejects anything but ``pending``, so a
   second cancellation of the same order never reaches the reconciler;
3. for a cancellation, restores stock;
4. writes the new status with a ``status = pending`` predicate.

Stock restored in step 3 stays restored if step 4 fails; the failure is
reported through ``PersistenceFailure`` with the restoration report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

import structlog
from django.utils import timezone

from modules.core.exceptions import BackendError
from modules.orders.constants import TRANSITION_TARGETS, OrderStatus
from modules.orders.dtos import TransitionOutcome, TransitionResult, describe_order
from modules.orders.exceptions import (
    FetchFailure,
    InvalidOrderStatus,
    InvalidTargetStatus,
    OrderNotFound,
    PersistenceFailure,
)

if TYPE_CHECKING:
    from modules.orders.dtos import OrderDetailView
    from modules.orders.reconciler import RestorationReport, StockReconciler
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

_ACTION_LABELS = {
    OrderStatus.CONFIRMED: "confirmed",
    OrderStatus.CANCELLED: "cancelled",
}


def validate_target(target_status: Any) -> OrderStatus:
    """Coerce *target_status* to a terminal ``OrderStatus``.

    Raises:
        InvalidTargetStatus: unknown status, or ``pending``.
    """
    try:
        target = OrderStatus(target_status)
    except ValueError:
        raise InvalidTargetStatus(target_status) from None
    if target not in TRANSITION_TARGETS:
        raise InvalidTargetStatus(target_status)
    return target


class OrderStateMachine:
    def __init__(
        self,
        order_repository: IOrderRepository,
        reconciler: StockReconciler,
    ) -> None:
        self._order_repo = order_repository
        self._reconciler = reconciler

    async def transition(
        self,
        order_id: Any,
        target_status: Any,
        details: Sequence[OrderDetailView],
        sequence_number: Optional[int],
        tracking_code: Optional[str],
    ) -> TransitionResult:
        """Move a pending order to ``confirmed`` or ``cancelled``.

        Raises:
            InvalidTargetStatus: target is not a terminal state.
            OrderNotFound: no order with this id.
            InvalidOrderStatus: the order is not pending, or stopped being
                pending before the write and no stock was touched.
            FetchFailure: the current status could not be read.
            PersistenceFailure: the status write failed, or was rejected
                after stock had been restored.
        """
        target = validate_target(target_status)
        log = logger.bind(order_id=str(order_id), target_status=target.value)

        try:
            current = await self._order_repo.get_status(order_id)
        except BackendError as exc:
            log.error("order.status_read_failed", error=str(exc))
            raise FetchFailure("orders", str(exc)) from exc

        if current is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        if current != OrderStatus.PENDING:
            log.warning("order.invalid_transition", current_status=current)
            raise InvalidOrderStatus(order_id, current)

        report: Optional[RestorationReport] = None
        if target == OrderStatus.CANCELLED:
            report = await self._reconciler.restore_stock(details)

        try:
            written = await self._order_repo.update_status(
                order_id,
                target.value,
                expected_status=OrderStatus.PENDING.value,
                updated_at=timezone.now(),
            )
        except BackendError as exc:
            log.error(
                "order.persist_failed",
                error=str(exc),
                stock_restored=bool(report and report.touched_stock),
            )
            raise PersistenceFailure(order_id, str(exc), report) from exc

        if not written:
            if report is not None and report.touched_stock:
                log.error(
                    "order.persist_rejected_after_restore",
                    restored_units=report.restored_units,
                )
                raise PersistenceFailure(
                    order_id,
                    "the order stopped being pending while stock was restored",
                    report,
                )
            log.warning("order.persist_rejected")
            raise InvalidOrderStatus(order_id)

        log.info(
            "order.transitioned",
            stock_restored=bool(report and report.touched_stock),
        )
        return self._success(
            order_id, target, report, sequence_number, tracking_code
        )

    @staticmethod
    def _success(
        order_id: Any,
        target: OrderStatus,
        report: Optional[RestorationReport],
        sequence_number: Optional[int],
        tracking_code: Optional[str],
    ) -> TransitionResult:
        label = describe_order(sequence_number, tracking_code)
        message = f"{label} {_ACTION_LABELS[target]} successfully"
        outcome = TransitionOutcome.COMPLETED
        failed = []
        if report is not None:
            failed = list(report.failed_products)
            if report.failed_products:
                outcome = TransitionOutcome.PARTIAL
                message += (
                    f", but stock could not be restored for {len(report.failed_products)}"
                    " product(s)"
                )
            elif report.touched_stock:
                message += " and stock was restored"
        return TransitionResult(
            order_id=order_id,
            sequence_number=sequence_number,
            tracking_code=tracking_code,
            target_status=target.value,
            outcome=outcome,
            message=message + ".",
            stock_restored=bool(report and report.touched_stock),
            restored_units=report.restored_units if report else 0,
            failed_products=failed,
        )
