"""Order fulfillment service layer (Use Cases).

Entry point for the supplier's order list and its two actions.

- ``load_orders`` / ``load_order``: denormalized read models.
- ``transition``: confirm or cancel a pending order.  This is the
  boundary where every fulfillment failure is caught and turned into a
  ``TransitionResult`` with a single message for the supplier; nothing
  is retried.

Business rules enforced:
- At most one in-flight transition per order per guard.
- Only pending orders transition, and only to a terminal state.
- Cancelling restores stock before the status is written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence
from uuid import UUID

import structlog

from modules.orders.aggregator import OrderAggregator
from modules.orders.dtos import (
    RejectionReason,
    TransitionOutcome,
    TransitionResult,
    describe_order,
)
from modules.orders.exceptions import (
    ConcurrentTransitionRejected,
    FetchFailure,
    InvalidOrderStatus,
    InvalidTargetStatus,
    OrderNotFound,
    PersistenceFailure,
)
from modules.orders.guard import ConcurrencyGuard
from modules.orders.reconciler import StockReconciler
from modules.orders.state_machine import OrderStateMachine

if TYPE_CHECKING:
    from modules.clients.repositories.interfaces import IClientRepository
    from modules.orders.dtos import OrderDetailView, OrderView
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _coerce_order_id(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class OrderFulfillmentService:
    """Application service for order fulfillment use-cases.

    Receives repositories and the concurrency guard via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        client_repository: IClientRepository,
        product_repository: IProductRepository,
        guard: ConcurrencyGuard,
        restore_mode: Optional[str] = None,
    ) -> None:
        self._guard = guard
        self._aggregator = OrderAggregator(
            order_repository, client_repository, product_repository
        )
        self._state_machine = OrderStateMachine(
            order_repository,
            StockReconciler(product_repository, mode=restore_mode),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def load_orders(self, supplier_id: UUID) -> List[OrderView]:
        """Raises ``FetchFailure`` when any backing relation cannot be read."""
        return await self._aggregator.load_orders(supplier_id)

    async def load_order(self, order_id: UUID) -> OrderView:
        """Raises ``OrderNotFound`` or ``FetchFailure``."""
        return await self._aggregator.load_order(order_id)

    def is_processing(self, order_id: Any) -> bool:
        key = _coerce_order_id(order_id)
        return key is not None and self._guard.is_processing(key)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def transition(
        self,
        order_id: Any,
        target_status: Any,
        details: Sequence[OrderDetailView],
        sequence_number: Optional[int] = None,
        tracking_code: Optional[str] = None,
    ) -> TransitionResult:
        """Confirm or cancel an order.  Never raises a fulfillment error.

        *order_id* is normalized to a ``UUID`` before it reaches the guard,
        so the string and ``UUID`` forms of one id share a single slot.
        """
        raw_id = order_id
        order_id = _coerce_order_id(raw_id)
        label = describe_order(
            sequence_number if sequence_number is not None else raw_id,
            tracking_code,
        )
        log = logger.bind(order_id=str(raw_id), target_status=str(target_status))

        def _result(
            outcome: TransitionOutcome,
            message: str,
            reason: Optional[RejectionReason] = None,
            **extra: Any,
        ) -> TransitionResult:
            return TransitionResult(
                order_id=order_id if order_id is not None else raw_id,
                sequence_number=sequence_number,
                tracking_code=tracking_code,
                target_status=str(getattr(target_status, "value", target_status)),
                outcome=outcome,
                message=message,
                reason=reason,
                **extra,
            )

        if order_id is None:
            log.warning("order.transition_invalid_id")
            return _result(
                TransitionOutcome.REJECTED,
                f"{label} was not found.",
                RejectionReason.NOT_FOUND,
            )

        try:
            with self._guard.hold(order_id):
                log.info("order.transition_started")
                result = await self._state_machine.transition(
                    order_id, target_status, details, sequence_number, tracking_code
                )
        except ConcurrentTransitionRejected:
            log.info("order.transition_already_processing")
            return _result(
                TransitionOutcome.REJECTED,
                f"{label} is already being processed.",
                RejectionReason.ALREADY_PROCESSING,
            )
        except InvalidTargetStatus as exc:
            return _result(
                TransitionOutcome.REJECTED,
                str(exc),
                RejectionReason.INVALID_TARGET,
            )
        except OrderNotFound:
            return _result(
                TransitionOutcome.REJECTED,
                f"{label} was not found.",
                RejectionReason.NOT_FOUND,
            )
        except InvalidOrderStatus as exc:
            if exc.current_status:
                message = f"{label} is already {exc.current_status}."
            else:
                message = f"{label} is no longer pending."
            return _result(
                TransitionOutcome.REJECTED, message, RejectionReason.NOT_PENDING
            )
        except FetchFailure as exc:
            return _result(
                TransitionOutcome.FAILED, f"Could not update {label}: {exc}"
            )
        except PersistenceFailure as exc:
            return self._persistence_failure_result(exc, label, _result, log)

        log.info("order.transition_finished", outcome=result.outcome.value)
        return result

    @staticmethod
    def _persistence_failure_result(
        exc: PersistenceFailure,
        label: str,
        make_result: Callable[..., TransitionResult],
        log: Any,
    ) -> TransitionResult:
        if not exc.stock_touched:
            return make_result(
                TransitionOutcome.FAILED, f"Could not update {label}: {exc}"
            )
        # Restored stock is not re-deducted.
        log.error(
            "order.inconsistent_after_restore",
            restored_units=exc.report.restored_units,
        )
        return make_result(
            TransitionOutcome.PARTIAL,
            f"Could not update {label}: {exc}. "
            "Stock was already restored and was not rolled back.",
            stock_restored=True,
            restored_units=exc.report.restored_units,
            failed_products=list(exc.report.failed_products),
        )


def build_fulfillment_service(
    guard: Optional[ConcurrencyGuard] = None,
) -> OrderFulfillmentService:
    """Wire the service with the Django ORM repositories."""
    from modules.clients.repositories.django_repository import ClientDjangoRepository
    from modules.orders.repositories.django_repository import OrderDjangoRepository
    from modules.products.repositories.django_repository import (
        ProductDjangoRepository,
    )

    return OrderFulfillmentService(
        order_repository=OrderDjangoRepository(),
        client_repository=ClientDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        guard=guard or ConcurrencyGuard(),
    )
