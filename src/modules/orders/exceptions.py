"""Order fulfillment exceptions.

Raised by the aggregator, the reconciler and the state machine.  The
fulfillment service catches them at the transition boundary and turns
them into a ``TransitionResult``; the API layer translates the rest
into HTTP responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from modules.orders.reconciler import RestorationReport


class FulfillmentError(Exception):
    """Base class for every order fulfillment failure."""


class FetchFailure(FulfillmentError):
    """A read of one of the backing relations failed; no partial view is returned."""

    def __init__(self, relation: str, message: str = "") -> None:
        self.relation = relation
        super().__init__(f"Could not load {relation}: {message}" if message else relation)


class ReconciliationFailure(FulfillmentError):
    """Restoring stock for a single order detail failed."""

    def __init__(self, product_id: Any, message: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id}: {message}")


class PersistenceFailure(FulfillmentError):
    """The status write failed after validation passed.

    ``report`` holds the stock restorations already applied; they are
    not rolled back.
    """

    def __init__(
        self,
        order_id: Any,
        message: str,
        report: Optional[RestorationReport] = None,
    ) -> None:
        self.order_id = order_id
        self.report = report
        super().__init__(message)

    @property
    def stock_touched(self) -> bool:
        return self.report is not None and self.report.touched_stock


class ConcurrentTransitionRejected(FulfillmentError):
    """A transition of the same order is already in flight."""

    def __init__(self, order_id: Any) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} is already being processed.")


class InvalidTargetStatus(FulfillmentError):
    """The requested target is not one of the terminal states."""

    def __init__(self, target_status: Any) -> None:
        self.target_status = target_status
        super().__init__(f"Unsupported target status {target_status!r}.")


class InvalidOrderStatus(FulfillmentError):
    """The order is no longer pending (already terminal or changed concurrently)."""

    def __init__(self, order_id: Any, current_status: Optional[str] = None) -> None:
        self.order_id = order_id
        self.current_status = current_status
        if current_status:
            message = f"Order {order_id} is already {current_status}."
        else:
            message = f"Order {order_id} is no longer pending."
        super().__init__(message)


class OrderNotFound(FulfillmentError):
    """The requested order does not exist."""
