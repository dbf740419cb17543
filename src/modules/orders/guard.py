"""In-flight set of orders being transitioned.

One ``ConcurrencyGuard`` is built per session (or per worker process for
the HTTP surface) and injected into the fulfillment service.  It stops a
double tap, or an overlapping request from the same process, from
running a second transition of an order while the first is still
waiting on the backend.  It knows nothing about other processes.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator, Set

import structlog

from modules.orders.exceptions import ConcurrentTransitionRejected

logger = structlog.get_logger(__name__)


class ConcurrencyGuard:
    def __init__(self) -> None:
        self._in_flight: Set[Hashable] = set()
        self._lock = threading.Lock()

    def try_acquire(self, order_id: Hashable) -> bool:
        """Mark *order_id* as in flight; ``False`` if it already was."""
        with self._lock:
            if order_id in self._in_flight:
                return False
            self._in_flight.add(order_id)
            return True

    def release(self, order_id: Hashable) -> None:
        with self._lock:
            self._in_flight.discard(order_id)

    def is_processing(self, order_id: Hashable) -> bool:
        with self._lock:
            return order_id in self._in_flight

    @property
    def in_flight(self) -> frozenset:
        with self._lock:
            return frozenset(self._in_flight)

    @contextmanager
    def hold(self, order_id: Hashable) -> Iterator[None]:
        """Scoped acquisition, released on every exit path.

        Raises:
            ConcurrentTransitionRejected: *order_id* is already held.
        """
        if not self.try_acquire(order_id):
            logger.info("order.guard_rejected", order_id=str(order_id))
            raise ConcurrentTransitionRejected(order_id)
        try:
            yield
        finally:
            self.release(order_id)
