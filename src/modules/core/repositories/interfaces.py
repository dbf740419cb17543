"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

Every method is a coroutine: each call is one round trip to the
backend and a suspension point for the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generic, Iterable, Iterator, List, Optional, TypeVar
from uuid import UUID

from django.db import DatabaseError

from modules.core.exceptions import BackendError

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the row type returned by the
    repository (e.g. ``Client``, ``Product``).
    """

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[T]:
        """Retrieve a row by its primary key, ``None`` when absent."""

    @abstractmethod
    async def get_many(self, ids: Iterable[UUID]) -> List[T]:
        """Batched look-up by a set of primary keys.

        Missing ids are silently omitted from the result.
        """


@contextmanager
def backend_call(operation: str) -> Iterator[None]:
    """Translate database driver errors into ``BackendError``."""
    try:
        yield
    except DatabaseError as exc:
        raise BackendError(operation, str(exc)) from exc
