"""Order read models and transition results.

Framework-agnostic DTOs using Pydantic v2, all immutable
(``frozen=True``).

- ``ClientView`` / ``ProductView``: resolved references, or placeholders
  when the referenced row is missing.
- ``OrderDetailView``: a detail joined with its product.
- ``OrderView``: the denormalized order the supplier's list renders.
- ``TransitionResult``: outcome of a status transition with the message
  shown to the supplier.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field

from modules.orders.constants import (
    MISSING_CLIENT_NAME,
    MISSING_FIELD_VALUE,
    MISSING_PRODUCT_NAME,
    OrderStatus,
)

if TYPE_CHECKING:
    from modules.clients.models import Client
    from modules.orders.models import Order, OrderDetail
    from modules.products.models import Product


# ---------------------------------------------------------------------------
# Read model
# ---------------------------------------------------------------------------


class ClientView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[UUID]
    name: str
    phone: str
    is_placeholder: bool = False

    @classmethod
    def from_entity(cls, client: Client) -> ClientView:
        return cls(id=client.id, name=client.name, phone=client.phone or "")

    @classmethod
    def placeholder(cls, client_id: Optional[UUID]) -> ClientView:
        return cls(
            id=client_id,
            name=MISSING_CLIENT_NAME,
            phone=MISSING_FIELD_VALUE,
            is_placeholder=True,
        )


class ProductView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    category: str
    is_placeholder: bool = False

    @classmethod
    def from_entity(cls, product: Product) -> ProductView:
        return cls(id=product.id, name=product.name, category=product.category)

    @classmethod
    def placeholder(cls, product_id: UUID) -> ProductView:
        return cls(
            id=product_id,
            name=MISSING_PRODUCT_NAME,
            category=MISSING_FIELD_VALUE,
            is_placeholder=True,
        )


class OrderDetailView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    order_id: UUID
    product_id: UUID
    quantity: int
    unit_price: Decimal
    size: str
    subtotal: Decimal
    product: ProductView

    @classmethod
    def assemble(
        cls, detail: OrderDetail, products: Dict[UUID, Product]
    ) -> OrderDetailView:
        """Join *detail* with its product, substituting a placeholder if missing."""
        product = products.get(detail.product_id)
        if detail.subtotal is not None:
            subtotal = Decimal(detail.subtotal)
        else:
            subtotal = detail.quantity * Decimal(detail.unit_price)
        return cls(
            id=detail.id,
            order_id=detail.order_id,
            product_id=detail.product_id,
            quantity=detail.quantity,
            unit_price=detail.unit_price,
            size=detail.size or "",
            subtotal=subtotal,
            product=(
                ProductView.from_entity(product)
                if product is not None
                else ProductView.placeholder(detail.product_id)
            ),
        )


class OrderView(BaseModel):
    """Denormalized order built fresh on every load; never persisted."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    supplier_id: UUID
    sequence_number: int
    tracking_code: Optional[str]
    status: str
    total: Decimal
    notes: str
    created_at: datetime
    updated_at: datetime
    client: ClientView
    details: List[OrderDetailView]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_items(self) -> int:
        return sum(d.quantity for d in self.details)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def can_transition(self) -> bool:
        return self.status == OrderStatus.PENDING

    @classmethod
    def assemble(
        cls,
        order: Order,
        clients: Dict[UUID, Client],
        details: Iterable[OrderDetail],
        products: Dict[UUID, Product],
    ) -> OrderView:
        client = clients.get(order.client_id)
        return cls(
            id=order.id,
            supplier_id=order.supplier_id,
            sequence_number=order.sequence_number,
            tracking_code=order.tracking_code or None,
            status=order.status,
            total=order.total,
            notes=order.notes or "",
            created_at=order.created_at,
            updated_at=order.updated_at,
            client=(
                ClientView.from_entity(client)
                if client is not None
                else ClientView.placeholder(order.client_id)
            ),
            details=[OrderDetailView.assemble(d, products) for d in details],
        )


# ---------------------------------------------------------------------------
# Transition result
# ---------------------------------------------------------------------------


class TransitionOutcome(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    REJECTED = "rejected"
    FAILED = "failed"


class RejectionReason(str, Enum):
    ALREADY_PROCESSING = "already_processing"
    INVALID_TARGET = "invalid_target"
    NOT_PENDING = "not_pending"
    NOT_FOUND = "not_found"


def describe_order(sequence_number: Any, tracking_code: Optional[str]) -> str:
    """Human label for an order: ``Order #7 (TRK-7)``."""
    label = f"Order #{sequence_number}"
    if tracking_code:
        label += f" ({tracking_code})"
    return label


class TransitionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: Any
    sequence_number: Optional[int]
    tracking_code: Optional[str]
    target_status: str
    outcome: TransitionOutcome
    message: str
    reason: Optional[RejectionReason] = None
    stock_restored: bool = False
    restored_units: int = 0
    failed_products: List[Any] = []

    @property
    def succeeded(self) -> bool:
        return self.outcome is TransitionOutcome.COMPLETED
