"""Product DTOs for the Service Layer.

Framework-agnostic output DTOs using Pydantic v2 (``frozen=True``).

- ``ProductOutputDTO``: inventory listing row with a normalized image URL.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.products.models import Product

_JSON_URL_KEYS = ("publicURL", "publicUrl")
_EMPTY_MARKERS = {"", "undefined", "null"}


def normalize_image_url(raw: Optional[str]) -> Optional[str]:
    """Return a usable public URL for a stored image reference.

    The storage client sometimes persisted the whole upload response as
    JSON (``{"publicURL": "..."}``) instead of the URL itself.
    """
    if raw is None:
        return None
    value = raw.strip()
    if value in _EMPTY_MARKERS:
        return None
    if not value.startswith("{"):
        return value
    try:
        payload = json.loads(value)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    for key in _JSON_URL_KEYS:
        url = payload.get(key)
        if isinstance(url, str) and url.strip() not in _EMPTY_MARKERS:
            return url.strip()
    return None


class ProductOutputDTO(BaseModel):
    """Immutable DTO for inventory listing responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    quantity: int
    price: Decimal
    size: str
    category: str
    image_url: Optional[str]
    low_stock: bool

    @classmethod
    def from_entity(cls, product: Product, low_stock_threshold: int) -> ProductOutputDTO:
        return cls(
            id=product.id,
            name=product.name,
            quantity=product.quantity,
            price=product.price,
            size=product.size,
            category=product.category,
            image_url=normalize_image_url(product.image_url),
            low_stock=product.quantity <= low_stock_threshold,
        )
