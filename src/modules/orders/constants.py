"""Order domain constants.

Defines status choices and the valid transitions of the order state
machine: ``pending`` is the only state with successors, both of which
are terminal.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pendiente"
    CONFIRMED = "confirmed", "Confirmado"
    CANCELLED = "cancelled", "Cancelado"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: set(),
    OrderStatus.CANCELLED: set(),
}

TRANSITION_TARGETS: frozenset[str] = frozenset(VALID_TRANSITIONS[OrderStatus.PENDING])


class StockRestoreMode(models.TextChoices):
    ATOMIC = "atomic", "Atomic increment"
    READ_MODIFY_WRITE = "read_modify_write", "Read, add, write back"


# Placeholders used when a referenced row is missing at read time.
MISSING_CLIENT_NAME = "Client not found"
MISSING_PRODUCT_NAME = "Product not found"
MISSING_FIELD_VALUE = "N/A"
