"""Product domain exceptions."""

from __future__ import annotations


class InventoryUnavailable(Exception):
    """The supplier's product listing could not be read from the backend."""


class ProductNotFound(Exception):
    """The product does not exist or belongs to another supplier."""
