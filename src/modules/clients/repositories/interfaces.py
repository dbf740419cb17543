"""Client repository interface."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.clients.models import Client


class IClientRepository(IRepository["Client"]):
    """Read-only repository contract for clients.

    The fulfillment engine only needs batched look-ups
    (``get_many``) and single look-ups (``get_by_id``).
    """
