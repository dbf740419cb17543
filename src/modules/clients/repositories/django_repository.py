"""Django ORM implementation of the Client repository."""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

import structlog

from modules.clients.models import Client
from modules.clients.repositories.interfaces import IClientRepository
from modules.core.repositories.interfaces import backend_call

logger = structlog.get_logger(__name__)


class ClientDjangoRepository(IClientRepository):
    """Concrete Client repository backed by the Django async query API."""

    async def get_by_id(self, id: UUID) -> Optional[Client]:
        with backend_call("clients.get_by_id"):
            return await Client.objects.filter(id=id).afirst()

    async def get_many(self, ids: Iterable[UUID]) -> List[Client]:
        """Fetch every client whose id is in *ids* with a single ``IN`` query."""
        id_set = set(ids)
        if not id_set:
            return []
        with backend_call("clients.get_many"):
            clients = [c async for c in Client.objects.filter(id__in=id_set)]
        logger.debug("clients.fetched", requested=len(id_set), found=len(clients))
        return clients
