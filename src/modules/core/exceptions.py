"""Backend-level exceptions shared by every repository."""

from __future__ import annotations


class BackendError(Exception):
    """A round trip to the relational backend failed.

    Repositories raise this instead of leaking driver exceptions so the
    service layer can classify the failure (fetch, reconciliation or
    persistence) without knowing about the database.
    """

    def __init__(self, operation: str, message: str = "") -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}" if message else operation)
