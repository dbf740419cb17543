"""Client model.

Clients are created by the checkout flow and are read-only for the
fulfillment engine.  The phone number is masked in ``__str__`` because
model instances end up in log lines.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class Client(BaseModel):
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=30, blank=True, default="")

    class Meta:
        db_table = "clients"
        ordering = ["name"]

    @property
    def masked_phone(self) -> str:
        if len(self.phone) <= 4:
            return "*" * len(self.phone)
        return "*" * (len(self.phone) - 4) + self.phone[-4:]

    def __str__(self) -> str:
        return f"{self.name} ({self.masked_phone})"
