"""Order DRF serializers for API input.

Output is produced from the Pydantic read models in ``dtos.py``; the
serializer only validates what the supplier sends.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import TRANSITION_TARGETS


class TransitionSerializer(serializers.Serializer):
    """Validates the target status of a transition request."""

    status = serializers.ChoiceField(choices=sorted(t.value for t in TRANSITION_TARGETS))

    def to_internal_value(self, data):
        if isinstance(data, dict) and isinstance(data.get("status"), str):
            data = {**data, "status": data["status"].strip().lower()}
        return super().to_internal_value(data)
