"""Order API views.

Exposes ``OrderFulfillmentService`` via HTTP using a DRF ViewSet nested
under the supplier.  The service is async; each action bridges into it
with ``async_to_sync``.  Fulfillment exceptions and transition outcomes
are translated into HTTP status codes here.
"""

from __future__ import annotations

from uuid import UUID

from asgiref.sync import async_to_sync
from django.apps import apps
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.orders.dtos import RejectionReason, TransitionOutcome, TransitionResult
from modules.orders.exceptions import FetchFailure, OrderNotFound
from modules.orders.serializers import TransitionSerializer
from modules.orders.services import build_fulfillment_service

_OUTCOME_STATUS = {
    TransitionOutcome.COMPLETED: status.HTTP_200_OK,
    TransitionOutcome.PARTIAL: status.HTTP_207_MULTI_STATUS,
    TransitionOutcome.FAILED: status.HTTP_502_BAD_GATEWAY,
}

_REJECTION_STATUS = {
    RejectionReason.ALREADY_PROCESSING: status.HTTP_409_CONFLICT,
    RejectionReason.NOT_PENDING: status.HTTP_409_CONFLICT,
    RejectionReason.INVALID_TARGET: status.HTTP_400_BAD_REQUEST,
    RejectionReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def _parse_uuid(value: str | None) -> UUID | None:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _http_status(result: TransitionResult) -> int:
    if result.outcome is TransitionOutcome.REJECTED:
        return _REJECTION_STATUS.get(result.reason, status.HTTP_409_CONFLICT)
    return _OUTCOME_STATUS[result.outcome]


class SupplierOrderViewSet(ViewSet):
    """Orders of one supplier and their confirm/cancel action."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_fulfillment_service(
            guard=apps.get_app_config("orders").transition_guard
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request, supplier_id: str | None = None) -> Response:
        """GET /api/v1/suppliers/{supplier_id}/orders/"""
        supplier_uuid = _parse_uuid(supplier_id)
        if supplier_uuid is None:
            return Response(
                {"detail": "Invalid supplier ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            views = async_to_sync(self._service.load_orders)(supplier_uuid)
        except FetchFailure as exc:
            return Response(
                {"detail": f"Error loading orders: {exc}"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        payload = []
        for view in views:
            data = view.model_dump(mode="json")
            data["is_processing"] = self._service.is_processing(view.id)
            payload.append(data)
        return Response(payload)

    def retrieve(
        self,
        request: Request,
        supplier_id: str | None = None,
        pk: str | None = None,
    ) -> Response:
        """GET /api/v1/suppliers/{supplier_id}/orders/{pk}/"""
        supplier_uuid = _parse_uuid(supplier_id)
        order_uuid = _parse_uuid(pk)
        if supplier_uuid is None or order_uuid is None:
            return Response(
                {"detail": "Invalid ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            view = async_to_sync(self._service.load_order)(order_uuid)
        except OrderNotFound:
            return Response(
                {"detail": "Order not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except FetchFailure as exc:
            return Response(
                {"detail": f"Error loading order: {exc}"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if view.supplier_id != supplier_uuid:
            return Response(
                {"detail": "Order not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(view.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Transition (dedicated action)
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def transition(
        self,
        request: Request,
        supplier_id: str | None = None,
        pk: str | None = None,
    ) -> Response:
        """POST /api/v1/suppliers/{supplier_id}/orders/{pk}/transition/

        Confirms or cancels a pending order; cancelling restores stock.
        The order is re-read first so the details, sequence number and
        tracking code come from the backend rather than the request.
        """
        supplier_uuid = _parse_uuid(supplier_id)
        order_uuid = _parse_uuid(pk)
        if supplier_uuid is None or order_uuid is None:
            return Response(
                {"detail": "Invalid ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["status"]

        try:
            view = async_to_sync(self._service.load_order)(order_uuid)
        except OrderNotFound:
            return Response(
                {"detail": "Order not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except FetchFailure as exc:
            return Response(
                {"detail": f"Error loading order: {exc}"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if view.supplier_id != supplier_uuid:
            return Response(
                {"detail": "Order not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        result = async_to_sync(self._service.transition)(
            view.id,
            target,
            view.details,
            view.sequence_number,
            view.tracking_code,
        )
        return Response(result.model_dump(mode="json"), status=_http_status(result))
