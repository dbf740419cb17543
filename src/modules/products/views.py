"""Product API views.

Exposes the supplier inventory listing and product deletion.  The
service is async; the view bridges into it with ``async_to_sync``.
"""

from __future__ import annotations

from uuid import UUID

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.products.exceptions import InventoryUnavailable, ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService


class SupplierProductViewSet(ViewSet):
    """Inventory of one supplier."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def list(self, request: Request, supplier_id: str | None = None) -> Response:
        """GET /api/v1/suppliers/{supplier_id}/products/"""
        try:
            supplier_uuid = UUID(str(supplier_id))
        except ValueError:
            return Response(
                {"detail": "Invalid supplier ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            items = async_to_sync(self._service.list_inventory)(supplier_uuid)
        except InventoryUnavailable as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response([item.model_dump(mode="json") for item in items])

    def destroy(
        self, request: Request, supplier_id: str | None = None, pk: str | None = None
    ) -> Response:
        """DELETE /api/v1/suppliers/{supplier_id}/products/{pk}/"""
        try:
            supplier_uuid = UUID(str(supplier_id))
            product_uuid = UUID(str(pk))
        except ValueError:
            return Response(
                {"detail": "Invalid ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            async_to_sync(self._service.delete_product)(supplier_uuid, product_uuid)
        except ProductNotFound:
            return Response(
                {"detail": "Product not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except InventoryUnavailable as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
