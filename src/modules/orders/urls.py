"""Order URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.orders.views import SupplierOrderViewSet

router = SimpleRouter(trailing_slash=True)
router.register(
    r"suppliers/(?P<supplier_id>[^/.]+)/orders",
    SupplierOrderViewSet,
    basename="supplier-order",
)

urlpatterns = router.urls
