"""Product URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.products.views import SupplierProductViewSet

router = SimpleRouter(trailing_slash=True)
router.register(
    r"suppliers/(?P<supplier_id>[^/.]+)/products",
    SupplierProductViewSet,
    basename="supplier-product",
)

urlpatterns = router.urls
