# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product domain routes under /api/products/
    /products/           catalog (public read, staff write)
    /stock/...           stock ledger (staff)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import (
    BrandViewSet,
    CategoryViewSet,
    LowStockView,
    ProductViewSet,
    StockApplyView,
    StockBulkView,
    StockMovementListView,
    StockStatsView,
)

app_name = "products"

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"brands", BrandViewSet, basename="brands")
router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("stock/movements/", StockMovementListView.as_view(), name="stock-movements"),
    path("stock/apply/", StockApplyView.as_view(), name="stock-apply"),
    path("stock/bulk/", StockBulkView.as_view(), name="stock-bulk"),
    path("stock/low/", LowStockView.as_view(), name="stock-low"),
    path("stock/stats/", StockStatsView.as_view(), name="stock-stats"),
    path("", include(router.urls)),
]
