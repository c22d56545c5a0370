# products/views/__init__.py

"""
Products views package exports.
"""

from .category import BrandViewSet, CategoryViewSet
from .product import ProductViewSet
from .stock import (
    LowStockView,
    StockApplyView,
    StockBulkView,
    StockMovementListView,
    StockStatsView,
)

__all__ = [
    "BrandViewSet",
    "CategoryViewSet",
    "ProductViewSet",
    "StockMovementListView",
    "StockApplyView",
    "StockBulkView",
    "LowStockView",
    "StockStatsView",
]
