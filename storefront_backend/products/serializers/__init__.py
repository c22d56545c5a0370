# products/serializers/__init__.py

from .category import BrandSerializer, CategorySerializer
from .product import ProductSerializer
from .stock import (
    BulkStockInputSerializer,
    StockMovementInputSerializer,
    StockMovementSerializer,
)

__all__ = [
    "BrandSerializer",
    "CategorySerializer",
    "ProductSerializer",
    "StockMovementSerializer",
    "StockMovementInputSerializer",
    "BulkStockInputSerializer",
]
