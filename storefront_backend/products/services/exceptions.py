# products/services/exceptions.py

"""
STOCK / CATALOG SERVICE ERRORS
"""

from backend.errors import CommerceError, NotFoundError


class ProductNotFoundError(NotFoundError):
    """Product does not exist or is not available."""

    code = "PRODUCT_NOT_FOUND"


class NegativeStockError(CommerceError):
    """Movement would take stock below zero."""

    code = "NEGATIVE_STOCK"


class OutOfStockError(CommerceError):
    """Product has no stock at all."""

    code = "OUT_OF_STOCK"


class InsufficientStockError(CommerceError):
    """Requested quantity exceeds available stock."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, message: str = "", *, product=None, requested=None, available=None):
        super().__init__(
            message,
            product_id=getattr(product, "id", None),
            requested=requested,
            available=available,
        )
        self.product = product
        self.requested = requested
        self.available = available
