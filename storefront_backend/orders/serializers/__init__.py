from .inputs import (
    CheckoutInputSerializer,
    PaymentStatusInputSerializer,
    TransitionInputSerializer,
)
from .order import (
    OrderHistorySerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
)

__all__ = [
    "CheckoutInputSerializer",
    "TransitionInputSerializer",
    "PaymentStatusInputSerializer",
    "OrderSerializer",
    "OrderListSerializer",
    "OrderItemSerializer",
    "OrderHistorySerializer",
]
