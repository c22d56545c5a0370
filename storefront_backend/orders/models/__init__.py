# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .order import Order
from .order_history import OrderHistory
from .order_item import OrderItem

__all__ = [
    "Order",
    "OrderItem",
    "OrderHistory",
]
