from .cart import CartSerializer, MergeCartInputSerializer
from .cart_item import (
    AddCartItemInputSerializer,
    CartLineSerializer,
    SetCartItemQuantityInputSerializer,
)

__all__ = [
    "CartSerializer",
    "CartLineSerializer",
    "AddCartItemInputSerializer",
    "SetCartItemQuantityInputSerializer",
    "MergeCartInputSerializer",
]
