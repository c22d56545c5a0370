"""
PATH: cart/urls.py

CART URLS

Purpose:
- Cart read
- Cart line operations (keyed by product id)
- Anonymous → user cart merge
"""

from django.urls import path

from cart.views.api import (
    AddCartItemView,
    CartItemView,
    CartView,
    ClearCartView,
    MergeCartView,
)

app_name = "cart"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/", AddCartItemView.as_view(), name="add-item"),
    path("items/<uuid:product_id>/", CartItemView.as_view(), name="item"),
    path("clear/", ClearCartView.as_view(), name="clear"),
    path("merge/", MergeCartView.as_view(), name="merge"),
]
