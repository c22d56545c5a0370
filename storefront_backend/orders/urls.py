# orders/urls.py

"""
ORDERS URLS

Purpose:
- Register order routes under /api/orders/
    /checkout/                 cart -> order (customer)
    /                          own orders
    /<id>/ , /<id>/cancel/     own order detail / cancel
    /admin/orders/...          back office (orders.manage)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.views import (
    AdminOrderViewSet,
    CancelMyOrderView,
    CheckoutView,
    MyOrderDetailView,
    MyOrderListView,
)

app_name = "orders"

router = DefaultRouter()
router.register(r"orders", AdminOrderViewSet, basename="admin-orders")

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("admin/", include(router.urls)),
    path("", MyOrderListView.as_view(), name="my-orders"),
    path("<uuid:order_id>/", MyOrderDetailView.as_view(), name="my-order-detail"),
    path("<uuid:order_id>/cancel/", CancelMyOrderView.as_view(), name="my-order-cancel"),
]
