from .admin import AdminOrderViewSet
from .checkout import CheckoutView
from .customer import CancelMyOrderView, MyOrderDetailView, MyOrderListView

__all__ = [
    "AdminOrderViewSet",
    "CheckoutView",
    "MyOrderListView",
    "MyOrderDetailView",
    "CancelMyOrderView",
]
