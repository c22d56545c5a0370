# orders/services/order_queries.py

"""
ORDER READ SIDE

Read-only querysets for customer and admin screens, plus the counters shown
on the admin order dashboard. No writes happen here.
"""

from __future__ import annotations

from django.db.models import Q, Sum
from django.utils import timezone

from orders.models import Order
from orders.services.order_transitions import OrderNotFoundError
from products.services.pricing import _money


def _base_queryset():
    return (
        Order.objects.all()
        .select_related("user", "shipping_address", "billing_address")
        .prefetch_related("items", "history")
    )


def orders_for_user(user_id):
    return _base_queryset().filter(user_id=user_id).order_by("-created_at")


def order_detail(*, order_id, user_id=None) -> Order:
    """
    One order with items and history (history is newest first by model
    ordering). When user_id is given, orders of other customers are hidden.
    """
    qs = _base_queryset()
    if user_id is not None:
        qs = qs.filter(user_id=user_id)

    order = qs.filter(pk=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order not found: {order_id}")
    return order


def admin_orders(*, status: str = "", search: str = ""):
    qs = _base_queryset().order_by("-created_at")

    status = (status or "").strip()
    if status:
        qs = qs.filter(status=status)

    search = (search or "").strip()
    if search:
        qs = qs.filter(
            Q(order_number__icontains=search)
            | Q(user__email__icontains=search)
            | Q(user__last_name__icontains=search)
        )

    return qs


def order_stats() -> dict:
    today = timezone.localdate()
    todays = Order.objects.filter(created_at__date=today)

    revenue = (
        todays.exclude(status=Order.STATUS_CANCELLED)
        .aggregate(total=Sum("total_ttc"))
        .get("total")
    )

    return {
        "pending": Order.objects.filter(status=Order.STATUS_PENDING).count(),
        "today_orders": todays.count(),
        "today_revenue": str(_money(revenue)),
    }
