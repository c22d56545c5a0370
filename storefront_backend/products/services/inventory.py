# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY READ SERVICES

Purpose:
- Low-stock listing for the back office.
- Headline stock numbers (active products, low, out of stock, movements today).

Rules:
- Read-only. Nothing here mutates stock.
- Only active products are considered.
"""

from __future__ import annotations

from django.utils import timezone

from products.models import Product, StockMovement


def low_stock_products(*, include_out_of_stock: bool = True):
    qs = Product.objects.filter(is_active=True).filter(Product.low_stock_filter())

    if not include_out_of_stock:
        qs = qs.filter(stock_quantity__gt=0)

    return qs.select_related("category", "brand").order_by("stock_quantity", "name")


def stock_stats() -> dict:
    active = Product.objects.filter(is_active=True)
    today = timezone.localdate()

    return {
        "active_products": active.count(),
        "low_stock": active.filter(Product.low_stock_filter(), stock_quantity__gt=0).count(),
        "out_of_stock": active.filter(stock_quantity=0).count(),
        "movements_today": StockMovement.objects.filter(created_at__date=today).count(),
    }
