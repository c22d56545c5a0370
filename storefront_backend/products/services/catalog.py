# products/services/catalog.py

"""
CATALOG SERVICE

Product creation goes through here so the opening stock is posted to the
ledger like any other movement (reference INITIAL).
"""

from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from django.utils.text import slugify

from products.models import Product, StockMovement
from products.services.stock_ledger import apply_movement

INITIAL_REFERENCE = "INITIAL"


def _unique_slug(base: str) -> str:
    root = slugify(base)[:240] or "product"
    slug = root
    n = 2
    while Product.objects.filter(slug=slug).exists():
        slug = f"{root}-{n}"
        n += 1
    return slug


@transaction.atomic
def create_product(
    *,
    sku: str,
    name: str,
    price_ht,
    tax_rate=Decimal("20.00"),
    initial_stock: int = 0,
    stock_alert_threshold: int = 5,
    slug: str = "",
    category=None,
    brand=None,
    description: str = "",
    is_active: bool = True,
    user=None,
) -> Product:
    product = Product(
        sku=(sku or "").strip().upper(),
        name=name,
        slug=slug or _unique_slug(name),
        price_ht=Decimal(str(price_ht)),
        tax_rate=Decimal(str(tax_rate)),
        stock_alert_threshold=stock_alert_threshold,
        category=category,
        brand=brand,
        description=description,
        is_active=is_active,
    )
    product.full_clean(exclude=["stock_quantity"])
    product.save()

    if initial_stock:
        apply_movement(
            product=product,
            quantity=initial_stock,
            movement_type=StockMovement.MovementType.IN,
            reference=INITIAL_REFERENCE,
            notes="Opening stock",
            user=user,
        )
        product.refresh_from_db(fields=["stock_quantity"])

    return product
