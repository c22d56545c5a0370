# cart/services/cart_ledger.py

"""
CART LEDGER SERVICE

Purpose:
- Find-or-create the cart of an owner (user or anonymous session).
- Add / set / remove / clear lines.
- Read lines with live product data (clamped to live stock).
- Merge an anonymous cart into a user's cart at sign-in.

Rules:
- Quantities are integer units.
- A line never holds more than the product's live stock at the time it is
  written; when stock drops later, READS clamp without persisting.
- Inactive or deleted products are hidden from reads.
- The cart never reserves stock. Checkout re-validates everything.

GUARANTEES:
- Every mutation runs in one transaction with the cart row locked.
- Merging is idempotent: the anonymous cart is deleted in the same
  transaction, so a second merge is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from backend.errors import NotFoundError
from cart.models import Cart, CartItem
from cart.services.owners import AnonymousOwner, Owner, UserOwner
from products.models import Product
from products.services.exceptions import OutOfStockError, ProductNotFoundError
from products.services.pricing import LineAmounts, Totals, line_amounts, sum_lines

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class CartNotFoundError(NotFoundError):
    """Cart does not exist."""

    code = "CART_NOT_FOUND"


class CartLineNotFoundError(NotFoundError):
    """Product is not in the cart."""

    code = "CART_LINE_NOT_FOUND"


# ============================================================
# HELPERS
# ============================================================

def _to_int_qty(value, *, minimum: int) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise ValidationError("quantity must be a whole integer unit")

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        qty = int(value.strip())
    else:
        raise ValidationError("quantity must be a whole integer unit")

    if qty < minimum:
        raise ValidationError(f"quantity must be at least {minimum}")
    return qty


def _lock_cart(cart_id) -> Cart:
    try:
        return Cart.objects.select_for_update().get(pk=cart_id)
    except (Cart.DoesNotExist, ValidationError, ValueError):
        raise CartNotFoundError(f"Cart not found: {cart_id}")


def _active_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id, is_active=True)
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise ProductNotFoundError(f"Product not found: {product_id}")


# ============================================================
# CART RESOLUTION
# ============================================================

def find_cart(owner: Owner) -> Optional[Cart]:
    return Cart.objects.filter(**owner.as_filter()).first()


def get_or_create_cart(owner: Owner) -> Cart:
    """
    Find-or-create. Two concurrent first requests for the same owner both
    end up with the same row (unique constraint + retry read).
    """
    cart = find_cart(owner)
    if cart is not None:
        return cart

    try:
        with transaction.atomic():
            return Cart.objects.create(**owner.as_fields())
    except IntegrityError:
        cart = find_cart(owner)
        if cart is None:
            raise
        return cart


# ============================================================
# MUTATIONS
# ============================================================

@transaction.atomic
def add_line(*, cart_id, product_id, quantity) -> CartItem:
    """
    Add `quantity` units of a product; an existing line is incremented.
    The resulting quantity is silently capped at live stock.
    """
    qty = _to_int_qty(quantity, minimum=1)
    cart = _lock_cart(cart_id)
    product = _active_product(product_id)

    stock = int(product.stock_quantity or 0)
    if stock <= 0:
        raise OutOfStockError(f"{product.name} is out of stock")

    line = CartItem.objects.select_for_update().filter(cart=cart, product=product).first()

    if line is None:
        line = CartItem(cart=cart, product=product, quantity=min(qty, stock))
    else:
        line.quantity = min(int(line.quantity) + qty, stock)

    line.save()
    Cart.objects.filter(pk=cart.pk).update(updated_at=timezone.now())

    logger.info(
        "Cart line added",
        extra={"cart_id": str(cart.id), "product_id": str(product.id), "quantity": line.quantity},
    )
    return line


@transaction.atomic
def set_line_quantity(*, cart_id, product_id, quantity) -> Optional[CartItem]:
    """
    Set a line to an exact quantity (capped at live stock).

    0 removes the line and returns None. A line whose product has no stock
    left is removed as well.
    """
    qty = _to_int_qty(quantity, minimum=0)
    cart = _lock_cart(cart_id)

    line = (
        CartItem.objects.select_for_update()
        .select_related("product")
        .filter(cart=cart, product_id=product_id)
        .first()
    )
    if line is None:
        raise CartLineNotFoundError(f"Product {product_id} is not in the cart")

    new_qty = min(qty, int(line.product.stock_quantity or 0))

    if new_qty <= 0:
        line.delete()
        return None

    line.quantity = new_qty
    line.save(update_fields=["quantity"])
    return line


@transaction.atomic
def remove_line(*, cart_id, product_id) -> bool:
    cart = _lock_cart(cart_id)
    deleted, _ = CartItem.objects.filter(cart=cart, product_id=product_id).delete()
    return deleted > 0


@transaction.atomic
def clear(cart_id) -> int:
    cart = _lock_cart(cart_id)
    deleted, _ = CartItem.objects.filter(cart=cart).delete()
    return deleted


# ============================================================
# READS
# ============================================================

@dataclass(frozen=True)
class CartLineView:
    product_id: str
    name: str
    sku: str
    slug: str
    quantity: int
    stored_quantity: int
    price_ht: Decimal
    tax_rate: Decimal
    price_ttc: Decimal
    stock_quantity: int
    amounts: LineAmounts

    @property
    def is_clamped(self) -> bool:
        return self.quantity < self.stored_quantity

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "sku": self.sku,
            "slug": self.slug,
            "quantity": self.quantity,
            "is_clamped": self.is_clamped,
            "price_ht": str(self.price_ht),
            "tax_rate": str(self.tax_rate),
            "price_ttc": str(self.price_ttc),
            "stock_quantity": self.stock_quantity,
            "line_total_ht": str(self.amounts.subtotal_ht),
            "line_tax": str(self.amounts.tax_amount),
            "line_total_ttc": str(self.amounts.total_ttc),
        }


def read_lines(cart_id) -> list[CartLineView]:
    """
    Lines with live product data.

    - quantity is clamped to live stock (not persisted)
    - lines whose product is inactive, deleted or out of stock are omitted
    """
    if not Cart.objects.filter(pk=cart_id).exists():
        raise CartNotFoundError(f"Cart not found: {cart_id}")

    items = (
        CartItem.objects.filter(cart_id=cart_id, product__is_active=True)
        .select_related("product")
        .order_by("created_at")
    )

    lines: list[CartLineView] = []
    for item in items:
        product = item.product
        stock = int(product.stock_quantity or 0)
        qty = min(int(item.quantity), stock)
        if qty <= 0:
            continue

        lines.append(
            CartLineView(
                product_id=str(product.id),
                name=product.name,
                sku=product.sku,
                slug=product.slug,
                quantity=qty,
                stored_quantity=int(item.quantity),
                price_ht=product.price_ht,
                tax_rate=product.tax_rate,
                price_ttc=product.price_ttc,
                stock_quantity=stock,
                amounts=line_amounts(
                    unit_price_ht=product.price_ht,
                    quantity=qty,
                    tax_rate=product.tax_rate,
                ),
            )
        )

    return lines


def cart_totals(lines: Iterable[CartLineView]) -> Totals:
    return sum_lines(line.amounts for line in lines)


# ============================================================
# MERGE (sign-in)
# ============================================================

@transaction.atomic
def merge_into_user_cart(*, anonymous_cart_id, user_id) -> Optional[Cart]:
    """
    Fold an anonymous cart into the user's cart.

    - same product: quantities summed, capped at live stock
    - other lines: moved (capped at live stock)
    - the anonymous cart is deleted

    A missing (already merged) anonymous cart is a no-op that returns the
    user's existing cart, if any.
    """
    user_owner = UserOwner(user_id=user_id)

    anon = Cart.objects.select_for_update().filter(pk=anonymous_cart_id, user__isnull=True).first()
    if anon is None:
        return find_cart(user_owner)

    user_cart = get_or_create_cart(user_owner)
    user_cart = _lock_cart(user_cart.pk)

    existing = {
        line.product_id: line
        for line in CartItem.objects.select_for_update().filter(cart=user_cart)
    }

    merged = 0
    for anon_line in anon.items.select_related("product"):
        stock = int(anon_line.product.stock_quantity or 0)
        target = existing.get(anon_line.product_id)

        if target is not None:
            new_qty = min(int(target.quantity) + int(anon_line.quantity), stock)
            if new_qty <= 0:
                target.delete()
            else:
                target.quantity = new_qty
                target.save(update_fields=["quantity"])
        else:
            new_qty = min(int(anon_line.quantity), stock)
            if new_qty > 0:
                CartItem.objects.create(cart=user_cart, product=anon_line.product, quantity=new_qty)
        merged += 1

    anon.delete()

    logger.info(
        "Anonymous cart merged",
        extra={"anonymous_cart_id": str(anonymous_cart_id), "cart_id": str(user_cart.id), "lines": merged},
    )
    return user_cart


def merge_session_cart(*, session_key: str, user_id) -> Optional[Cart]:
    """Convenience wrapper used at sign-in."""
    anon = find_cart(AnonymousOwner(session_key=session_key)) if session_key else None
    if anon is None:
        return find_cart(UserOwner(user_id=user_id))
    return merge_into_user_cart(anonymous_cart_id=anon.pk, user_id=user_id)
