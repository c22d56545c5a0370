# orders/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn the user's cart into an Order (atomic, auditable).
- Re-validate every line against LIVE stock under row locks.
- Decrement stock through the stock ledger (one `out` movement per line,
  reference = order number).

Hard rules:
- Quantities are integer units.
- Money values are computed server-side (products.services.pricing);
  the frontend never calculates totals.
- Products are locked in ascending id order, so two checkouts touching the
  same products always queue instead of deadlocking.

Notes:
- The whole checkout runs inside one DB transaction:
  order rows + stock movements + history + cart clearing succeed together
  or roll back together.
- Notifications are NOT sent here. The caller registers them with
  transaction.on_commit (see orders.services.notifications).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from backend.errors import CommerceError, NotFoundError
from cart.models import Cart, CartItem
from orders.models import Order, OrderHistory, OrderItem
from orders.services.order_lifecycle import default_comment
from products.models import StockMovement
from products.services.exceptions import InsufficientStockError
from products.services.pricing import line_amounts, sum_lines, _money
from products.services.stock_ledger import apply_movement, lock_products_in_order
from users.models import Address

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class EmptyCartError(CommerceError):
    """Cart is empty."""

    code = "EMPTY_CART"


class AddressNotFoundError(NotFoundError):
    """Address does not exist or does not belong to the customer."""

    code = "ADDRESS_NOT_FOUND"


@dataclass(frozen=True)
class OrderReceipt:
    order_id: str
    order_number: str

    def as_dict(self) -> dict:
        return {"order_id": self.order_id, "order_number": self.order_number}


@dataclass(frozen=True)
class OrderLine:
    """A line about to be written: live product + agreed unit price."""

    product: object
    quantity: int
    unit_price_ht: Decimal
    tax_rate: Decimal


# ============================================================
# HELPERS
# ============================================================

def _flat_delivery_fee() -> Decimal:
    return _money(getattr(settings, "FLAT_DELIVERY_FEE", "5.90"))


def shipping_cost_for(shipping_method: str) -> Decimal:
    if shipping_method == Order.SHIPPING_DELIVERY:
        return _flat_delivery_fee()
    return Decimal("0.00")


def _validate_choice(value: str, choices, *, field_name: str) -> str:
    allowed = {c[0] for c in choices}
    if value not in allowed:
        raise ValidationError({field_name: f"Must be one of: {', '.join(sorted(allowed))}"})
    return value


def _user_address(*, user_id, address_id) -> Address:
    address = Address.objects.filter(pk=address_id, user_id=user_id).first()
    if address is None:
        raise AddressNotFoundError(f"Address not found: {address_id}")
    return address


def check_live_stock(*, product_id, product, quantity: int, name_hint: str = "") -> None:
    """
    Hard all-or-nothing gate: the live (locked) stock must cover the line.
    Inactive or removed products count as zero stock.
    """
    if product is None or not product.is_active:
        raise InsufficientStockError(
            f"{getattr(product, 'name', None) or name_hint or product_id} is no longer available",
            product=product,
            requested=quantity,
            available=0,
        )

    available = int(product.stock_quantity or 0)
    if available < quantity:
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}. Available: {available}, Requested: {quantity}",
            product=product,
            requested=quantity,
            available=available,
        )


def write_order(
    *,
    user_id,
    lines: list[OrderLine],
    shipping_address: Address,
    billing_address: Address,
    shipping_method: str,
    payment_method: str,
    shipping_cost: Decimal,
    status: str = Order.STATUS_PENDING,
    notes: str = "",
    history_comment: str | None = None,
    performed_by=None,
) -> Order:
    """
    Shared write path for checkout and quote conversion.

    Must run inside the caller's transaction, with product rows already
    locked and stock already validated.
    """
    amounts = [
        line_amounts(unit_price_ht=l.unit_price_ht, quantity=l.quantity, tax_rate=l.tax_rate)
        for l in lines
    ]
    totals = sum_lines(amounts, shipping_cost=shipping_cost)

    order = Order.objects.create(
        user_id=user_id,
        status=status,
        payment_method=payment_method,
        payment_status=Order.PAYMENT_PENDING,
        shipping_method=shipping_method,
        shipping_address=shipping_address,
        billing_address=billing_address,
        subtotal_ht=totals.subtotal_ht,
        tax_amount=totals.tax_amount,
        shipping_cost=totals.shipping_cost,
        total_ttc=totals.total_ttc,
        notes=notes or "",
    )

    for line in lines:
        OrderItem.objects.create(
            order=order,
            product=line.product,
            product_name=line.product.name,
            product_sku=line.product.sku,
            quantity=line.quantity,
            unit_price_ht=_money(line.unit_price_ht),
            tax_rate=line.tax_rate,
        )

        apply_movement(
            product=line.product,
            quantity=line.quantity,
            movement_type=StockMovement.MovementType.OUT,
            reference=order.order_number,
            notes=f"Order {order.order_number}",
            user=performed_by,
        )

    OrderHistory.objects.create(
        order=order,
        status=status,
        comment=history_comment if history_comment is not None else default_comment(Order.STATUS_PENDING),
        created_by=performed_by,
    )

    return order


# ============================================================
# CHECKOUT
# ============================================================

@transaction.atomic
def create_order(
    *,
    user_id,
    shipping_address_id,
    billing_address_id,
    shipping_method: str,
    payment_method: str,
    notes: str | None = None,
) -> OrderReceipt:
    _validate_choice(shipping_method, Order.SHIPPING_METHOD_CHOICES, field_name="shipping_method")
    _validate_choice(payment_method, Order.PAYMENT_METHOD_CHOICES, field_name="payment_method")

    shipping_address = _user_address(user_id=user_id, address_id=shipping_address_id)
    billing_address = _user_address(user_id=user_id, address_id=billing_address_id)

    # Lock the cart first: a double-click checkout waits here and then finds
    # the cart empty.
    cart = Cart.objects.select_for_update().filter(user_id=user_id).first()
    if cart is None:
        raise EmptyCartError("Cart is empty")

    cart_lines = list(CartItem.objects.filter(cart=cart).order_by("product_id"))
    if not cart_lines:
        raise EmptyCartError("Cart is empty")

    locked = lock_products_in_order(line.product_id for line in cart_lines)

    lines: list[OrderLine] = []
    for cart_line in cart_lines:
        product = locked.get(cart_line.product_id)
        qty = int(cart_line.quantity)

        check_live_stock(product_id=cart_line.product_id, product=product, quantity=qty)

        lines.append(
            OrderLine(
                product=product,
                quantity=qty,
                unit_price_ht=product.price_ht,
                tax_rate=product.tax_rate,
            )
        )

    order = write_order(
        user_id=user_id,
        lines=lines,
        shipping_address=shipping_address,
        billing_address=billing_address,
        shipping_method=shipping_method,
        payment_method=payment_method,
        shipping_cost=shipping_cost_for(shipping_method),
        notes=notes or "",
    )

    CartItem.objects.filter(cart=cart).delete()

    logger.info(
        "Order created",
        extra={
            "order_number": order.order_number,
            "user_id": str(user_id),
            "lines": len(lines),
            "total_ttc": str(order.total_ttc),
        },
    )

    return OrderReceipt(order_id=str(order.id), order_number=order.order_number)
