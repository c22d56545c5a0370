# quotes/services/quote_conversion.py

"""
QUOTE -> ORDER BRIDGE (APPLICATION SERVICE)

Purpose:
- Turn an accepted quote into a confirmed Order, once.

Hard rules:
- Only `accepted` quotes convert (InvalidQuoteStatusError otherwise).
- A quote converts at most once: the quote row is locked and its
  converted_order is checked first, so a second call (or a concurrent one)
  raises AlreadyConvertedError instead of creating a duplicate order.
- Live stock is re-checked under product locks; the quote may be stale.
- Each line is priced at unit_price_ht × (1 − discount_rate/100).

Notes:
- Order, items, stock movements, history and the quote's converted marker
  are written in one transaction.
- The order ships to the customer's default shipping / billing addresses,
  by delivery, paid by transfer, with no shipping cost, and starts confirmed.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.utils import timezone

from orders.models import Order
from orders.services.checkout_orchestrator import (
    AddressNotFoundError,
    OrderLine,
    OrderReceipt,
    check_live_stock,
    write_order,
)
from products.services.pricing import discounted_price
from products.services.stock_ledger import lock_products_in_order
from quotes.models import Quote
from quotes.services.exceptions import AlreadyConvertedError, InvalidQuoteStatusError
from quotes.services.quote_lifecycle import lock_quote
from users.models import Address

logger = logging.getLogger(__name__)


def _default_address(user_id, address_type: str) -> Address:
    address = (
        Address.objects.filter(user_id=user_id, type=address_type, is_default=True)
        .order_by("-created_at")
        .first()
    )
    if address is None:
        raise AddressNotFoundError(f"Customer has no default {address_type} address")
    return address


@transaction.atomic
def convert_quote_to_order(*, quote_id, user=None) -> OrderReceipt:
    quote = lock_quote(quote_id)

    if quote.is_converted:
        raise AlreadyConvertedError(
            f"Quote {quote.quote_number} has already been converted "
            f"(order {quote.converted_order.order_number})"
        )

    if quote.status != Quote.STATUS_ACCEPTED:
        raise InvalidQuoteStatusError(
            f"Only accepted quotes can be converted to orders (status: {quote.status})"
        )

    shipping_address = _default_address(quote.user_id, Address.TYPE_SHIPPING)
    billing_address = _default_address(quote.user_id, Address.TYPE_BILLING)

    items = list(quote.items.all())
    if not items:
        raise InvalidQuoteStatusError(f"Quote {quote.quote_number} has no lines")

    locked = lock_products_in_order(item.product_id for item in items)

    # the same product may appear on several lines
    requested = defaultdict(int)
    for item in items:
        requested[item.product_id] += int(item.quantity)

    for product_id, qty in requested.items():
        check_live_stock(product_id=product_id, product=locked.get(product_id), quantity=qty)

    lines = [
        OrderLine(
            product=locked[item.product_id],
            quantity=int(item.quantity),
            unit_price_ht=discounted_price(item.unit_price_ht, item.discount_rate),
            tax_rate=item.tax_rate,
        )
        for item in sorted(items, key=lambda i: str(i.product_id))
    ]

    order = write_order(
        user_id=quote.user_id,
        lines=lines,
        shipping_address=shipping_address,
        billing_address=billing_address,
        shipping_method=Order.SHIPPING_DELIVERY,
        payment_method=Order.PAYMENT_TRANSFER,
        shipping_cost=0,
        status=Order.STATUS_CONFIRMED,
        notes=f"Created from quote {quote.quote_number}",
        history_comment=f"Order created from quote {quote.quote_number}",
        performed_by=user if getattr(user, "is_authenticated", False) else None,
    )

    quote.converted_order = order
    quote.converted_at = timezone.now()
    quote.save(update_fields=["converted_order", "converted_at", "updated_at"])

    logger.info(
        "Quote converted",
        extra={"quote_number": quote.quote_number, "order_number": order.order_number},
    )

    return OrderReceipt(order_id=str(order.id), order_number=order.order_number)
