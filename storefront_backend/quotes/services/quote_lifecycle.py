# quotes/services/quote_lifecycle.py

"""
QUOTE LIFECYCLE SERVICE

Purpose:
- Pro customers request quotes and accept / reject the ones sent to them.
- Admins edit lines, then send the quote with a validity period.

Rules:
- One adjacency table for quote statuses (QUOTE_TRANSITIONS).
- Lines snapshot product name / sku / price when written.
- Totals are recomputed server-side on every line change:
    net unit price = unit_price_ht × (1 − discount_rate/100), rounded
    line tax       = round(net line subtotal × tax_rate / 100)
- Accepting a quote past its validity marks it expired (that status change
  is kept) and raises QuoteExpiredError.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from permissions.roles import CAP_QUOTES_REQUEST, user_has_capability
from products.models import Product
from products.services.exceptions import ProductNotFoundError
from products.services.pricing import _money, sum_lines
from quotes.models import Quote, QuoteItem
from quotes.services.exceptions import (
    AlreadyConvertedError,
    InvalidQuoteStatusError,
    QuoteExpiredError,
    QuoteNotFoundError,
)
from users.models import User

logger = logging.getLogger(__name__)


QUOTE_TRANSITIONS = {
    Quote.STATUS_DRAFT: (Quote.STATUS_SENT,),
    Quote.STATUS_SENT: (Quote.STATUS_ACCEPTED, Quote.STATUS_REJECTED, Quote.STATUS_EXPIRED),
    Quote.STATUS_ACCEPTED: (),
    Quote.STATUS_REJECTED: (),
    Quote.STATUS_EXPIRED: (),
}

EDITABLE_STATUSES = {Quote.STATUS_DRAFT, Quote.STATUS_SENT}


def allowed_quote_transitions(status: str) -> tuple:
    return QUOTE_TRANSITIONS.get(status, ())


def _require_transition(quote: Quote, to_status: str) -> None:
    if to_status not in allowed_quote_transitions(quote.status):
        raise InvalidQuoteStatusError(
            f"Quote {quote.quote_number} cannot move from '{quote.status}' to '{to_status}'"
        )


# ============================================================
# HELPERS
# ============================================================

def lock_quote(quote_id, *, user_id=None) -> Quote:
    qs = Quote.objects.select_for_update()
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    try:
        return qs.get(pk=quote_id)
    except (Quote.DoesNotExist, ValidationError, ValueError):
        raise QuoteNotFoundError(f"Quote not found: {quote_id}")


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("quantity must be a whole integer unit")
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise ValidationError("quantity must be a whole integer unit")
    if qty <= 0:
        raise ValidationError("quantity must be greater than zero")
    return qty


def _percent(value, *, field_name: str) -> Decimal:
    rate = Decimal(str(value if value not in (None, "") else "0"))
    if rate < 0 or rate > 100:
        raise ValidationError({field_name: "Must be between 0 and 100"})
    return rate


def _product_key(value) -> uuid.UUID:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ProductNotFoundError(f"Product not found: {value}")


def _products_by_id(product_ids) -> dict:
    ids = {_product_key(pid) for pid in product_ids}
    products = {p.id: p for p in Product.objects.filter(id__in=ids, is_active=True)}
    for pid in ids:
        if pid not in products:
            raise ProductNotFoundError(f"Product not found: {pid}")
    return products


def recompute_totals(quote: Quote) -> Quote:
    """Refresh the quote's money fields from its lines (caller saves)."""
    items = list(quote.items.all())

    totals = sum_lines([item.amounts for item in items])
    gross = sum_lines([item.gross_amounts for item in items])

    quote.subtotal_ht = totals.subtotal_ht
    quote.tax_amount = totals.tax_amount
    quote.total_ttc = totals.total_ttc
    quote.discount_amount = _money(gross.subtotal_ht - totals.subtotal_ht)
    return quote


# ============================================================
# CUSTOMER SIDE
# ============================================================

@transaction.atomic
def request_quote(*, user_id, items: list[dict], notes: str = "") -> Quote:
    """
    Create a draft quote for a validated pro account.

    items: [{"product_id": ..., "quantity": ...}, ...]
    Repeated products are merged. Lines start at the catalog price with the
    account's default discount rate.
    """
    user = User.objects.filter(pk=user_id).first()
    if user is None or not user_has_capability(user, CAP_QUOTES_REQUEST):
        raise PermissionDenied("Only validated pro accounts can request quotes")

    if not items:
        raise ValidationError("Quote must have at least one item")

    merged: "OrderedDict[object, int]" = OrderedDict()
    for line in items:
        pid = _product_key(line.get("product_id"))
        merged[pid] = merged.get(pid, 0) + _to_int_qty(line.get("quantity"))

    products = _products_by_id(merged.keys())
    discount = _percent(user.discount_rate, field_name="discount_rate")

    quote = Quote.objects.create(user=user, status=Quote.STATUS_DRAFT, notes=notes or "")

    for pid, qty in merged.items():
        product = products[pid]
        QuoteItem.objects.create(
            quote=quote,
            product=product,
            product_name=product.name,
            product_sku=product.sku,
            quantity=qty,
            unit_price_ht=product.price_ht,
            discount_rate=discount,
            tax_rate=product.tax_rate,
        )

    recompute_totals(quote).save()

    logger.info(
        "Quote requested",
        extra={"quote_number": quote.quote_number, "user_id": str(user.pk), "lines": len(merged)},
    )
    return quote


def accept_quote(*, quote_id, user_id) -> Quote:
    expired_number = None

    with transaction.atomic():
        quote = lock_quote(quote_id, user_id=user_id)
        _require_transition(quote, Quote.STATUS_ACCEPTED)

        if quote.is_past_validity:
            quote.status = Quote.STATUS_EXPIRED
            quote.save(update_fields=["status", "updated_at"])
            expired_number = quote.quote_number
        else:
            quote.status = Quote.STATUS_ACCEPTED
            quote.save(update_fields=["status", "updated_at"])

    if expired_number is not None:
        logger.warning("Quote accepted after expiry", extra={"quote_number": expired_number})
        raise QuoteExpiredError(f"Quote {expired_number} has expired")

    logger.info("Quote accepted", extra={"quote_number": quote.quote_number})
    return quote


@transaction.atomic
def reject_quote(*, quote_id, user_id) -> Quote:
    quote = lock_quote(quote_id, user_id=user_id)
    _require_transition(quote, Quote.STATUS_REJECTED)

    quote.status = Quote.STATUS_REJECTED
    quote.save(update_fields=["status", "updated_at"])

    logger.info("Quote rejected", extra={"quote_number": quote.quote_number})
    return quote


# ============================================================
# ADMIN SIDE
# ============================================================

@transaction.atomic
def update_quote_items(*, quote_id, items: list[dict]) -> Quote:
    """
    Replace every line of a draft or sent quote.

    items: [{"product_id", "quantity", "unit_price_ht"?, "discount_rate"?, "tax_rate"?}]
    Missing prices fall back to the product's current catalog values.
    """
    quote = lock_quote(quote_id)

    if quote.is_converted:
        raise AlreadyConvertedError(f"Quote {quote.quote_number} has already been converted")
    if quote.status not in EDITABLE_STATUSES:
        raise InvalidQuoteStatusError(
            f"Quote {quote.quote_number} cannot be edited (status: {quote.status})"
        )
    if not items:
        raise ValidationError("Quote must have at least one item")

    products = _products_by_id(line.get("product_id") for line in items)

    quote.items.all().delete()

    for line in items:
        product = products[_product_key(line.get("product_id"))]
        unit_price = line.get("unit_price_ht")
        tax_rate = line.get("tax_rate")

        unit_price = _money(product.price_ht if unit_price in (None, "") else unit_price)
        if unit_price < 0:
            raise ValidationError({"unit_price_ht": "Unit price cannot be negative"})

        QuoteItem.objects.create(
            quote=quote,
            product=product,
            product_name=product.name,
            product_sku=product.sku,
            quantity=_to_int_qty(line.get("quantity")),
            unit_price_ht=unit_price,
            discount_rate=_percent(line.get("discount_rate"), field_name="discount_rate"),
            tax_rate=_percent(
                product.tax_rate if tax_rate in (None, "") else tax_rate,
                field_name="tax_rate",
            ),
        )

    recompute_totals(quote).save()

    logger.info("Quote lines updated", extra={"quote_number": quote.quote_number, "lines": len(items)})
    return quote


@transaction.atomic
def send_quote(*, quote_id, valid_days: int | None = None) -> Quote:
    quote = lock_quote(quote_id)
    _require_transition(quote, Quote.STATUS_SENT)

    if not quote.items.exists():
        raise ValidationError("Quote must have at least one item")

    days = int(valid_days or getattr(settings, "DEFAULT_QUOTE_VALIDITY_DAYS", 30))
    if days <= 0:
        raise ValidationError({"valid_days": "Must be greater than zero"})

    quote.status = Quote.STATUS_SENT
    quote.valid_until = timezone.now() + timedelta(days=days)
    quote.save(update_fields=["status", "valid_until", "updated_at"])

    logger.info(
        "Quote sent",
        extra={"quote_number": quote.quote_number, "valid_until": quote.valid_until.isoformat()},
    )
    return quote
