# products/services/pricing.py

"""
MONEY RULES (shared by cart display, checkout and quotes)

- All amounts are Decimal, quantized to 0.01 with ROUND_HALF_UP.
- line subtotal HT = unit_price_ht × quantity
- line tax         = round_half_up(line subtotal × tax_rate / 100)
- order tax        = Σ line tax (never recomputed on the order subtotal)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

TWOPLACES = Decimal("0.01")
HUNDRED = Decimal("100")


def _money(value) -> Decimal:
    return Decimal(str(value or "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineAmounts:
    subtotal_ht: Decimal
    tax_amount: Decimal

    @property
    def total_ttc(self) -> Decimal:
        return _money(self.subtotal_ht + self.tax_amount)


def line_amounts(*, unit_price_ht, quantity: int, tax_rate) -> LineAmounts:
    subtotal = _money(Decimal(str(unit_price_ht)) * Decimal(int(quantity)))
    tax = _money(subtotal * Decimal(str(tax_rate)) / HUNDRED)
    return LineAmounts(subtotal_ht=subtotal, tax_amount=tax)


def discounted_price(unit_price_ht, discount_rate) -> Decimal:
    """unit_price_ht × (1 − discount_rate/100), rounded to the cent."""
    rate = Decimal(str(discount_rate or "0"))
    return _money(Decimal(str(unit_price_ht)) * (Decimal("1") - rate / HUNDRED))


@dataclass(frozen=True)
class Totals:
    subtotal_ht: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal = Decimal("0.00")

    @property
    def total_ttc(self) -> Decimal:
        return _money(self.subtotal_ht + self.tax_amount + self.shipping_cost)


def sum_lines(lines: Iterable[LineAmounts], *, shipping_cost=Decimal("0.00")) -> Totals:
    subtotal = Decimal("0.00")
    tax = Decimal("0.00")
    for line in lines:
        subtotal += line.subtotal_ht
        tax += line.tax_amount
    return Totals(
        subtotal_ht=_money(subtotal),
        tax_amount=_money(tax),
        shipping_cost=_money(shipping_cost),
    )
