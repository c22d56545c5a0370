# quotes/models/quote_item.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from products.models import Product
from products.services.pricing import LineAmounts, discounted_price, line_amounts

from .quote import Quote


def _default_tax_rate():
    return Decimal(str(getattr(settings, "DEFAULT_QUOTE_TAX_RATE", "20.00")))


class QuoteItem(models.Model):
    """
    One proposed line. unit_price_ht is the list price agreed on the quote;
    discount_rate (percent) is applied on top of it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    quote = models.ForeignKey(Quote, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="quote_items")

    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=128)

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price_ht = models.DecimalField(max_digits=10, decimal_places=2)
    discount_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=_default_tax_rate)

    class Meta:
        ordering = ["product_name", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="quote_item_quantity_positive",
            ),
        ]

    @property
    def net_unit_price_ht(self) -> Decimal:
        return discounted_price(self.unit_price_ht, self.discount_rate)

    @property
    def gross_amounts(self) -> LineAmounts:
        return line_amounts(unit_price_ht=self.unit_price_ht, quantity=self.quantity, tax_rate=self.tax_rate)

    @property
    def amounts(self) -> LineAmounts:
        return line_amounts(unit_price_ht=self.net_unit_price_ht, quantity=self.quantity, tax_rate=self.tax_rate)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
