# orders/models/order_item.py

"""
ORDER ITEM (IMMUTABLE SNAPSHOT)

Represents an immutable snapshot of an ordered line.

Notes:
- name / sku / unit price / tax rate are copied from the product at order
  time; later catalog changes never alter an order.
- product is SET_NULL so the snapshot survives product removal.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product
from products.services.pricing import line_amounts

from .order import Order


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name="order_items",
    )

    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=128)

    quantity = models.PositiveIntegerField()

    unit_price_ht = models.DecimalField(max_digits=10, decimal_places=2)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2)

    total_ht = models.DecimalField(max_digits=12, decimal_places=2, editable=False)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    class Meta:
        ordering = ["product_name", "id"]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError({"quantity": "Quantity must be greater than zero"})
        if self.unit_price_ht is None or Decimal(self.unit_price_ht) < 0:
            raise ValidationError({"unit_price_ht": "Unit price cannot be negative"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("OrderItem records are immutable")

        amounts = line_amounts(
            unit_price_ht=self.unit_price_ht,
            quantity=self.quantity,
            tax_rate=self.tax_rate,
        )
        self.total_ht = amounts.subtotal_ht
        self.tax_amount = amounts.tax_amount

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderItem records are immutable and cannot be deleted")

    @property
    def total_ttc(self) -> Decimal:
        return Decimal(self.total_ht) + Decimal(self.tax_amount)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
