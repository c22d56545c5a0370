# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is the SIGNED delta applied to Product.stock_quantity:
    in          -> positive
    out         -> negative
    adjustment  -> positive or negative (new absolute level - previous level)
- stock_after is the product level right after this movement
- Products referenced by movements cannot be deleted (PROTECT)
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "in", "Stock In"
        OUT = "out", "Stock Out"
        ADJUSTMENT = "adjustment", "Adjustment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=16, choices=MovementType.choices)

    quantity = models.IntegerField()
    stock_after = models.PositiveIntegerField()

    # order number, quote number, "ADMIN_BULK", "INITIAL", ...
    reference = models.CharField(max_length=64, blank=True, db_index=True)
    notes = models.TextField(blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["movement_type"], name="movement_type_idx"),
            models.Index(fields=["product", "created_at"], name="movement_product_created_idx"),
        ]

    def clean(self):
        if self.movement_type == self.MovementType.IN and self.quantity <= 0:
            raise ValidationError("in movements must carry a positive quantity")

        if self.movement_type == self.MovementType.OUT and self.quantity >= 0:
            raise ValidationError("out movements must carry a negative quantity")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity:+d}"
