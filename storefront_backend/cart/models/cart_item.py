# cart/models/cart_item.py

"""
CART ITEM MODEL

Rules:
- One line per product per cart (DB constraint).
- Quantity must be > 0 (a zero quantity removes the line instead).
- No price snapshot: prices are read live until the order is placed.
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product
from .cart import Cart


class CartItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )

    quantity = models.PositiveIntegerField(help_text="Must be greater than zero")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"],
                name="unique_product_per_cart",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="cart_item_quantity_positive",
            ),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError({"quantity": "Quantity must be greater than zero"})

    def save(self, *args, **kwargs):
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{getattr(self.product, 'name', 'Product')} x {self.quantity}"
