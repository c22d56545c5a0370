# products/models/product.py

import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q

from .category import Brand, Category

TWOPLACES = Decimal("0.01")


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - stock_quantity is the live on-hand count, never negative (DB constraint).
    - It is mutated ONLY by products.services.stock_ledger.apply_movement,
      which writes one StockMovement per change.
    - Σ StockMovement.quantity == stock_quantity (see reconcile_product).

    PRICING:
    - price_ht is the tax-exclusive unit price.
    - tax_rate is a percentage (20.00 = 20 %).
    - price_ttc is derived, never stored.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)

    price_ht = models.DecimalField(max_digits=10, decimal_places=2)
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("20.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )

    stock_quantity = models.PositiveIntegerField(default=0, editable=False)
    stock_alert_threshold = models.PositiveIntegerField(default=5)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "stock_quantity"], name="product_active_stock_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock_quantity__gte=0),
                name="product_stock_quantity_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.price_ht is None or Decimal(self.price_ht) < 0:
            raise ValidationError("price_ht must be non-negative")

        if self.tax_rate is None:
            raise ValidationError("tax_rate is required")

    @property
    def price_ttc(self) -> Decimal:
        price = Decimal(self.price_ht or 0)
        rate = Decimal(self.tax_rate or 0)
        return (price * (Decimal("1") + rate / Decimal("100"))).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock_quantity or 0) <= int(self.stock_alert_threshold or 0)

    @property
    def is_out_of_stock(self) -> bool:
        return int(self.stock_quantity or 0) == 0

    @classmethod
    def low_stock_filter(cls) -> Q:
        return Q(stock_quantity__lte=F("stock_alert_threshold"))
