# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


def generate_order_number(prefix: str) -> str:
    """<PREFIX><yymm>-<8 upper hex>, e.g. BI2610-3FA29C0D"""
    return f"{prefix}{timezone.now().strftime('%y%m')}-{uuid.uuid4().hex[:8].upper()}"


class Order(models.Model):
    """
    Customer order.

    GUARANTEES:
    - Created only by the order engine (checkout or quote conversion), in the
      same transaction as its items, its first history entry and the stock
      movements it caused.
    - Financial snapshot: after creation ONLY status / payment_status /
      updated_at may change. Everything else is refused in save().
    - status changes go through orders.services.order_transitions so that
      every change writes one OrderHistory row.
    """

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_REFUNDED = "refunded"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_REFUNDED, "Refunded"),
    ]

    PAYMENT_CASH = "cash"
    PAYMENT_CHECK = "check"
    PAYMENT_TRANSFER = "transfer"

    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CHECK, "Check"),
        (PAYMENT_TRANSFER, "Bank transfer"),
    ]

    SHIPPING_PICKUP = "pickup"
    SHIPPING_DELIVERY = "delivery"

    SHIPPING_METHOD_CHOICES = [
        (SHIPPING_PICKUP, "Store pickup"),
        (SHIPPING_DELIVERY, "Delivery"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=32,
        unique=True,
        blank=True,
        help_text="System-generated public order number",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    payment_method = models.CharField(max_length=16, choices=PAYMENT_METHOD_CHOICES)
    payment_status = models.CharField(
        max_length=16, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING
    )
    shipping_method = models.CharField(max_length=16, choices=SHIPPING_METHOD_CHOICES)

    shipping_address = models.ForeignKey(
        "users.Address",
        on_delete=models.PROTECT,
        related_name="shipped_orders",
    )
    billing_address = models.ForeignKey(
        "users.Address",
        on_delete=models.PROTECT,
        related_name="billed_orders",
    )

    subtotal_ht = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_ttc = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["user", "created_at"], name="order_user_created_idx"),
        ]

    MUTABLE_FIELDS = frozenset({"status", "payment_status", "updated_at"})

    def _validate_immutable(self, previous: "Order"):
        for field in self._meta.concrete_fields:
            if field.name in self.MUTABLE_FIELDS:
                continue
            if getattr(self, field.attname) != getattr(previous, field.attname):
                raise ValidationError(
                    f"Order {previous.order_number} is immutable. "
                    f"Field '{field.name}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Order.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.order_number:
            prefix = getattr(settings, "ORDER_NUMBER_PREFIX", "BI")
            number = generate_order_number(prefix)
            # regenerate on the (unlikely) collision
            while Order.objects.filter(order_number=number).exists():
                number = generate_order_number(prefix)
            self.order_number = number

        super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.STATUS_DELIVERED, self.STATUS_CANCELLED)

    def __str__(self):
        return f"{self.order_number} | {self.total_ttc} | {self.status}"
