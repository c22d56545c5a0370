# quotes/models/quote.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from orders.models import Order
from orders.models.order import generate_order_number


class Quote(models.Model):
    """
    B2B price proposal.

    Lifecycle:
        draft -> sent -> accepted | rejected | expired

    GUARANTEES:
    - Converts into at most one Order (converted_order is set once, in the
      same transaction that creates the order).
    - A converted quote is frozen.
    """

    STATUS_DRAFT = "draft"
    STATUS_SENT = "sent"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"
    STATUS_EXPIRED = "expired"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_SENT, "Sent"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_EXPIRED, "Expired"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    quote_number = models.CharField(max_length=32, unique=True, blank=True)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="quotes",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    valid_until = models.DateTimeField(null=True, blank=True)

    # subtotal_ht is net of line discounts; discount_amount is what they removed
    subtotal_ht = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_ttc = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True)

    converted_order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="source_quote",
    )
    converted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="quote_status_idx"),
            models.Index(fields=["user", "created_at"], name="quote_user_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Quote.objects.filter(pk=self.pk).only("converted_order").first()
            if previous is not None and previous.converted_order_id:
                raise ValidationError(f"Quote {self.quote_number} has been converted and is frozen")

        if not self.quote_number:
            prefix = getattr(settings, "QUOTE_NUMBER_PREFIX", "DEV")
            number = generate_order_number(prefix)
            while Quote.objects.filter(quote_number=number).exists():
                number = generate_order_number(prefix)
            self.quote_number = number

        super().save(*args, **kwargs)

    @property
    def is_converted(self) -> bool:
        return self.converted_order_id is not None

    @property
    def is_past_validity(self) -> bool:
        return bool(self.valid_until and self.valid_until < timezone.now())

    def __str__(self):
        return f"{self.quote_number} | {self.status}"
