"""
PATH: cart/models/cart.py

CART MODEL

Purpose:
- Mutable shopping cart owned by EITHER a signed-in user OR an anonymous
  session (exactly one of the two, enforced by a DB check constraint).

Rules:
- At most one cart per user and one per session key.
- The cart never reserves stock; quantities are clamped against live stock
  when read and re-validated at checkout.
- Mutations go through cart.services.cart_ledger only.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum

User = settings.AUTH_USER_MODEL


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="carts",
    )

    session_key = models.CharField(max_length=64, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (Q(user__isnull=False) & Q(session_key__isnull=True))
                    | (Q(user__isnull=True) & Q(session_key__isnull=False))
                ),
                name="cart_has_exactly_one_owner",
            ),
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(user__isnull=False),
                name="one_cart_per_user",
            ),
            models.UniqueConstraint(
                fields=["session_key"],
                condition=Q(session_key__isnull=False),
                name="one_cart_per_session",
            ),
        ]

    def clean(self):
        if bool(self.user_id) == bool(self.session_key):
            raise ValidationError("A cart belongs to exactly one user or one session")

    def save(self, *args, **kwargs):
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @property
    def item_count(self) -> int:
        total = self.items.aggregate(total=Sum("quantity")).get("total")
        return int(total or 0)

    @property
    def is_empty(self) -> bool:
        return not self.items.exists()

    def __str__(self):
        owner = self.user_id or f"session:{self.session_key}"
        return f"Cart {self.id} | {owner}"
