# orders/models/order_history.py

"""
ORDER HISTORY (APPEND-ONLY)

One row per status the order has entered, including the initial one.
Created once. Never updated. Never deleted.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .order import Order


class OrderHistory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="history",
    )

    status = models.CharField(max_length=16, choices=Order.STATUS_CHOICES)
    comment = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_history_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "order history"
        indexes = [
            models.Index(fields=["order", "created_at"], name="order_history_order_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("OrderHistory records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderHistory records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.order_id} -> {self.status}"
