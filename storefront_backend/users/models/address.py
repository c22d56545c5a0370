# users/models/address.py

import uuid

from django.conf import settings
from django.db import models


class Address(models.Model):
    """
    Postal address owned by a user.

    Orders reference addresses by id; an address referenced by an order
    cannot be deleted (PROTECT on the order side).
    """

    TYPE_BILLING = "billing"
    TYPE_SHIPPING = "shipping"

    TYPE_CHOICES = [
        (TYPE_BILLING, "Billing"),
        (TYPE_SHIPPING, "Shipping"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )

    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=120)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=80, default="France")
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_default", "created_at"]
        indexes = [
            models.Index(fields=["user", "type"], name="address_user_type_idx"),
        ]

    def as_dict(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    def __str__(self):
        return f"{self.street}, {self.postal_code} {self.city} ({self.type})"
