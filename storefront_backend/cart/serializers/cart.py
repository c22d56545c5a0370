# cart/serializers/cart.py

"""
CART SERIALIZER

Purpose:
- Return a cart in a frontend-friendly shape.
- Totals are computed server-side from live product data (never trusted
  from the client).
"""

from rest_framework import serializers

from .cart_item import CartLineSerializer


class CartSerializer(serializers.Serializer):
    """
    Input: {"cart_id": uuid | None, "lines": [CartLineView], "totals": Totals}
    """

    cart_id = serializers.UUIDField(allow_null=True)
    lines = CartLineSerializer(many=True)
    item_count = serializers.SerializerMethodField()
    subtotal_ht = serializers.DecimalField(max_digits=12, decimal_places=2, source="totals.subtotal_ht")
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2, source="totals.tax_amount")
    total_ttc = serializers.DecimalField(max_digits=12, decimal_places=2, source="totals.total_ttc")

    def get_item_count(self, obj) -> int:
        # units, not lines
        return sum(int(line.quantity) for line in obj["lines"])


class MergeCartInputSerializer(serializers.Serializer):
    anonymous_cart_id = serializers.UUIDField(required=False, allow_null=True)
