"""
PATH: cart/serializers/cart_item.py

CART LINE SERIALIZERS

Purpose:
- Serialize CartLineView rows (live product data, clamped quantity).
- Validate add / set-quantity input.
"""

from rest_framework import serializers


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    name = serializers.CharField()
    sku = serializers.CharField()
    slug = serializers.CharField()
    quantity = serializers.IntegerField()
    is_clamped = serializers.BooleanField()
    price_ht = serializers.DecimalField(max_digits=10, decimal_places=2)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    price_ttc = serializers.DecimalField(max_digits=12, decimal_places=2)
    stock_quantity = serializers.IntegerField()
    line_total_ht = serializers.DecimalField(max_digits=12, decimal_places=2, source="amounts.subtotal_ht")
    line_tax = serializers.DecimalField(max_digits=12, decimal_places=2, source="amounts.tax_amount")
    line_total_ttc = serializers.DecimalField(max_digits=12, decimal_places=2, source="amounts.total_ttc")


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class SetCartItemQuantityInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
