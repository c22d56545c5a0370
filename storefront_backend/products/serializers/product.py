# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Canonical Product serializer for both staff and public storefront.
- stock_quantity is read-only: it only changes through stock movements.
- Creation posts the opening stock through the ledger (initial_stock).
"""

from rest_framework import serializers

from products.models import Product
from products.services.catalog import create_product


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - stock_quantity is never written from the API
    - price_ttc is derived from price_ht + tax_rate
    """

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    brand_name = serializers.CharField(source="brand.name", read_only=True, default=None)

    price_ttc = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    initial_stock = serializers.IntegerField(write_only=True, required=False, min_value=0, default=0)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "slug",
            "description",
            "category",
            "category_name",
            "brand",
            "brand_name",
            "price_ht",
            "tax_rate",
            "price_ttc",
            "stock_quantity",
            "stock_alert_threshold",
            "is_low_stock",
            "is_active",
            "initial_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "category_name",
            "brand_name",
            "price_ttc",
            "stock_quantity",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"slug": {"required": False}}

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value

    def validate_price_ht(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("price_ht must be non-negative")
        return value

    def create(self, validated_data):
        request = self.context.get("request")
        return create_product(
            user=getattr(request, "user", None) if request else None,
            **validated_data,
        )

    def update(self, instance, validated_data):
        validated_data.pop("initial_stock", None)
        return super().update(instance, validated_data)
