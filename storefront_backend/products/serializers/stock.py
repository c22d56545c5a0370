# products/serializers/stock.py

from rest_framework import serializers

from products.models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    performed_by_email = serializers.EmailField(source="performed_by.email", read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "movement_type",
            "quantity",
            "stock_after",
            "reference",
            "notes",
            "performed_by",
            "performed_by_email",
            "created_at",
        ]
        read_only_fields = fields


class StockMovementInputSerializer(serializers.Serializer):
    """
    Input for a single manual movement.

    quantity is an amount for in/out and an absolute level for adjustment.
    """

    product_id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=StockMovement.MovementType.choices)
    quantity = serializers.IntegerField(min_value=0)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["type"] != StockMovement.MovementType.ADJUSTMENT and attrs["quantity"] == 0:
            raise serializers.ValidationError({"quantity": "Must be greater than zero for in/out movements."})
        return attrs


class BulkStockInputSerializer(serializers.Serializer):
    updates = StockMovementInputSerializer(many=True, allow_empty=False)
