# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderHistory, OrderItem
from orders.services.order_lifecycle import allowed_transitions
from users.serializers import AddressSerializer


class OrderItemSerializer(serializers.ModelSerializer):
    """
    Order line snapshot (read-only).
    Name, sku and prices are the values at order time.
    """

    total_ttc = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price_ht",
            "tax_rate",
            "total_ht",
            "tax_amount",
            "total_ttc",
        ]
        read_only_fields = fields


class OrderHistorySerializer(serializers.ModelSerializer):
    created_by_email = serializers.EmailField(source="created_by.email", read_only=True, default=None)

    class Meta:
        model = OrderHistory
        fields = ["id", "status", "comment", "created_by_email", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Full order payload.

    allowed_transitions comes from the lifecycle table so that screens can
    offer only the moves the server will accept.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    history = OrderHistorySerializer(many=True, read_only=True)
    shipping_address = AddressSerializer(read_only=True)
    billing_address = AddressSerializer(read_only=True)
    customer_email = serializers.EmailField(source="user.email", read_only=True)
    source_quote_number = serializers.SerializerMethodField()
    allowed_transitions = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_email",
            "status",
            "allowed_transitions",
            "payment_method",
            "payment_status",
            "shipping_method",
            "shipping_address",
            "billing_address",
            "subtotal_ht",
            "tax_amount",
            "shipping_cost",
            "total_ttc",
            "notes",
            "source_quote_number",
            "items",
            "history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_allowed_transitions(self, obj):
        return list(allowed_transitions(obj.status))

    def get_source_quote_number(self, obj):
        quote = getattr(obj, "source_quote", None)
        return getattr(quote, "quote_number", None)


class OrderListSerializer(serializers.ModelSerializer):
    customer_email = serializers.EmailField(source="user.email", read_only=True)
    item_count = serializers.SerializerMethodField()
    allowed_transitions = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_email",
            "status",
            "allowed_transitions",
            "payment_status",
            "shipping_method",
            "total_ttc",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj):
        return sum(int(i.quantity) for i in obj.items.all())

    def get_allowed_transitions(self, obj):
        return list(allowed_transitions(obj.status))
