# quotes/serializers/quote.py

from rest_framework import serializers

from quotes.models import Quote, QuoteItem
from quotes.services.quote_lifecycle import allowed_quote_transitions


class QuoteItemSerializer(serializers.ModelSerializer):
    net_unit_price_ht = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total_ht = serializers.SerializerMethodField()

    class Meta:
        model = QuoteItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price_ht",
            "discount_rate",
            "net_unit_price_ht",
            "tax_rate",
            "line_total_ht",
        ]
        read_only_fields = fields

    def get_line_total_ht(self, obj):
        return str(obj.amounts.subtotal_ht)


class QuoteSerializer(serializers.ModelSerializer):
    items = QuoteItemSerializer(many=True, read_only=True)
    customer_email = serializers.EmailField(source="user.email", read_only=True)
    company_name = serializers.CharField(source="user.company_name", read_only=True)
    converted_order_number = serializers.CharField(
        source="converted_order.order_number", read_only=True, default=None
    )
    allowed_transitions = serializers.SerializerMethodField()

    class Meta:
        model = Quote
        fields = [
            "id",
            "quote_number",
            "customer_email",
            "company_name",
            "status",
            "allowed_transitions",
            "valid_until",
            "subtotal_ht",
            "discount_amount",
            "tax_amount",
            "total_ttc",
            "notes",
            "items",
            "converted_order",
            "converted_order_number",
            "converted_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_allowed_transitions(self, obj):
        return list(allowed_quote_transitions(obj.status))


# ======================================================
# INPUT
# ======================================================


class QuoteRequestLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class QuoteRequestInputSerializer(serializers.Serializer):
    """
    What a pro customer may send: products and quantities only.
    Prices come from the catalog and the account's discount rate.
    """

    items = QuoteRequestLineSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class QuoteItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price_ht = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    discount_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=0
    )
    tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )


class QuoteItemsUpdateInputSerializer(serializers.Serializer):
    items = QuoteItemInputSerializer(many=True, allow_empty=False)


class SendQuoteInputSerializer(serializers.Serializer):
    valid_days = serializers.IntegerField(min_value=1, required=False)
