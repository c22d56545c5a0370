# orders/serializers/inputs.py

from rest_framework import serializers

from orders.models import Order


class CheckoutInputSerializer(serializers.Serializer):
    """
    Explicit checkout input serializer.

    Documents ONLY what the client is allowed to send.
    Lines, prices and totals are taken from the server-side cart.
    """

    shipping_address_id = serializers.UUIDField()
    billing_address_id = serializers.UUIDField()
    shipping_method = serializers.ChoiceField(choices=Order.SHIPPING_METHOD_CHOICES)
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransitionInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentStatusInputSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Order.PAYMENT_STATUS_CHOICES)
