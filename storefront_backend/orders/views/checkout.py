# orders/views/checkout.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import CommerceError, commerce_error_response
from orders.serializers import CheckoutInputSerializer, OrderSerializer
from orders.services.checkout_orchestrator import create_order
from orders.services.notifications import dispatch_order_created
from orders.services.order_queries import order_detail


class CheckoutView(APIView):
    """
    CUSTOMER CHECKOUT ENDPOINT (AUTHORITATIVE)

    GUARANTEES:
    - Atomic checkout (order + items + stock movements + history + cart clear)
    - No oversell: live stock re-checked under row locks
    - Confirmation e-mail only after commit
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Orders"],
        request=CheckoutInputSerializer,
        responses={201: OrderSerializer},
        description="Turn the signed-in customer's cart into an order",
    )
    def post(self, request):
        serializer = CheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            receipt = create_order(
                user_id=request.user.pk,
                shipping_address_id=data["shipping_address_id"],
                billing_address_id=data["billing_address_id"],
                shipping_method=data["shipping_method"],
                payment_method=data["payment_method"],
                notes=data.get("notes", ""),
            )
        except CommerceError as exc:
            return commerce_error_response(exc)

        # on_commit runs immediately here (no surrounding transaction)
        dispatch_order_created(receipt.order_id)

        order = order_detail(order_id=receipt.order_id)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
