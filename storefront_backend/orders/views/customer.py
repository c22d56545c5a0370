# orders/views/customer.py

"""
CUSTOMER ORDER VIEWS

- List / retrieve the signed-in customer's own orders.
- Cancel an own order while it is still pending.

Orders of other customers are reported as 404.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import CommerceError, commerce_error_response
from orders.serializers import OrderListSerializer, OrderSerializer
from orders.services.notifications import dispatch_status_changed
from orders.services.order_queries import order_detail, orders_for_user
from orders.services.order_transitions import cancel_order_for_customer


@extend_schema(tags=["Orders"])
class MyOrderListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderListSerializer

    def get_queryset(self):
        return orders_for_user(self.request.user.pk)


class MyOrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Orders"], responses={200: OrderSerializer})
    def get(self, request, order_id):
        try:
            order = order_detail(order_id=order_id, user_id=request.user.pk)
        except CommerceError as exc:
            return commerce_error_response(exc)
        return Response(OrderSerializer(order).data)


class CancelMyOrderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Orders"], request=None, responses={200: OrderSerializer})
    def post(self, request, order_id):
        try:
            result = cancel_order_for_customer(
                order_id=order_id,
                user_id=request.user.pk,
                user=request.user,
            )
        except CommerceError as exc:
            return commerce_error_response(exc)

        dispatch_status_changed(result.order_id, result.to_status)

        order = order_detail(order_id=result.order_id)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)
