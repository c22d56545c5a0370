# orders/views/admin.py

"""
ADMIN ORDER VIEWSET

Purpose:
- Order list for the back office (filter by status, search by order
  number / customer).
- Status transitions and payment status changes.
- Dashboard counters.

Security:
- Requires IsAuthenticated + orders.manage

Transition rules:
- The lifecycle table is the only authority; the payload of every order
  carries its allowed_transitions so screens never duplicate the table.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import CommerceError, commerce_error_response
from orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    PaymentStatusInputSerializer,
    TransitionInputSerializer,
)
from orders.services.notifications import dispatch_status_changed
from orders.services.order_queries import admin_orders, order_detail, order_stats
from orders.services.order_transitions import set_payment_status
from orders.services.order_transitions import transition as transition_order
from permissions.roles import CAP_ORDERS_MANAGE, HasCapability


@extend_schema(tags=["Orders (admin)"])
class AdminOrderViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_MANAGE

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderSerializer

    def get_queryset(self):
        params = self.request.query_params
        return admin_orders(
            status=params.get("status") or "",
            search=params.get("q") or "",
        )

    # ======================================================
    # STATUS TRANSITION
    # POST /api/orders/admin/orders/:id/transition/
    # ======================================================

    @extend_schema(request=TransitionInputSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="transition")
    def transition(self, request, pk=None):
        ser = TransitionInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            result = transition_order(
                order_id=pk,
                to_status=ser.validated_data["status"],
                comment=ser.validated_data.get("comment") or None,
                user=request.user,
            )
        except CommerceError as exc:
            return commerce_error_response(exc)

        dispatch_status_changed(result.order_id, result.to_status)

        order = order_detail(order_id=result.order_id)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    # ======================================================
    # PAYMENT STATUS
    # ======================================================

    @extend_schema(request=PaymentStatusInputSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="payment-status")
    def payment_status(self, request, pk=None):
        ser = PaymentStatusInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            set_payment_status(order_id=pk, payment_status=ser.validated_data["payment_status"])
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(OrderSerializer(order_detail(order_id=pk)).data)

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        return Response(order_stats())
