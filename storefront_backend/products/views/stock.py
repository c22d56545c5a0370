# products/views/stock.py

"""
STOCK LEDGER API

Purpose:
- Read the movement log (filter by product / type).
- Apply a single movement or a bulk batch of movements.
- Low stock list + headline stats.

Rules:
- Reads need inventory.view; writes need inventory.adjust.
- Every write goes through products.services.stock_ledger.
"""

from django.db import transaction
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import CommerceError, commerce_error_response
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
    HasCapability,
)
from products.models import StockMovement
from products.serializers import (
    BulkStockInputSerializer,
    ProductSerializer,
    StockMovementInputSerializer,
    StockMovementSerializer,
)
from products.services.inventory import low_stock_products, stock_stats
from products.services.stock_ledger import apply_movement, bulk_apply_movements


class _InventoryReadMixin:
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_ADJUST}


@extend_schema(tags=["Stock"])
class StockMovementListView(_InventoryReadMixin, generics.ListAPIView):
    serializer_class = StockMovementSerializer
    filterset_fields = ["product", "movement_type"]

    def get_queryset(self):
        return (
            StockMovement.objects.select_related("product", "performed_by")
            .order_by("-created_at")
        )


class StockApplyView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_ADJUST

    @extend_schema(
        tags=["Stock"],
        request=StockMovementInputSerializer,
        responses={201: OpenApiTypes.OBJECT},
    )
    @transaction.atomic
    def post(self, request):
        serializer = StockMovementInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            new_stock = apply_movement(
                product=data["product_id"],
                quantity=data["quantity"],
                movement_type=data["type"],
                reference=data.get("reference", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(
            {"product_id": str(data["product_id"]), "new_stock": new_stock},
            status=status.HTTP_201_CREATED,
        )


class StockBulkView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_ADJUST

    @extend_schema(
        tags=["Stock"],
        request=BulkStockInputSerializer,
        responses={200: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = BulkStockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        results = bulk_apply_movements(serializer.validated_data["updates"], user=request.user)

        return Response(
            {
                "results": [r.as_dict() for r in results],
                "succeeded": sum(1 for r in results if r.success),
                "failed": sum(1 for r in results if not r.success),
            }
        )


@extend_schema(tags=["Stock"])
class LowStockView(_InventoryReadMixin, generics.ListAPIView):
    serializer_class = ProductSerializer
    pagination_class = None

    def get_queryset(self):
        include_oos = (
            self.request.query_params.get("include_out_of_stock") or "true"
        ).strip().lower() in ("1", "true", "yes")
        return low_stock_products(include_out_of_stock=include_oos)


class StockStatsView(_InventoryReadMixin, APIView):
    @extend_schema(tags=["Stock"], responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response(stock_stats())
