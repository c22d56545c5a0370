# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Public product browsing (active products only, AllowAny)
- Back-office product management (inventory.adjust)
- Ledger reconciliation per product

Key rule:
- stock_quantity is never written here; stock changes go through
  /api/products/stock/ endpoints (StockMovement ledger).
"""

from django.db.models import ProtectedError, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from backend.errors import error_response
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
    HasCapability,
    user_has_capability,
)
from products.models import Product
from products.serializers.product import ProductSerializer
from products.services.stock_ledger import reconcile_product


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    Public:
    - GET /api/products/products/?q=<search>&category=<uuid>

    Staff:
    - create / update / deactivate
    - GET /api/products/products/<id>/reconcile/
    """

    serializer_class = ProductSerializer
    filterset_fields = ["category", "brand", "is_active"]

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]

        if self.action == "reconcile":
            self.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_ADJUST}
            return [IsAuthenticated(), HasAnyCapability()]

        self.required_capability = CAP_INVENTORY_ADJUST
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Product.objects.select_related("category", "brand").order_by("-created_at")

        # staff see inactive products too
        if not user_has_capability(self.request.user, CAP_INVENTORY_VIEW):
            qs = qs.filter(is_active=True)

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter(name="q", type=str, location=OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """
        Products with stock history cannot be deleted; deactivate them instead.
        """
        product = self.get_object()
        try:
            product.delete()
        except ProtectedError:
            return error_response(
                code="PRODUCT_IN_USE",
                message="Product has stock history. Deactivate it instead.",
                http_status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="reconcile")
    def reconcile(self, request, pk=None):
        product = self.get_object()
        return Response(reconcile_product(product).as_dict())
