# quotes/views/admin.py

"""
ADMIN QUOTE VIEWSET

Security:
- Requires IsAuthenticated + quotes.manage

Actions:
- PUT  .../<id>/items/    replace lines (draft / sent)
- POST .../<id>/send/     draft -> sent, sets valid_until
- POST .../<id>/convert/  accepted -> confirmed Order (once)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import CommerceError, commerce_error_response
from orders.services.notifications import dispatch_order_created
from permissions.roles import CAP_QUOTES_MANAGE, HasCapability
from quotes.models import Quote
from quotes.serializers import (
    QuoteItemsUpdateInputSerializer,
    QuoteSerializer,
    SendQuoteInputSerializer,
)
from quotes.services.quote_conversion import convert_quote_to_order
from quotes.services.quote_lifecycle import send_quote, update_quote_items


@extend_schema(tags=["Quotes (admin)"])
class AdminQuoteViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = QuoteSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_QUOTES_MANAGE
    filterset_fields = ["status"]

    def get_queryset(self):
        qs = (
            Quote.objects.all()
            .select_related("user", "converted_order")
            .prefetch_related("items")
            .order_by("-created_at")
        )

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(quote_number__icontains=q)
        return qs

    @extend_schema(request=QuoteItemsUpdateInputSerializer, responses={200: QuoteSerializer})
    @action(detail=True, methods=["put"], url_path="items")
    def items(self, request, pk=None):
        ser = QuoteItemsUpdateInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            quote = update_quote_items(quote_id=pk, items=ser.validated_data["items"])
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(QuoteSerializer(quote).data)

    @extend_schema(request=SendQuoteInputSerializer, responses={200: QuoteSerializer})
    @action(detail=True, methods=["post"], url_path="send")
    def send(self, request, pk=None):
        ser = SendQuoteInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            quote = send_quote(quote_id=pk, valid_days=ser.validated_data.get("valid_days"))
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(QuoteSerializer(quote).data)

    @extend_schema(request=None, responses={201: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="convert")
    def convert(self, request, pk=None):
        try:
            receipt = convert_quote_to_order(quote_id=pk, user=request.user)
        except CommerceError as exc:
            return commerce_error_response(exc)

        dispatch_order_created(receipt.order_id)
        return Response(receipt.as_dict(), status=status.HTTP_201_CREATED)
