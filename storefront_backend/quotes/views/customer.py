# quotes/views/customer.py

"""
PRO CUSTOMER QUOTE VIEWS

- GET  /api/quotes/                 own quotes
- POST /api/quotes/                 request a quote (validated pro only)
- GET  /api/quotes/<id>/            own quote
- POST /api/quotes/<id>/accept/     accept a sent quote
- POST /api/quotes/<id>/reject/     reject a sent quote
"""

from django.core.exceptions import PermissionDenied
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import CommerceError, commerce_error_response, error_response
from permissions.roles import CAP_QUOTES_REQUEST, HasCapability
from quotes.models import Quote
from quotes.serializers import QuoteRequestInputSerializer, QuoteSerializer
from quotes.services.quote_lifecycle import accept_quote, reject_quote, request_quote


def _own_quotes(user):
    return (
        Quote.objects.filter(user=user)
        .select_related("user", "converted_order")
        .prefetch_related("items")
    )


class MyQuoteListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.request.method == "POST":
            self.required_capability = CAP_QUOTES_REQUEST
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated()]

    @extend_schema(tags=["Quotes"], responses={200: QuoteSerializer(many=True)})
    def get(self, request):
        return Response(QuoteSerializer(_own_quotes(request.user), many=True).data)

    @extend_schema(tags=["Quotes"], request=QuoteRequestInputSerializer, responses={201: QuoteSerializer})
    def post(self, request):
        serializer = QuoteRequestInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            quote = request_quote(
                user_id=request.user.pk,
                items=serializer.validated_data["items"],
                notes=serializer.validated_data.get("notes", ""),
            )
        except PermissionDenied as exc:
            return error_response(code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN)
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(QuoteSerializer(quote).data, status=status.HTTP_201_CREATED)


class MyQuoteDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Quotes"], responses={200: QuoteSerializer})
    def get(self, request, quote_id):
        quote = _own_quotes(request.user).filter(pk=quote_id).first()
        if quote is None:
            return error_response(
                code="QUOTE_NOT_FOUND",
                message=f"Quote not found: {quote_id}",
                http_status=status.HTTP_404_NOT_FOUND,
            )
        return Response(QuoteSerializer(quote).data)


class _QuoteDecisionView(APIView):
    permission_classes = [IsAuthenticated]
    decide = None

    @extend_schema(tags=["Quotes"], request=None, responses={200: QuoteSerializer})
    def post(self, request, quote_id):
        try:
            quote = type(self).decide(quote_id=quote_id, user_id=request.user.pk)
        except CommerceError as exc:
            return commerce_error_response(exc)
        return Response(QuoteSerializer(quote).data)


class AcceptQuoteView(_QuoteDecisionView):
    decide = staticmethod(accept_quote)


class RejectQuoteView(_QuoteDecisionView):
    decide = staticmethod(reject_quote)
