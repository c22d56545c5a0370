# cart/views/api.py

"""
CART API VIEWS

Purpose:
- Cart of the current owner: signed-in user, or the anonymous session.
- Add / set quantity / remove / clear lines.
- Merge the anonymous session cart into the user's cart after sign-in.

Hard rules:
- Money is server-owned: prices and totals come from live product data.
- The views hold no business rules; everything goes through
  cart.services.cart_ledger.
"""

from __future__ import annotations

from decimal import Decimal

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import CommerceError, commerce_error_response, error_response
from cart.serializers import (
    AddCartItemInputSerializer,
    CartSerializer,
    MergeCartInputSerializer,
    SetCartItemQuantityInputSerializer,
)
from cart.services.cart_ledger import (
    CartNotFoundError,
    add_line,
    cart_totals,
    clear,
    find_cart,
    get_or_create_cart,
    merge_session_cart,
    read_lines,
    remove_line,
    set_line_quantity,
)
from cart.services.owners import AnonymousOwner, owner_from_request
from products.services.pricing import Totals


# =====================================================
# HELPERS
# =====================================================

def _cart_payload(cart) -> dict:
    if cart is None:
        return CartSerializer(
            {
                "cart_id": None,
                "lines": [],
                "totals": Totals(subtotal_ht=Decimal("0.00"), tax_amount=Decimal("0.00")),
            }
        ).data

    lines = read_lines(cart.pk)
    return CartSerializer(
        {"cart_id": cart.pk, "lines": lines, "totals": cart_totals(lines)}
    ).data


def _cart_for_write(request):
    owner = owner_from_request(request, create_session=True)
    if owner is None:
        return None
    return get_or_create_cart(owner)


def _no_session_response():
    return error_response(
        code="NO_SESSION",
        message="Sign in or enable cookies to use a cart.",
        http_status=status.HTTP_400_BAD_REQUEST,
    )


# =====================================================
# CART API VIEWS
# =====================================================

class CartView(APIView):
    """
    Current owner's cart (empty payload when none exists yet).
    """

    permission_classes = [AllowAny]
    serializer_class = CartSerializer

    @extend_schema(responses={200: CartSerializer}, description="Get the current cart")
    def get(self, request):
        owner = owner_from_request(request, create_session=False)
        cart = find_cart(owner) if owner is not None else None
        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class AddCartItemView(APIView):
    """
    Add a product (increments an existing line, capped at live stock).
    """

    permission_classes = [AllowAny]
    serializer_class = CartSerializer

    @extend_schema(request=AddCartItemInputSerializer, responses={200: CartSerializer})
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = _cart_for_write(request)
        if cart is None:
            return _no_session_response()

        try:
            add_line(
                cart_id=cart.pk,
                product_id=serializer.validated_data["product_id"],
                quantity=serializer.validated_data["quantity"],
            )
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class CartItemView(APIView):
    """
    PATCH: set exact quantity (0 removes the line)
    DELETE: remove the line (idempotent)
    """

    permission_classes = [AllowAny]
    serializer_class = CartSerializer

    @extend_schema(request=SetCartItemQuantityInputSerializer, responses={200: CartSerializer})
    def patch(self, request, product_id):
        serializer = SetCartItemQuantityInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        owner = owner_from_request(request, create_session=False)
        cart = find_cart(owner) if owner is not None else None
        if cart is None:
            return error_response(
                code="CART_NOT_FOUND",
                message="No cart for this visitor.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        try:
            set_line_quantity(
                cart_id=cart.pk,
                product_id=product_id,
                quantity=serializer.validated_data["quantity"],
            )
        except CommerceError as exc:
            return commerce_error_response(exc)

        return Response(_cart_payload(cart), status=status.HTTP_200_OK)

    @extend_schema(responses={200: CartSerializer})
    def delete(self, request, product_id):
        owner = owner_from_request(request, create_session=False)
        cart = find_cart(owner) if owner is not None else None
        if cart is not None:
            remove_line(cart_id=cart.pk, product_id=product_id)

        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class ClearCartView(APIView):
    permission_classes = [AllowAny]
    serializer_class = CartSerializer

    @extend_schema(responses={200: CartSerializer}, description="Remove every line")
    def delete(self, request):
        owner = owner_from_request(request, create_session=False)
        cart = find_cart(owner) if owner is not None else None
        if cart is not None:
            clear(cart.pk)

        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class MergeCartView(APIView):
    """
    Fold the visitor's anonymous cart into the signed-in user's cart.

    Only the cart bound to this session can be merged. An explicit
    anonymous_cart_id must name that same cart. Calling it twice is harmless.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(request=MergeCartInputSerializer, responses={200: CartSerializer})
    def post(self, request):
        serializer = MergeCartInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        anonymous_cart_id = serializer.validated_data.get("anonymous_cart_id")
        session_key = getattr(getattr(request, "session", None), "session_key", None)

        if anonymous_cart_id is not None:
            session_cart = find_cart(AnonymousOwner(session_key=session_key)) if session_key else None
            if session_cart is None or session_cart.pk != anonymous_cart_id:
                return commerce_error_response(
                    CartNotFoundError(f"Cart not found: {anonymous_cart_id}")
                )

        cart = merge_session_cart(session_key=session_key, user_id=request.user.pk)
        return Response(_cart_payload(cart), status=status.HTTP_200_OK)
