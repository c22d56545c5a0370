# orders/tests/helpers.py

"""
Shared fixtures for order and quote tests.
"""

from django.contrib.auth import get_user_model

from cart.services.cart_ledger import add_line, get_or_create_cart
from cart.services.owners import UserOwner
from orders.models import Order
from orders.services.checkout_orchestrator import create_order
from users.models import Address

User = get_user_model()

PASSWORD = "pass-Secret-42"


def make_customer(email="client@example.com", **extra):
    user = User.objects.create_user(email=email, password=PASSWORD, **extra)
    shipping = Address.objects.create(
        user=user,
        type=Address.TYPE_SHIPPING,
        street="12 rue des Lilas",
        city="Lyon",
        postal_code="69003",
        is_default=True,
    )
    billing = Address.objects.create(
        user=user,
        type=Address.TYPE_BILLING,
        street="4 avenue Foch",
        city="Lyon",
        postal_code="69006",
        is_default=True,
    )
    return user, shipping, billing


def fill_cart(user, *lines):
    cart = get_or_create_cart(UserOwner(user_id=user.pk))
    for product, quantity in lines:
        add_line(cart_id=cart.pk, product_id=product.id, quantity=quantity)
    return cart


def checkout(user, shipping, billing, *, shipping_method=Order.SHIPPING_DELIVERY, payment_method=Order.PAYMENT_TRANSFER):
    return create_order(
        user_id=user.pk,
        shipping_address_id=shipping.id,
        billing_address_id=billing.id,
        shipping_method=shipping_method,
        payment_method=payment_method,
    )
