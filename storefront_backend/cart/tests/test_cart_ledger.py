# cart/tests/test_cart_ledger.py

"""
CART LEDGER TESTS

The cart never reserves stock, so every test here reads stock but none of
them may change it.
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from cart.models import Cart, CartItem
from cart.services.cart_ledger import (
    CartLineNotFoundError,
    CartNotFoundError,
    add_line,
    cart_totals,
    clear,
    get_or_create_cart,
    merge_into_user_cart,
    merge_session_cart,
    read_lines,
    remove_line,
    set_line_quantity,
)
from cart.services.owners import AnonymousOwner, UserOwner
from products.models import Product
from products.services.catalog import create_product
from products.services.exceptions import OutOfStockError, ProductNotFoundError
from products.services.stock_ledger import apply_movement

User = get_user_model()


class CartLedgerTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="client@example.com", password="pass-Secret-42")
        self.drill = create_product(sku="DRL-18", name="Drill 18V", price_ht="89.90", initial_stock=5)
        self.bits = create_product(
            sku="BIT-SET", name="Bit set", price_ht="12.45", tax_rate="5.50", initial_stock=40
        )
        self.cart = get_or_create_cart(UserOwner(user_id=self.user.pk))

    def test_get_or_create_returns_same_cart(self):
        again = get_or_create_cart(UserOwner(user_id=self.user.pk))

        self.assertEqual(again.pk, self.cart.pk)
        self.assertEqual(Cart.objects.filter(user=self.user).count(), 1)

    def test_add_increments_and_caps_at_stock(self):
        add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=2)
        line = add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=10)

        self.assertEqual(line.quantity, 5)
        self.assertEqual(CartItem.objects.filter(cart=self.cart).count(), 1)

        self.drill.refresh_from_db()
        self.assertEqual(self.drill.stock_quantity, 5)

    def test_add_out_of_stock_product(self):
        apply_movement(product=self.drill, quantity=0, movement_type="adjustment")

        with self.assertRaises(OutOfStockError):
            add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=1)

    def test_add_inactive_or_unknown_product(self):
        Product.objects.filter(pk=self.bits.pk).update(is_active=False)

        with self.assertRaises(ProductNotFoundError):
            add_line(cart_id=self.cart.pk, product_id=self.bits.id, quantity=1)
        with self.assertRaises(ProductNotFoundError):
            add_line(cart_id=self.cart.pk, product_id="nope", quantity=1)

    def test_add_rejects_non_positive_or_fractional_quantity(self):
        for bad in (0, -1, "2.5", True, None):
            with self.assertRaises(ValidationError):
                add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=bad)

    def test_unknown_cart(self):
        with self.assertRaises(CartNotFoundError):
            add_line(cart_id="00000000-0000-0000-0000-000000000000", product_id=self.drill.id, quantity=1)

    def test_set_quantity_caps_and_zero_removes(self):
        add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=1)

        line = set_line_quantity(cart_id=self.cart.pk, product_id=self.drill.id, quantity=9)
        self.assertEqual(line.quantity, 5)

        self.assertIsNone(set_line_quantity(cart_id=self.cart.pk, product_id=self.drill.id, quantity=0))
        self.assertFalse(CartItem.objects.filter(cart=self.cart).exists())

    def test_set_quantity_on_missing_line(self):
        with self.assertRaises(CartLineNotFoundError):
            set_line_quantity(cart_id=self.cart.pk, product_id=self.bits.id, quantity=1)

    def test_remove_and_clear(self):
        add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=1)
        add_line(cart_id=self.cart.pk, product_id=self.bits.id, quantity=3)

        self.assertTrue(remove_line(cart_id=self.cart.pk, product_id=self.drill.id))
        self.assertFalse(remove_line(cart_id=self.cart.pk, product_id=self.drill.id))
        self.assertEqual(clear(self.cart.pk), 1)
        self.assertEqual(read_lines(self.cart.pk), [])

    def test_read_clamps_to_live_stock_without_persisting(self):
        add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=4)
        apply_movement(product=self.drill, quantity=2, movement_type="adjustment")

        [line] = read_lines(self.cart.pk)

        self.assertEqual(line.quantity, 2)
        self.assertTrue(line.is_clamped)
        self.assertEqual(CartItem.objects.get(cart=self.cart).quantity, 4)

    def test_read_hides_inactive_and_out_of_stock_products(self):
        add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=1)
        add_line(cart_id=self.cart.pk, product_id=self.bits.id, quantity=1)

        Product.objects.filter(pk=self.bits.pk).update(is_active=False)
        apply_movement(product=self.drill, quantity=0, movement_type="adjustment")

        self.assertEqual(read_lines(self.cart.pk), [])

    def test_totals_round_tax_per_line(self):
        add_line(cart_id=self.cart.pk, product_id=self.drill.id, quantity=2)
        add_line(cart_id=self.cart.pk, product_id=self.bits.id, quantity=3)

        totals = cart_totals(read_lines(self.cart.pk))

        # 179.80 HT / 35.96 tax + 37.35 HT / 2.05 tax (2.054 rounded)
        self.assertEqual(totals.subtotal_ht, Decimal("217.15"))
        self.assertEqual(totals.tax_amount, Decimal("38.01"))
        self.assertEqual(totals.total_ttc, Decimal("255.16"))


class CartMergeTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="client@example.com", password="pass-Secret-42")
        self.p1 = create_product(sku="P1", name="Primer", price_ht="20.00", initial_stock=10)
        self.p2 = create_product(sku="P2", name="Roller", price_ht="7.00", initial_stock=1)

        self.user_cart = get_or_create_cart(UserOwner(user_id=self.user.pk))
        self.anon_cart = get_or_create_cart(AnonymousOwner(session_key="sess-abc"))

    def test_merge_sums_quantities_and_deletes_anonymous_cart(self):
        add_line(cart_id=self.user_cart.pk, product_id=self.p1.id, quantity=2)
        add_line(cart_id=self.anon_cart.pk, product_id=self.p1.id, quantity=1)

        merged = merge_into_user_cart(anonymous_cart_id=self.anon_cart.pk, user_id=self.user.pk)

        self.assertEqual(merged.pk, self.user_cart.pk)
        self.assertEqual(CartItem.objects.get(cart=self.user_cart, product=self.p1).quantity, 3)
        self.assertFalse(Cart.objects.filter(pk=self.anon_cart.pk).exists())

    def test_second_merge_is_a_no_op(self):
        add_line(cart_id=self.user_cart.pk, product_id=self.p1.id, quantity=2)
        add_line(cart_id=self.anon_cart.pk, product_id=self.p1.id, quantity=1)

        merge_into_user_cart(anonymous_cart_id=self.anon_cart.pk, user_id=self.user.pk)
        again = merge_into_user_cart(anonymous_cart_id=self.anon_cart.pk, user_id=self.user.pk)

        self.assertEqual(again.pk, self.user_cart.pk)
        self.assertEqual(CartItem.objects.get(cart=self.user_cart, product=self.p1).quantity, 3)

    def test_merge_moves_new_lines_capped_at_stock(self):
        add_line(cart_id=self.anon_cart.pk, product_id=self.p2.id, quantity=1)
        add_line(cart_id=self.user_cart.pk, product_id=self.p2.id, quantity=1)

        merge_into_user_cart(anonymous_cart_id=self.anon_cart.pk, user_id=self.user.pk)

        self.assertEqual(CartItem.objects.get(cart=self.user_cart, product=self.p2).quantity, 1)

    def test_merge_creates_user_cart_when_missing(self):
        other = User.objects.create_user(email="other@example.com", password="pass-Secret-42")
        add_line(cart_id=self.anon_cart.pk, product_id=self.p1.id, quantity=4)

        cart = merge_session_cart(session_key="sess-abc", user_id=other.pk)

        self.assertEqual(cart.user_id, other.pk)
        self.assertEqual(CartItem.objects.get(cart=cart).quantity, 4)

    def test_merge_without_session_cart_returns_user_cart(self):
        self.assertEqual(merge_session_cart(session_key="unknown", user_id=self.user.pk).pk, self.user_cart.pk)
        self.assertEqual(merge_session_cart(session_key="", user_id=self.user.pk).pk, self.user_cart.pk)
