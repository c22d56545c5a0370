# orders/tests/test_checkout.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from cart.models import CartItem
from orders.models import Order, OrderHistory, OrderItem
from orders.services.checkout_orchestrator import AddressNotFoundError, EmptyCartError
from orders.tests.helpers import checkout, fill_cart, make_customer
from products.models import Product, StockMovement
from products.services.catalog import create_product
from products.services.exceptions import InsufficientStockError
from products.services.stock_ledger import apply_movement, reconcile_product


@override_settings(FLAT_DELIVERY_FEE="5.90", ORDER_NUMBER_PREFIX="BI")
class CheckoutTests(TestCase):
    """
    Cart -> order.

    GUARANTEES:
    - totals are computed server-side, tax rounded per line
    - stock leaves through `out` movements referencing the order number
    - any failure leaves cart, stock and orders untouched
    """

    def setUp(self):
        self.user, self.shipping, self.billing = make_customer()
        self.p1 = create_product(sku="P1", name="Tile adhesive", price_ht="10.00", initial_stock=5)
        self.p2 = create_product(sku="P2", name="Grout", price_ht="5.55", tax_rate="5.50", initial_stock=3)

    def test_successful_checkout(self):
        fill_cart(self.user, (self.p1, 2), (self.p2, 1))

        receipt = checkout(self.user, self.shipping, self.billing)
        order = Order.objects.get(pk=receipt.order_id)

        self.assertTrue(order.order_number.startswith("BI"))
        self.assertEqual(order.order_number, receipt.order_number)
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)

        # 20.00 HT + 4.00 tax ; 5.55 HT + 0.31 tax (0.30525 rounded half up)
        self.assertEqual(order.subtotal_ht, Decimal("25.55"))
        self.assertEqual(order.tax_amount, Decimal("4.31"))
        self.assertEqual(order.shipping_cost, Decimal("5.90"))
        self.assertEqual(order.total_ttc, Decimal("35.76"))

        items = {item.product_sku: item for item in order.items.all()}
        self.assertEqual(items["P1"].quantity, 2)
        self.assertEqual(items["P1"].unit_price_ht, Decimal("10.00"))
        self.assertEqual(items["P2"].tax_amount, Decimal("0.31"))

    def test_stock_leaves_through_the_ledger(self):
        fill_cart(self.user, (self.p1, 2), (self.p2, 1))

        receipt = checkout(self.user, self.shipping, self.billing)

        self.p1.refresh_from_db()
        self.p2.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 3)
        self.assertEqual(self.p2.stock_quantity, 2)

        outs = StockMovement.objects.filter(reference=receipt.order_number)
        self.assertEqual(
            sorted((m.product.sku, m.movement_type, m.quantity) for m in outs),
            [("P1", "out", -2), ("P2", "out", -1)],
        )
        self.assertTrue(reconcile_product(self.p1).is_balanced)
        self.assertTrue(reconcile_product(self.p2).is_balanced)

    def test_cart_is_emptied_and_history_started(self):
        fill_cart(self.user, (self.p1, 1))

        receipt = checkout(self.user, self.shipping, self.billing)

        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())
        [entry] = OrderHistory.objects.filter(order_id=receipt.order_id)
        self.assertEqual(entry.status, Order.STATUS_PENDING)
        self.assertEqual(entry.comment, "Order created")

    def test_pickup_has_no_shipping_cost(self):
        fill_cart(self.user, (self.p1, 1))

        receipt = checkout(self.user, self.shipping, self.billing, shipping_method=Order.SHIPPING_PICKUP)

        order = Order.objects.get(pk=receipt.order_id)
        self.assertEqual(order.shipping_cost, Decimal("0.00"))
        self.assertEqual(order.total_ttc, Decimal("12.00"))

    def test_empty_cart(self):
        with self.assertRaises(EmptyCartError):
            checkout(self.user, self.shipping, self.billing)

        fill_cart(self.user)
        with self.assertRaises(EmptyCartError):
            checkout(self.user, self.shipping, self.billing)

        self.assertFalse(Order.objects.exists())

    def test_insufficient_stock_rolls_everything_back(self):
        fill_cart(self.user, (self.p1, 2), (self.p2, 3))
        apply_movement(product=self.p2, quantity=2, movement_type="adjustment")
        movements_before = StockMovement.objects.count()

        with self.assertRaises(InsufficientStockError) as ctx:
            checkout(self.user, self.shipping, self.billing)

        self.assertEqual(ctx.exception.requested, 3)
        self.assertEqual(ctx.exception.available, 2)

        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderItem.objects.exists())
        self.assertEqual(StockMovement.objects.count(), movements_before)

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 5)
        self.assertEqual(
            sorted(CartItem.objects.filter(cart__user=self.user).values_list("product__sku", "quantity")),
            [("P1", 2), ("P2", 3)],
        )

    def test_deactivated_product_counts_as_unavailable(self):
        fill_cart(self.user, (self.p1, 1))
        Product.objects.filter(pk=self.p1.pk).update(is_active=False)

        with self.assertRaises(InsufficientStockError) as ctx:
            checkout(self.user, self.shipping, self.billing)

        self.assertEqual(ctx.exception.available, 0)

    def test_no_oversell_across_sequential_checkouts(self):
        other, other_shipping, other_billing = make_customer("other@example.com")
        fill_cart(self.user, (self.p2, 2))
        fill_cart(other, (self.p2, 2))

        checkout(self.user, self.shipping, self.billing)
        with self.assertRaises(InsufficientStockError):
            checkout(other, other_shipping, other_billing)

        self.p2.refresh_from_db()
        self.assertEqual(self.p2.stock_quantity, 1)
        self.assertEqual(Order.objects.count(), 1)

    def test_addresses_must_belong_to_customer(self):
        other, other_shipping, _ = make_customer("other@example.com")
        fill_cart(self.user, (self.p1, 1))

        with self.assertRaises(AddressNotFoundError):
            checkout(self.user, other_shipping, self.billing)

    def test_unknown_methods_are_rejected(self):
        fill_cart(self.user, (self.p1, 1))

        with self.assertRaises(ValidationError):
            checkout(self.user, self.shipping, self.billing, shipping_method="drone")
        with self.assertRaises(ValidationError):
            checkout(self.user, self.shipping, self.billing, payment_method="crypto")

    def test_order_snapshot_is_immutable(self):
        fill_cart(self.user, (self.p1, 1))
        order = Order.objects.get(pk=checkout(self.user, self.shipping, self.billing).order_id)

        order.total_ttc = Decimal("0.01")
        with self.assertRaises(ValidationError):
            order.save()

        item = order.items.get()
        with self.assertRaises(ValidationError):
            item.save()

    def test_catalog_changes_do_not_alter_orders(self):
        fill_cart(self.user, (self.p1, 1))
        receipt = checkout(self.user, self.shipping, self.billing)

        Product.objects.filter(pk=self.p1.pk).update(name="Renamed", price_ht=Decimal("99.00"))

        item = OrderItem.objects.get(order_id=receipt.order_id)
        self.assertEqual(item.product_name, "Tile adhesive")
        self.assertEqual(item.unit_price_ht, Decimal("10.00"))
