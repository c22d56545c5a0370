# orders/tests/test_transitions.py

from itertools import product as cartesian

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from orders.models import Order, OrderHistory
from orders.services.order_lifecycle import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATES,
    InvalidTransitionError,
    allowed_transitions,
    can_change_payment_status,
    can_transition,
)
from orders.services.order_transitions import (
    OrderNotFoundError,
    cancel_order_for_customer,
    set_payment_status,
    transition,
)
from orders.tests.helpers import checkout, fill_cart, make_customer
from products.models import StockMovement
from products.services.catalog import create_product
from products.services.stock_ledger import reconcile_product

STATUSES = [value for value, _ in Order.STATUS_CHOICES]


class LifecycleTableTests(TestCase):
    def test_table_covers_every_status(self):
        self.assertEqual(set(ALLOWED_TRANSITIONS), set(STATUSES))
        self.assertEqual(TERMINAL_STATES, {Order.STATUS_DELIVERED, Order.STATUS_CANCELLED})

    def test_only_listed_pairs_are_allowed(self):
        expected = {
            ("pending", "confirmed"),
            ("pending", "cancelled"),
            ("confirmed", "processing"),
            ("confirmed", "cancelled"),
            ("processing", "shipped"),
            ("processing", "cancelled"),
            ("shipped", "delivered"),
        }
        for from_status, to_status in cartesian(STATUSES, STATUSES):
            self.assertEqual(
                can_transition(from_status=from_status, to_status=to_status),
                (from_status, to_status) in expected,
                f"{from_status} -> {to_status}",
            )

    def test_unknown_status_has_no_moves(self):
        self.assertEqual(allowed_transitions("lost"), ())

    def test_payment_status_moves(self):
        self.assertTrue(can_change_payment_status(from_status="pending", to_status="paid"))
        self.assertTrue(can_change_payment_status(from_status="paid", to_status="refunded"))
        self.assertFalse(can_change_payment_status(from_status="paid", to_status="pending"))
        self.assertFalse(can_change_payment_status(from_status="refunded", to_status="paid"))
        self.assertFalse(can_change_payment_status(from_status="pending", to_status="refunded"))


class OrderTransitionTests(TestCase):
    def setUp(self):
        self.user, self.shipping, self.billing = make_customer()
        self.admin = make_customer("admin@example.com", role="admin", is_staff=True)[0]

        self.p1 = create_product(sku="P1", name="Cement 25kg", price_ht="7.20", initial_stock=10)
        self.p2 = create_product(sku="P2", name="Sand 25kg", price_ht="4.10", initial_stock=10)

        fill_cart(self.user, (self.p1, 2), (self.p2, 1))
        receipt = checkout(self.user, self.shipping, self.billing)
        self.order = Order.objects.get(pk=receipt.order_id)

    def _force_status(self, status):
        Order.objects.filter(pk=self.order.pk).update(status=status)

    def test_full_happy_path(self):
        for status in ("confirmed", "processing", "shipped", "delivered"):
            result = transition(order_id=self.order.pk, to_status=status, user=self.admin)
            self.assertTrue(result.success)
            self.assertEqual(result.to_status, status)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_DELIVERED)
        self.assertEqual(
            list(self.order.history.order_by("created_at").values_list("status", flat=True)),
            ["pending", "confirmed", "processing", "shipped", "delivered"],
        )
        self.assertEqual(self.order.history.filter(created_by=self.admin).count(), 4)

    def test_skipping_a_step_is_rejected(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            transition(order_id=self.order.pk, to_status=Order.STATUS_SHIPPED)

        self.assertEqual(ctx.exception.from_status, "pending")
        self.assertEqual(ctx.exception.to_status, "shipped")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertEqual(OrderHistory.objects.filter(order=self.order).count(), 1)

    def test_terminal_statuses_accept_nothing(self):
        for terminal in TERMINAL_STATES:
            self._force_status(terminal)
            for status in STATUSES:
                with self.assertRaises(InvalidTransitionError):
                    transition(order_id=self.order.pk, to_status=status)

    def test_comment_defaults_and_overrides(self):
        transition(order_id=self.order.pk, to_status="confirmed")
        transition(order_id=self.order.pk, to_status="processing", comment="Picked by Marc")

        comments = list(self.order.history.order_by("created_at").values_list("comment", flat=True))
        self.assertEqual(comments[1:], ["Order confirmed", "Picked by Marc"])

    def test_cancel_restores_exact_quantities(self):
        transition(order_id=self.order.pk, to_status="confirmed")
        transition(order_id=self.order.pk, to_status="cancelled", user=self.admin)

        self.p1.refresh_from_db()
        self.p2.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 10)
        self.assertEqual(self.p2.stock_quantity, 10)

        restored = StockMovement.objects.filter(
            reference=self.order.order_number,
            movement_type=StockMovement.MovementType.IN,
        )
        self.assertEqual(
            sorted((m.product.sku, m.quantity) for m in restored),
            [("P1", 2), ("P2", 1)],
        )
        self.assertTrue(reconcile_product(self.p1).is_balanced)
        self.assertTrue(reconcile_product(self.p2).is_balanced)

    def test_cancelled_order_is_not_restored_twice(self):
        transition(order_id=self.order.pk, to_status="cancelled")

        with self.assertRaises(InvalidTransitionError):
            transition(order_id=self.order.pk, to_status="cancelled")

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 10)

    def test_anonymous_cancel_leaves_movements_unattributed(self):
        transition(order_id=self.order.pk, to_status="cancelled", user=AnonymousUser())

        restored = StockMovement.objects.filter(reference=self.order.order_number, quantity__gt=0)
        self.assertEqual(restored.count(), 2)
        self.assertFalse(restored.exclude(performed_by=None).exists())
        self.assertIsNone(self.order.history.get(status="cancelled").created_by)

    def test_cancel_by_admin_is_attributed(self):
        transition(order_id=self.order.pk, to_status="cancelled", user=self.admin)

        restored = StockMovement.objects.filter(reference=self.order.order_number, quantity__gt=0)
        self.assertEqual(set(restored.values_list("performed_by", flat=True)), {self.admin.pk})

    def test_shipped_order_cannot_be_cancelled(self):
        self._force_status(Order.STATUS_SHIPPED)

        with self.assertRaises(InvalidTransitionError):
            transition(order_id=self.order.pk, to_status="cancelled")

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 8)

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            transition(order_id="00000000-0000-0000-0000-000000000000", to_status="confirmed")
        with self.assertRaises(OrderNotFoundError):
            transition(order_id="garbage", to_status="confirmed")


class CustomerCancelTests(TestCase):
    def setUp(self):
        self.user, self.shipping, self.billing = make_customer()
        self.product = create_product(sku="P1", name="Hinge", price_ht="2.00", initial_stock=4)
        fill_cart(self.user, (self.product, 3))
        self.order = Order.objects.get(pk=checkout(self.user, self.shipping, self.billing).order_id)

    def test_pending_order_can_be_cancelled_by_its_owner(self):
        result = cancel_order_for_customer(order_id=self.order.pk, user_id=self.user.pk, user=self.user)

        self.assertEqual(result.to_status, Order.STATUS_CANCELLED)
        entry = self.order.history.order_by("-created_at").first()
        self.assertEqual(entry.comment, "Cancelled by customer")
        self.assertEqual(entry.created_by, self.user)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 4)

    def test_confirmed_order_cannot_be_cancelled_by_customer(self):
        transition(order_id=self.order.pk, to_status="confirmed")

        with self.assertRaises(InvalidTransitionError):
            cancel_order_for_customer(order_id=self.order.pk, user_id=self.user.pk)

    def test_other_customer_sees_not_found(self):
        stranger = make_customer("stranger@example.com")[0]

        with self.assertRaises(OrderNotFoundError):
            cancel_order_for_customer(order_id=self.order.pk, user_id=stranger.pk)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)


class PaymentStatusTests(TestCase):
    def setUp(self):
        self.user, self.shipping, self.billing = make_customer()
        product = create_product(sku="P1", name="Hinge", price_ht="2.00", initial_stock=4)
        fill_cart(self.user, (product, 1))
        self.order = Order.objects.get(pk=checkout(self.user, self.shipping, self.billing).order_id)

    def test_paid_then_refunded(self):
        set_payment_status(order_id=self.order.pk, payment_status=Order.PAYMENT_PAID)
        order = set_payment_status(order_id=self.order.pk, payment_status=Order.PAYMENT_REFUNDED)

        self.assertEqual(order.payment_status, Order.PAYMENT_REFUNDED)
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.history.count(), 1)

    def test_backwards_move_is_rejected(self):
        set_payment_status(order_id=self.order.pk, payment_status=Order.PAYMENT_PAID)

        with self.assertRaises(InvalidTransitionError):
            set_payment_status(order_id=self.order.pk, payment_status=Order.PAYMENT_PENDING)
