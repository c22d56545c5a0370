# orders/tests/test_concurrency.py

"""
Concurrent checkouts against real row locks.

Needs a backend with SELECT ... FOR UPDATE (PostgreSQL). On SQLite these tests
skip, unless REQUIRE_ROW_LOCK_TESTS is set, in which case they fail:

    DATABASE_URL=postgres://... REQUIRE_ROW_LOCK_TESTS=1 python manage.py test --tag concurrency
"""

import threading

from django.conf import settings
from django.db import connection
from django.test import TransactionTestCase, tag

from orders.models import Order
from orders.tests.helpers import checkout, fill_cart, make_customer
from products.models import StockMovement
from products.services.catalog import create_product
from products.services.exceptions import InsufficientStockError


@tag("concurrency")
class ConcurrentCheckoutTests(TransactionTestCase):
    def setUp(self):
        super().setUp()
        if not connection.features.has_select_for_update:
            if settings.REQUIRE_ROW_LOCK_TESTS:
                self.fail("REQUIRE_ROW_LOCK_TESTS is set but the test database has no row locks")
            self.skipTest("needs SELECT ... FOR UPDATE (run against PostgreSQL)")

    def test_two_checkouts_never_oversell(self):
        product = create_product(sku="LAST-3", name="Last pallets", price_ht="50.00", initial_stock=3)

        customers = [make_customer(f"buyer{i}@example.com") for i in range(2)]
        for user, _, _ in customers:
            fill_cart(user, (product, 2))

        barrier = threading.Barrier(len(customers))
        outcomes = []

        def run(user, shipping, billing):
            try:
                barrier.wait()
                checkout(user, shipping, billing)
                outcomes.append("ok")
            except InsufficientStockError:
                outcomes.append("insufficient")
            finally:
                connection.close()

        threads = [threading.Thread(target=run, args=c) for c in customers]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sorted(outcomes), ["insufficient", "ok"])

        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 1)
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(StockMovement.objects.filter(product=product, movement_type="out").count(), 1)

    def test_locking_in_id_order_avoids_deadlock(self):
        a = create_product(sku="A", name="A", price_ht="1.00", initial_stock=10)
        b = create_product(sku="B", name="B", price_ht="1.00", initial_stock=10)

        customers = [make_customer(f"buyer{i}@example.com") for i in range(2)]
        # same products, opposite insertion order
        fill_cart(customers[0][0], (a, 1), (b, 1))
        fill_cart(customers[1][0], (b, 1), (a, 1))

        barrier = threading.Barrier(len(customers))
        errors = []

        def run(user, shipping, billing):
            try:
                barrier.wait()
                checkout(user, shipping, billing)
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=run, args=c) for c in customers]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        a.refresh_from_db()
        b.refresh_from_db()
        self.assertEqual((a.stock_quantity, b.stock_quantity), (8, 8))
