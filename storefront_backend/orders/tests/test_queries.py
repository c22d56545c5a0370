from django.test import TestCase, override_settings

from orders.models import Order
from orders.services.order_queries import order_stats
from orders.services.order_transitions import transition
from orders.tests.helpers import checkout, fill_cart, make_customer
from products.services.catalog import create_product


@override_settings(FLAT_DELIVERY_FEE="5.90")
class OrderStatsTests(TestCase):
    def setUp(self):
        self.user, self.shipping, self.billing = make_customer()
        self.level = create_product(sku="LVL-60", name="Level 60cm", price_ht="9.00", initial_stock=10)

    def _order(self, **kwargs):
        fill_cart(self.user, (self.level, 1))
        return checkout(self.user, self.shipping, self.billing, **kwargs)

    def test_empty_day(self):
        self.assertEqual(order_stats(), {"pending": 0, "today_orders": 0, "today_revenue": "0.00"})

    def test_revenue_is_in_cents_and_skips_cancelled(self):
        self._order(shipping_method=Order.SHIPPING_PICKUP)
        self._order()
        cancelled = self._order()
        transition(order_id=cancelled.order_id, to_status=Order.STATUS_CANCELLED)

        stats = order_stats()

        # 10.80 pickup + 16.70 delivery
        self.assertEqual(stats["today_revenue"], "27.50")
        self.assertEqual(stats["today_orders"], 3)
        self.assertEqual(stats["pending"], 2)
