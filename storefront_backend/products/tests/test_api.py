from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from products.models import Product, StockMovement
from products.services.catalog import create_product

User = get_user_model()


class ProductPermissionTests(APITestCase):
    """
    Permission & access tests.

    GUARANTEES:
    - Anonymous visitors only read active products
    - Only inventory.adjust holders write products or stock
    - stock_quantity is never writable through the product endpoint
    """

    def setUp(self):
        self.customer = User.objects.create_user(email="client@example.com", password="pass-Secret-42")
        self.admin = User.objects.create_superuser(email="admin@example.com", password="pass-Secret-42")

        self.product = create_product(sku="PLQ-13", name="Plasterboard 13mm", price_ht="6.40", initial_stock=20)
        self.hidden = create_product(sku="OLD-1", name="Old model", price_ht="1.00", is_active=False)

    def test_catalog_is_public_and_hides_inactive_products(self):
        response = self.client.get(reverse("products:products-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        skus = [row["sku"] for row in response.data["results"]]
        self.assertIn("PLQ-13", skus)
        self.assertNotIn("OLD-1", skus)

    def test_customer_cannot_create_product(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            reverse("products:products-list"),
            {"sku": "NEW-1", "name": "New", "price_ht": "1.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_product_with_opening_stock(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("products:products-list"),
            {"sku": "new-2", "name": "Joint compound", "price_ht": "11.90", "initial_stock": 8, "stock_quantity": 999},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(sku="NEW-2")
        self.assertEqual(product.stock_quantity, 8)
        self.assertEqual(response.data["price_ttc"], "14.28")

    def test_product_with_history_cannot_be_deleted(self):
        self.client.force_authenticate(self.admin)

        response = self.client.delete(reverse("products:products-detail", args=[self.product.id]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "PRODUCT_IN_USE")

    def test_reconcile_endpoint(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("products:products-reconcile", args=[self.product.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["ledger_balance"], 20)
        self.assertTrue(response.data["is_balanced"])


class StockApiTests(APITestCase):
    def setUp(self):
        self.customer = User.objects.create_user(email="client@example.com", password="pass-Secret-42")
        self.admin = User.objects.create_superuser(email="admin@example.com", password="pass-Secret-42")
        self.product = create_product(sku="RAIL-48", name="Metal rail 48", price_ht=Decimal("3.10"), initial_stock=2)

    def test_customer_cannot_apply_movement(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            reverse("products:stock-apply"),
            {"product_id": str(self.product.id), "type": "in", "quantity": 5},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_applies_movement(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("products:stock-apply"),
            {"product_id": str(self.product.id), "type": "in", "quantity": 5, "reference": "PO-77"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["new_stock"], 7)
        movement = StockMovement.objects.get(reference="PO-77")
        self.assertEqual(movement.performed_by, self.admin)

    def test_negative_stock_maps_to_conflict(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("products:stock-apply"),
            {"product_id": str(self.product.id), "type": "out", "quantity": 3},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "NEGATIVE_STOCK")

    def test_stats_and_low_stock(self):
        self.client.force_authenticate(self.admin)

        stats = self.client.get(reverse("products:stock-stats"))
        low = self.client.get(reverse("products:stock-low"))

        self.assertEqual(stats.data["active_products"], 1)
        self.assertEqual(stats.data["low_stock"], 1)
        self.assertEqual([row["sku"] for row in low.data], ["RAIL-48"])
