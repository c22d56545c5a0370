from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from cart.models import Cart
from cart.services.cart_ledger import add_line, get_or_create_cart
from cart.services.owners import AnonymousOwner
from products.services.catalog import create_product

User = get_user_model()


class CartApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="client@example.com", password="pass-Secret-42")
        self.paint = create_product(sku="PNT-W10", name="White paint 10L", price_ht="45.00", initial_stock=3)

    def test_empty_cart_for_new_visitor(self):
        response = self.client.get(reverse("cart:cart"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["cart_id"])
        self.assertEqual(response.data["lines"], [])
        self.assertEqual(response.data["total_ttc"], "0.00")

    def test_anonymous_visitor_gets_session_cart(self):
        response = self.client.post(
            reverse("cart:add-item"),
            {"product_id": str(self.paint.id), "quantity": 5},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["item_count"], 3)
        self.assertEqual(response.data["total_ttc"], "162.00")

        cart = Cart.objects.get(pk=response.data["cart_id"])
        self.assertIsNone(cart.user_id)
        self.assertTrue(cart.session_key)

    def test_patch_zero_removes_line(self):
        self.client.force_authenticate(self.user)
        self.client.post(reverse("cart:add-item"), {"product_id": str(self.paint.id)}, format="json")

        response = self.client.patch(
            reverse("cart:item", args=[self.paint.id]),
            {"quantity": 0},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["lines"], [])

    def test_unknown_product_is_404(self):
        self.client.force_authenticate(self.user)

        response = self.client.post(
            reverse("cart:add-item"),
            {"product_id": "00000000-0000-0000-0000-000000000001", "quantity": 1},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "PRODUCT_NOT_FOUND")

    def test_merge_session_cart_after_sign_in(self):
        self.client.post(
            reverse("cart:add-item"),
            {"product_id": str(self.paint.id), "quantity": 2},
            format="json",
        )

        self.client.force_authenticate(self.user)
        response = self.client.post(reverse("cart:merge"), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["item_count"], 2)
        self.assertEqual(Cart.objects.filter(user__isnull=True).count(), 0)
        self.assertEqual(Cart.objects.get(pk=response.data["cart_id"]).user_id, self.user.pk)

    def test_merge_requires_authentication(self):
        response = self.client.post(reverse("cart:merge"), {}, format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_merge_accepts_own_session_cart_id(self):
        added = self.client.post(
            reverse("cart:add-item"),
            {"product_id": str(self.paint.id), "quantity": 1},
            format="json",
        )

        self.client.force_authenticate(self.user)
        response = self.client.post(
            reverse("cart:merge"), {"anonymous_cart_id": added.data["cart_id"]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["item_count"], 1)
        self.assertFalse(Cart.objects.filter(pk=added.data["cart_id"]).exists())

    def test_merge_refuses_cart_of_another_session(self):
        foreign = get_or_create_cart(AnonymousOwner(session_key="someone-else"))
        add_line(cart_id=foreign.pk, product_id=self.paint.pk, quantity=2)

        self.client.force_authenticate(self.user)
        response = self.client.post(
            reverse("cart:merge"), {"anonymous_cart_id": str(foreign.pk)}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "CART_NOT_FOUND")
        foreign.refresh_from_db()
        self.assertIsNone(foreign.user_id)
        self.assertEqual(foreign.items.get().quantity, 2)
