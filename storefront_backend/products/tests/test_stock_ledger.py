# products/tests/test_stock_ledger.py

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import CommandError, call_command
from django.test import TestCase

from products.models import Product, StockMovement
from products.services.catalog import INITIAL_REFERENCE, create_product
from products.services.exceptions import NegativeStockError, ProductNotFoundError
from products.services.stock_ledger import (
    BULK_REFERENCE,
    apply_movement,
    bulk_apply_movements,
    ledger_balance,
    lock_products_in_order,
    reconcile_product,
)

User = get_user_model()


class StockLedgerTests(TestCase):
    """
    Stock ledger correctness.

    GUARANTEES:
    - Σ movements == stock_quantity after any sequence of movements
    - stock never goes negative
    - adjustments record the delta actually applied
    """

    def setUp(self):
        self.admin = User.objects.create_superuser(email="admin@example.com", password="pass-Secret-42")
        self.product = create_product(
            sku="vis-100",
            name="Wood screw 4x40",
            price_ht=Decimal("8.50"),
            initial_stock=10,
        )

    def test_opening_stock_is_posted_to_ledger(self):
        movement = StockMovement.objects.get(product=self.product)

        self.assertEqual(self.product.sku, "VIS-100")
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.IN)
        self.assertEqual(movement.quantity, 10)
        self.assertEqual(movement.reference, INITIAL_REFERENCE)

    def test_in_and_out_update_stock_and_ledger(self):
        apply_movement(product=self.product, quantity=5, movement_type="in", reference="PO-1")
        new_stock = apply_movement(product=self.product.id, quantity=3, movement_type="out", reference="BI-1")

        self.product.refresh_from_db()
        self.assertEqual(new_stock, 12)
        self.assertEqual(self.product.stock_quantity, 12)

        out = StockMovement.objects.get(product=self.product, reference="BI-1")
        self.assertEqual(out.quantity, -3)
        self.assertEqual(out.stock_after, 12)

    def test_out_beyond_stock_is_rejected_without_trace(self):
        with self.assertRaises(NegativeStockError):
            apply_movement(product=self.product, quantity=11, movement_type="out")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(StockMovement.objects.filter(product=self.product).count(), 1)

    def test_adjustment_records_signed_delta(self):
        apply_movement(product=self.product, quantity=4, movement_type="adjustment", notes="inventory count")

        movement = StockMovement.objects.filter(product=self.product).latest("created_at")
        self.assertEqual(movement.movement_type, StockMovement.MovementType.ADJUSTMENT)
        self.assertEqual(movement.quantity, -6)
        self.assertEqual(movement.stock_after, 4)

        apply_movement(product=self.product, quantity=0, movement_type="adjustment")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)

    def test_invalid_quantities_are_rejected(self):
        with self.assertRaises(ValidationError):
            apply_movement(product=self.product, quantity=0, movement_type="in")
        with self.assertRaises(ValidationError):
            apply_movement(product=self.product, quantity=-2, movement_type="out")
        with self.assertRaises(ValidationError):
            apply_movement(product=self.product, quantity="1.5", movement_type="in")
        with self.assertRaises(ValidationError):
            apply_movement(product=self.product, quantity=-1, movement_type="adjustment")
        with self.assertRaises(ValidationError):
            apply_movement(product=self.product, quantity=1, movement_type="transfer")

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            apply_movement(product="not-a-uuid", quantity=1, movement_type="in")

    def test_ledger_balance_matches_stock_after_any_sequence(self):
        for qty, kind in [(7, "in"), (2, "out"), (30, "adjustment"), (29, "out"), (1, "in")]:
            apply_movement(product=self.product, quantity=qty, movement_type=kind)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)
        self.assertEqual(ledger_balance(self.product), 2)
        self.assertTrue(reconcile_product(self.product).is_balanced)

    def test_movements_are_immutable(self):
        movement = StockMovement.objects.get(product=self.product)

        with self.assertRaises(ValidationError):
            movement.notes = "edited"
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()

    def test_lock_products_in_order_skips_missing_ids(self):
        other = create_product(sku="VIS-200", name="Wood screw 5x50", price_ht="9.00")

        locked = lock_products_in_order([other.id, self.product.id, None])

        self.assertEqual(set(locked), {self.product.id, other.id})
        self.assertEqual(lock_products_in_order([]), {})


class BulkMovementTests(TestCase):
    def setUp(self):
        self.product = create_product(sku="CHV-1", name="Dowel 8mm", price_ht="3.00", initial_stock=5)

    def test_each_line_commits_on_its_own(self):
        results = bulk_apply_movements(
            [
                {"product_id": self.product.id, "quantity": 3, "type": "in"},
                {"product_id": self.product.id, "quantity": 50, "type": "out"},
                {"product_id": self.product.id, "quantity": 0, "type": "in"},
                {"product_id": self.product.id, "quantity": 2, "type": "out"},
            ]
        )

        self.assertEqual([r.success for r in results], [True, False, False, True])
        self.assertEqual(results[0].new_stock, 8)
        self.assertEqual(results[3].new_stock, 6)
        self.assertIn("Insufficient stock", results[1].error)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 6)
        self.assertEqual(
            StockMovement.objects.filter(product=self.product, reference=BULK_REFERENCE).count(),
            2,
        )


class ReconcileCommandTests(TestCase):
    def test_balanced_catalog(self):
        create_product(sku="A-1", name="Hammer", price_ht="12.00", initial_stock=3)
        out = StringIO()

        call_command("reconcile_stock", stdout=out)

        self.assertIn("all balanced", out.getvalue())

    def test_out_of_balance_product_fails(self):
        product = create_product(sku="A-2", name="Saw", price_ht="20.00", initial_stock=3)
        # bypass the ledger on purpose
        Product.objects.filter(pk=product.pk).update(stock_quantity=9)

        with self.assertRaises(CommandError):
            call_command("reconcile_stock", stdout=StringIO())
