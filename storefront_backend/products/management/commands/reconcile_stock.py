# products/management/commands/reconcile_stock.py

"""
Check that every product's stock_quantity equals the sum of its movements.

Exit status is non-zero when at least one product is out of balance, so the
command can run from cron / CI.
"""

from django.core.management.base import BaseCommand, CommandError

from products.models import Product
from products.services.stock_ledger import reconcile_product


class Command(BaseCommand):
    help = "Report products whose stock_quantity differs from their movement ledger"

    def add_arguments(self, parser):
        parser.add_argument("--sku", help="Only check this SKU")

    def handle(self, *args, **options):
        qs = Product.objects.all().order_by("sku")
        if options.get("sku"):
            qs = qs.filter(sku=options["sku"])

        checked = 0
        mismatches = []

        for product in qs.iterator():
            checked += 1
            result = reconcile_product(product)
            if not result.is_balanced:
                mismatches.append(result)
                self.stdout.write(
                    self.style.ERROR(
                        f"{result.sku}: ledger={result.expected} stock={result.actual}"
                    )
                )

        if mismatches:
            raise CommandError(f"{len(mismatches)} of {checked} products out of balance")

        self.stdout.write(self.style.SUCCESS(f"{checked} products checked, all balanced."))
