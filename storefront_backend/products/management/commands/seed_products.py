from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from products.models import Brand, Category, Product
from products.services.catalog import create_product


class Command(BaseCommand):
    help = "Seed categories, brands and products (opening stock posted to the ledger)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding catalog and stock..."))

        # -------------------------------
        # CATEGORIES / BRANDS
        # -------------------------------
        categories = ["Screws & Bolts", "Power Tools", "Paint", "Plumbing"]
        brands = ["Acme", "Boschet", "Fixall"]

        category_objs = {}
        for position, name in enumerate(categories):
            obj, _ = Category.objects.get_or_create(
                slug=slugify(name),
                defaults={"name": name, "position": position},
            )
            category_objs[name] = obj

        brand_objs = {}
        for name in brands:
            obj, _ = Brand.objects.get_or_create(slug=slugify(name), defaults={"name": name})
            brand_objs[name] = obj

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        products_data = [
            ("SCR-4X40", "Wood screws 4x40 (box of 200)", "Screws & Bolts", "Fixall", "8.25", 120),
            ("DRL-18V", "Cordless drill 18V", "Power Tools", "Boschet", "89.90", 15),
            ("PNT-WHT-10", "White matt paint 10L", "Paint", "Acme", "54.00", 30),
            ("PLB-TAPE", "PTFE sealing tape", "Plumbing", "Fixall", "1.20", 4),
        ]

        created = 0
        for sku, name, cat, brand, price, stock in products_data:
            if Product.objects.filter(sku=sku).exists():
                continue

            create_product(
                sku=sku,
                name=name,
                price_ht=Decimal(price),
                initial_stock=stock,
                category=category_objs[cat],
                brand=brand_objs[brand],
            )
            created += 1

        self.stdout.write(
            self.style.SUCCESS(f"Catalog seeded ({created} new products).")
        )
