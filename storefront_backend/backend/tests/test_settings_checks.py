from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase

from backend.settings.checks import (
    require_postgres_url,
    require_public_origins,
    require_secret_key,
)


class ProductionChecksTests(SimpleTestCase):
    def test_secret_key(self):
        self.assertEqual(require_secret_key("  s3cr3t-value "), "s3cr3t-value")
        for bad in (None, "", "dev-insecure-change-me"):
            with self.assertRaises(ImproperlyConfigured):
                require_secret_key(bad)

    def test_database_must_be_postgres(self):
        url = "postgres://shop:pw@db:5432/shop"
        self.assertEqual(require_postgres_url(url), url)

        for bad in ("", "sqlite:///db.sqlite3", "mysql://shop@db/shop"):
            with self.assertRaises(ImproperlyConfigured):
                require_postgres_url(bad)

    def test_public_origins(self):
        origins = ["https://shop.example.com"]
        self.assertEqual(require_public_origins("CORS_ALLOWED_ORIGINS", origins), origins)

        for bad in ([], ["http://shop.example.com"], ["https://localhost:3000"]):
            with self.assertRaisesMessage(ImproperlyConfigured, "CORS_ALLOWED_ORIGINS"):
                require_public_origins("CORS_ALLOWED_ORIGINS", bad)
