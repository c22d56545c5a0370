# permissions/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_PRO
from users.models import Address


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    first_name: str
    last_name: str
    company_name: str = ""
    discount_rate: Decimal = Decimal("0.00")


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin@example.com", "Alex", "Martin"),
    SeedUserSpec(
        "Pro",
        ROLE_PRO,
        "pro@example.com",
        "Camille",
        "Bernard",
        company_name="Bernard Renovation",
        discount_rate=Decimal("10.00"),
    ),
    SeedUserSpec("Customer", ROLE_CUSTOMER, "customer@example.com", "Sam", "Petit"),
]


def _upsert_user(*, User, spec: SeedUserSpec, password: str):
    """
    Idempotent user seed:
    - create if missing
    - realign role / staff / pro flags if it exists
    """
    is_admin = spec.role == ROLE_ADMIN

    user = User.objects.filter(email=spec.email).first()
    created = user is None

    if created:
        extra = {
            "first_name": spec.first_name,
            "last_name": spec.last_name,
            "role": spec.role,
            "company_name": spec.company_name,
            "discount_rate": spec.discount_rate,
            "is_validated": spec.role == ROLE_PRO,
        }
        if is_admin:
            user = User.objects.create_superuser(email=spec.email, password=password, **extra)
        else:
            user = User.objects.create_user(email=spec.email, password=password, **extra)
        return user, True

    dirty = False
    for field, value in (
        ("role", spec.role),
        ("is_staff", is_admin),
        ("is_superuser", is_admin),
        ("is_validated", spec.role == ROLE_PRO),
    ):
        if getattr(user, field) != value:
            setattr(user, field, value)
            dirty = True

    if dirty:
        user.save()

    return user, False


def _ensure_default_addresses(user) -> None:
    for address_type in (Address.TYPE_SHIPPING, Address.TYPE_BILLING):
        if user.addresses.filter(type=address_type, is_default=True).exists():
            continue
        Address.objects.create(
            user=user,
            type=address_type,
            street="12 rue des Artisans",
            city="Lyon",
            postal_code="69003",
            is_default=True,
        )


class Command(BaseCommand):
    help = "Seed one admin, one validated pro and one customer account (with default addresses)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="If set, resets password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not password or len(password) < 6:
            raise CommandError("--password must be provided and at least 6 characters.")

        User = get_user_model()

        created_count = 0
        reset_count = 0

        for spec in SEED_USERS:
            user, created = _upsert_user(User=User, spec=spec, password=password)

            if force_password and not created:
                user.set_password(password)
                user.save(update_fields=["password"])
                reset_count += 1

            if spec.role != ROLE_ADMIN:
                _ensure_default_addresses(user)

            if created:
                created_count += 1
                self.stdout.write(f"created: {spec.label} ({spec.email})")
            else:
                self.stdout.write(f"exists:  {spec.label} ({spec.email})")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created users: {created_count}")
        if force_password:
            self.stdout.write(f"Passwords reset: {reset_count}")
