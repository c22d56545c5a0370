# users/admin.py

"""
USERS ADMIN REGISTRATION

Registers the custom User model and addresses in Django Admin.
Pro account validation (is_validated, discount_rate) is done from here.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from users.models import Address

User = get_user_model()


class AddressInline(admin.TabularInline):
    model = Address
    extra = 0


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "role", "company_name", "is_validated", "is_staff", "is_active")
    list_filter = ("role", "is_validated", "is_staff", "is_active")
    search_fields = ("email", "first_name", "last_name", "company_name", "siret")
    inlines = [AddressInline]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("first_name", "last_name", "phone", "role")}),
        (
            "Professional",
            {"fields": ("company_name", "siret", "vat_number", "is_validated", "discount_rate")},
        ),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "role",
                    "is_staff",
                    "is_active",
                ),
            },
        ),
    )
