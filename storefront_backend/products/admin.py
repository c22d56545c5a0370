# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- stock_quantity is read-only on the Product page.
- Stock changes are entered in the "Stock movement" fieldset and routed through
  apply_movement() so every change writes a StockMovement row.
- StockMovement rows are view-only (no edit, no delete).

Important:
- Validation MUST happen inside the form clean() so Django admin can render
  errors on the page (instead of crashing into a ValidationError screen).
"""

from __future__ import annotations

from django import forms
from django.contrib import admin
from django.core.exceptions import ValidationError

from backend.errors import CommerceError
from products.models import Brand, Category, Product, StockMovement
from products.services.stock_ledger import apply_movement


# =====================================================
# CATEGORY / BRAND
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "parent", "position")
    search_fields = ("name",)
    prepopulated_fields = {"slug": ("name",)}
    ordering = ("position", "name")


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ("name", "slug")
    search_fields = ("name",)
    prepopulated_fields = {"slug": ("name",)}


# =====================================================
# PRODUCT FORM (STOCK MOVEMENT ENTRY LIVES HERE)
# =====================================================

class ProductAdminForm(forms.ModelForm):
    movement_type = forms.ChoiceField(
        choices=[("", "---------")] + list(StockMovement.MovementType.choices),
        required=False,
    )
    movement_quantity = forms.IntegerField(
        required=False,
        min_value=0,
        help_text="Amount for in/out. New absolute level for adjustment.",
    )
    movement_notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 2}))

    class Meta:
        model = Product
        fields = "__all__"

    def clean(self):
        cleaned = super().clean()

        mtype = cleaned.get("movement_type")
        qty = cleaned.get("movement_quantity")

        if not mtype and qty in (None, ""):
            return cleaned

        if not mtype:
            self.add_error("movement_type", "Choose a movement type.")
        if qty in (None, ""):
            self.add_error("movement_quantity", "Enter a quantity.")
        elif mtype != StockMovement.MovementType.ADJUSTMENT and qty == 0:
            self.add_error("movement_quantity", "Quantity must be > 0 for in/out.")
        elif mtype == StockMovement.MovementType.OUT and self.instance.pk:
            current = int(self.instance.stock_quantity or 0)
            if qty > current:
                self.add_error(
                    "movement_quantity",
                    f"Cannot remove {qty}; only {current} in stock.",
                )

        return cleaned


class StockMovementInline(admin.TabularInline):
    model = StockMovement
    extra = 0
    can_delete = False
    show_change_link = False
    ordering = ("-created_at",)

    fields = ("created_at", "movement_type", "quantity", "stock_after", "reference", "notes", "performed_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    form = ProductAdminForm

    list_display = (
        "sku",
        "name",
        "category",
        "price_ht",
        "tax_rate",
        "stock_quantity",
        "is_low_stock",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "category", "brand", "created_at")
    search_fields = ("sku", "name")
    ordering = ("-created_at",)
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("stock_quantity", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("sku", "name", "slug", "description", "category", "brand", "is_active")}),
        ("Pricing", {"fields": ("price_ht", "tax_rate")}),
        ("Stock", {"fields": ("stock_quantity", "stock_alert_threshold")}),
        ("Stock movement", {"fields": ("movement_type", "movement_quantity", "movement_notes")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    inlines = [StockMovementInline]

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)

        mtype = form.cleaned_data.get("movement_type")
        qty = form.cleaned_data.get("movement_quantity")
        if not mtype or qty in (None, ""):
            return

        try:
            apply_movement(
                product=obj,
                quantity=qty,
                movement_type=mtype,
                reference="ADMIN",
                notes=form.cleaned_data.get("movement_notes") or "",
                user=request.user,
            )
        except (CommerceError, ValidationError) as exc:
            # concurrent change between form clean and save
            self.message_user(request, f"Stock movement not applied: {exc}", level="error")


# =====================================================
# STOCK MOVEMENT (VIEW-ONLY LIST)
# =====================================================

@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    """
    View-only ledger for audit visibility.
    """

    list_display = ("created_at", "product", "movement_type", "quantity", "stock_after", "reference", "performed_by")
    list_filter = ("movement_type", "created_at")
    search_fields = ("product__name", "product__sku", "reference")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
