# quotes/admin.py

from django.contrib import admin

from quotes.models import Quote, QuoteItem


class QuoteItemInline(admin.TabularInline):
    model = QuoteItem
    extra = 0
    readonly_fields = ("product_name", "product_sku")


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = (
        "quote_number",
        "user",
        "status",
        "valid_until",
        "total_ttc",
        "converted_order",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("quote_number", "user__email", "user__company_name")
    readonly_fields = (
        "quote_number",
        "subtotal_ht",
        "discount_amount",
        "tax_amount",
        "total_ttc",
        "converted_order",
        "converted_at",
        "created_at",
        "updated_at",
    )
    inlines = [QuoteItemInline]
