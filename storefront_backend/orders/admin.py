# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderHistory, OrderItem


# ======================================================
# INLINES (READ-ONLY SNAPSHOTS)
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "product_sku",
        "quantity",
        "unit_price_ht",
        "tax_rate",
        "total_ht",
        "tax_amount",
    )

    def has_add_permission(self, request, obj=None):
        return False


class OrderHistoryInline(admin.TabularInline):
    model = OrderHistory
    extra = 0
    can_delete = False
    readonly_fields = ("status", "comment", "created_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


# ======================================================
# ORDER ADMIN
# ======================================================


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are read-only here: status changes go through the order API so
    that history and stock restoration are never skipped.
    """

    list_display = (
        "order_number",
        "user",
        "status",
        "payment_status",
        "shipping_method",
        "total_ttc",
        "created_at",
    )
    list_filter = ("status", "payment_status", "shipping_method", "created_at")
    search_fields = ("order_number", "user__email", "user__last_name")
    inlines = [OrderItemInline, OrderHistoryInline]

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
