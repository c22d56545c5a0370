from django.contrib import admin

from .models import Cart, CartItem

# =====================================================
# CART ITEM INLINE (READ-ONLY)
# =====================================================


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "quantity",
        "created_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# CART ADMIN
# =====================================================


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    """
    Support visibility only; carts are edited by their owners through the API.
    """

    list_display = (
        "id",
        "user",
        "session_key",
        "item_count",
        "created_at",
        "updated_at",
    )

    readonly_fields = (
        "id",
        "user",
        "session_key",
        "created_at",
        "updated_at",
        "item_count",
    )

    search_fields = ("user__email", "session_key")
    list_filter = ("created_at",)

    inlines = [CartItemInline]

    def has_add_permission(self, request):
        return False
