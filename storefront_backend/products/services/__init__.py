from .catalog import create_product
from .exceptions import (
    InsufficientStockError,
    NegativeStockError,
    OutOfStockError,
    ProductNotFoundError,
)
from .inventory import low_stock_products, stock_stats
from .stock_ledger import (
    apply_movement,
    bulk_apply_movements,
    ledger_balance,
    lock_products_in_order,
    reconcile_product,
)

__all__ = [
    "create_product",
    "apply_movement",
    "bulk_apply_movements",
    "ledger_balance",
    "reconcile_product",
    "lock_products_in_order",
    "low_stock_products",
    "stock_stats",
    "InsufficientStockError",
    "NegativeStockError",
    "OutOfStockError",
    "ProductNotFoundError",
]
