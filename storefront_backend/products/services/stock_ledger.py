# products/services/stock_ledger.py

"""
STOCK LEDGER SERVICE

Purpose:
- The ONLY code path that changes Product.stock_quantity.
- Every change writes exactly one immutable StockMovement with the signed
  delta actually applied and the resulting level.

Rules:
- in          : new = current + quantity      (quantity > 0)
- out         : new = current - quantity      (quantity > 0, new must stay >= 0)
- adjustment  : new = quantity (absolute)     (quantity >= 0)
- The product row is locked (select_for_update) for the whole read-modify-write.
- Callers that touch several products must lock them in id order before
  calling in (see lock_products_in_order) so concurrent checkouts never deadlock.

GUARANTEES:
- Σ StockMovement.quantity == Product.stock_quantity for every product.
- A failed movement leaves no trace (product and movement are written in the
  same transaction).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum

from backend.errors import CommerceError
from products.models import Product, StockMovement
from products.services.exceptions import NegativeStockError, ProductNotFoundError

logger = logging.getLogger(__name__)

BULK_REFERENCE = "ADMIN_BULK"


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if value is None or value == "":
        raise ValidationError("quantity is required")

    if isinstance(value, bool):
        raise ValidationError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)

    raise ValidationError("quantity must be a whole integer unit")


def _product_id(product) -> object:
    return getattr(product, "id", product)


def lock_products_in_order(product_ids: Iterable) -> dict:
    """
    Lock product rows in ascending id order and return {id: Product}.

    Missing ids are simply absent from the result; callers decide whether that
    is an error.
    """
    ids = sorted({pid for pid in product_ids if pid is not None}, key=str)
    if not ids:
        return {}

    locked = Product.objects.select_for_update().filter(id__in=ids).order_by("id")
    return {p.id: p for p in locked}


@transaction.atomic
def apply_movement(
    *,
    product,
    quantity,
    movement_type: str,
    reference: str = "",
    notes: str | None = None,
    user=None,
) -> int:
    """
    Apply one stock movement and return the product's new stock_quantity.

    `product` may be a Product instance or a product id; the row is always
    re-read under lock.
    """
    qty = _to_int_qty(quantity)

    if movement_type not in StockMovement.MovementType.values:
        raise ValidationError(f"Unknown movement type: {movement_type}")

    if movement_type == StockMovement.MovementType.ADJUSTMENT:
        if qty < 0:
            raise ValidationError("adjustment quantity must be zero or positive")
    elif qty <= 0:
        raise ValidationError("quantity must be greater than zero")

    try:
        locked = Product.objects.select_for_update().get(pk=_product_id(product))
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise ProductNotFoundError(f"Product not found: {_product_id(product)}")

    current = int(locked.stock_quantity or 0)

    if movement_type == StockMovement.MovementType.IN:
        new_stock = current + qty
    elif movement_type == StockMovement.MovementType.OUT:
        new_stock = current - qty
        if new_stock < 0:
            logger.warning(
                "Stock movement rejected: would go negative",
                extra={
                    "product_id": str(locked.id),
                    "current": current,
                    "requested": qty,
                    "reference": reference,
                },
            )
            raise NegativeStockError(
                f"Insufficient stock for {locked.name}. "
                f"Available: {current}, Requested: {qty}"
            )
    else:
        new_stock = qty

    delta = new_stock - current

    Product.objects.filter(pk=locked.pk).update(stock_quantity=new_stock)
    locked.stock_quantity = new_stock

    StockMovement.objects.create(
        product=locked,
        movement_type=movement_type,
        quantity=delta,
        stock_after=new_stock,
        reference=reference or "",
        notes=notes or "",
        performed_by=user,
    )

    logger.info(
        "Stock movement applied",
        extra={
            "product_id": str(locked.id),
            "movement_type": movement_type,
            "delta": delta,
            "stock_after": new_stock,
            "reference": reference,
        },
    )

    return new_stock


# ============================================================
# BULK (admin stock screen)
# ============================================================

@dataclass(frozen=True)
class BulkLineResult:
    product_id: str
    success: bool
    new_stock: int | None = None
    error: str | None = None

    def as_dict(self) -> dict:
        data = {"product_id": self.product_id, "success": self.success}
        if self.success:
            data["new_stock"] = self.new_stock
        else:
            data["error"] = self.error
        return data


def bulk_apply_movements(updates: Iterable[dict], *, user=None) -> list[BulkLineResult]:
    """
    Apply several movements; each line commits or fails on its own.

    Each update: {"product_id", "quantity", "type", "notes"?}
    """
    results: list[BulkLineResult] = []

    for update in updates:
        product_id = update.get("product_id")
        try:
            # own savepoint per line
            with transaction.atomic():
                new_stock = apply_movement(
                    product=product_id,
                    quantity=update.get("quantity"),
                    movement_type=update.get("type"),
                    reference=BULK_REFERENCE,
                    notes=update.get("notes"),
                    user=user,
                )
        except ValidationError as exc:
            results.append(
                BulkLineResult(product_id=str(product_id), success=False, error="; ".join(exc.messages))
            )
        except CommerceError as exc:
            results.append(BulkLineResult(product_id=str(product_id), success=False, error=exc.message))
        else:
            results.append(BulkLineResult(product_id=str(product_id), success=True, new_stock=new_stock))

    return results


# ============================================================
# RECONCILIATION
# ============================================================

@dataclass(frozen=True)
class ReconciliationResult:
    product_id: str
    sku: str
    expected: int
    actual: int

    @property
    def is_balanced(self) -> bool:
        return self.expected == self.actual

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "sku": self.sku,
            "ledger_balance": self.expected,
            "stock_quantity": self.actual,
            "is_balanced": self.is_balanced,
        }


def ledger_balance(product) -> int:
    total = (
        StockMovement.objects.filter(product_id=_product_id(product))
        .aggregate(total=Sum("quantity"))
        .get("total")
    )
    return int(total or 0)


def reconcile_product(product: Product) -> ReconciliationResult:
    return ReconciliationResult(
        product_id=str(product.id),
        sku=product.sku,
        expected=ledger_balance(product),
        actual=int(product.stock_quantity or 0),
    )
