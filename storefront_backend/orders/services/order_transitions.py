# orders/services/order_transitions.py

"""
ORDER TRANSITIONS (APPLICATION SERVICE)

Purpose:
- Move an order along the lifecycle table (orders.services.order_lifecycle).
- Write exactly one OrderHistory row per status change.
- Restore stock when an order is cancelled.

GUARANTEES:
- The order row is locked before its persisted status is read, so two
  concurrent transitions of the same order queue.
- Cancellation restores exactly the ordered quantities through the stock
  ledger (`in` movements, reference = order number).
- Status, history and stock restoration commit together or not at all.
- Payment status changes do not write history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from backend.errors import NotFoundError
from orders.models import Order, OrderHistory
from orders.services.order_lifecycle import (
    CUSTOMER_CANCEL_COMMENT,
    InvalidTransitionError,
    can_change_payment_status,
    default_comment,
    validate_transition,
)
from products.models import StockMovement
from products.services.stock_ledger import apply_movement, lock_products_in_order

logger = logging.getLogger(__name__)


class OrderNotFoundError(NotFoundError):
    """Order does not exist."""

    code = "ORDER_NOT_FOUND"


@dataclass(frozen=True)
class TransitionResult:
    success: bool
    order_id: str
    order_number: str
    from_status: str
    to_status: str

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "order_id": self.order_id,
            "order_number": self.order_number,
            "from_status": self.from_status,
            "to_status": self.to_status,
        }


# ============================================================
# HELPERS
# ============================================================

def _lock_order(order_id, *, user_id=None) -> Order:
    qs = Order.objects.select_for_update()
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    try:
        return qs.get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFoundError(f"Order not found: {order_id}")


def _restore_stock(order: Order, *, user=None) -> int:
    """
    Put every ordered unit back. Lines whose product was removed from the
    catalog have nothing to restore to and are skipped.
    """
    items = [item for item in order.items.all() if item.product_id is not None]
    lock_products_in_order(item.product_id for item in items)

    performed_by = user if getattr(user, "is_authenticated", False) else None

    restored = 0
    for item in sorted(items, key=lambda i: str(i.product_id)):
        apply_movement(
            product=item.product_id,
            quantity=int(item.quantity),
            movement_type=StockMovement.MovementType.IN,
            reference=order.order_number,
            notes=f"Cancellation of order {order.order_number}",
            user=performed_by,
        )
        restored += int(item.quantity)
    return restored


def _apply_transition(order: Order, *, to_status: str, comment: Optional[str], user=None) -> TransitionResult:
    from_status = order.status
    validate_transition(from_status=from_status, to_status=to_status)

    if to_status == Order.STATUS_CANCELLED:
        _restore_stock(order, user=user)

    order.status = to_status
    order.save(update_fields=["status", "updated_at"])

    OrderHistory.objects.create(
        order=order,
        status=to_status,
        comment=comment if comment else default_comment(to_status),
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    logger.info(
        "Order status changed",
        extra={
            "order_number": order.order_number,
            "from_status": from_status,
            "to_status": to_status,
        },
    )

    return TransitionResult(
        success=True,
        order_id=str(order.id),
        order_number=order.order_number,
        from_status=from_status,
        to_status=to_status,
    )


# ============================================================
# PUBLIC API
# ============================================================

@transaction.atomic
def transition(*, order_id, to_status: str, comment: Optional[str] = None, user=None) -> TransitionResult:
    """
    Admin status change. Raises InvalidTransitionError for any pair not in
    the lifecycle table (including every move out of a terminal status).
    """
    order = _lock_order(order_id)
    try:
        return _apply_transition(order, to_status=to_status, comment=comment, user=user)
    except InvalidTransitionError:
        logger.warning(
            "Order transition rejected",
            extra={"order_number": order.order_number, "from_status": order.status, "to_status": to_status},
        )
        raise


@transaction.atomic
def cancel_order_for_customer(*, order_id, user_id, user=None) -> TransitionResult:
    """
    Customers may cancel their own orders while still pending.
    Orders of other customers are reported as not found.
    """
    order = _lock_order(order_id, user_id=user_id)

    if order.status != Order.STATUS_PENDING:
        raise InvalidTransitionError(
            f"Order {order.order_number} can no longer be cancelled (status: {order.status})",
            from_status=order.status,
            to_status=Order.STATUS_CANCELLED,
        )

    return _apply_transition(
        order,
        to_status=Order.STATUS_CANCELLED,
        comment=CUSTOMER_CANCEL_COMMENT,
        user=user,
    )


@transaction.atomic
def set_payment_status(*, order_id, payment_status: str) -> Order:
    order = _lock_order(order_id)
    previous = order.payment_status

    if not can_change_payment_status(from_status=previous, to_status=payment_status):
        raise InvalidTransitionError(
            f"Cannot move payment of order {order.order_number} from '{previous}' to '{payment_status}'",
            from_status=previous,
            to_status=payment_status,
        )

    order.payment_status = payment_status
    order.save(update_fields=["payment_status", "updated_at"])

    logger.info(
        "Order payment status changed",
        extra={"order_number": order.order_number, "from_status": previous, "to_status": payment_status},
    )
    return order
