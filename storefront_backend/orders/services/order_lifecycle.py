"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth

    pending    -> confirmed | cancelled
    confirmed  -> processing | cancelled
    processing -> shipped | cancelled
    shipped    -> delivered
    delivered  -> (terminal)
    cancelled  -> (terminal)
"""

from backend.errors import CommerceError
from orders.models import Order

# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidTransitionError(CommerceError):
    """Status change not allowed from the current status."""

    code = "INVALID_TRANSITION"

    def __init__(self, message: str = "", *, from_status=None, to_status=None):
        super().__init__(
            message or f"Cannot move order from '{from_status}' to '{to_status}'",
            from_status=from_status,
            to_status=to_status,
        )
        self.from_status = from_status
        self.to_status = to_status


# ============================================================
# STATE DEFINITIONS
# ============================================================

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: (Order.STATUS_CONFIRMED, Order.STATUS_CANCELLED),
    Order.STATUS_CONFIRMED: (Order.STATUS_PROCESSING, Order.STATUS_CANCELLED),
    Order.STATUS_PROCESSING: (Order.STATUS_SHIPPED, Order.STATUS_CANCELLED),
    Order.STATUS_SHIPPED: (Order.STATUS_DELIVERED,),
    Order.STATUS_DELIVERED: (),
    Order.STATUS_CANCELLED: (),
}

TERMINAL_STATES = {s for s, targets in ALLOWED_TRANSITIONS.items() if not targets}

# statuses that trigger a customer e-mail
NOTIFY_ON_STATUSES = {
    Order.STATUS_CONFIRMED,
    Order.STATUS_PROCESSING,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

# history comment written when no explicit comment is given
STATUS_COMMENTS = {
    Order.STATUS_PENDING: "Order created",
    Order.STATUS_CONFIRMED: "Order confirmed",
    Order.STATUS_PROCESSING: "Order being prepared",
    Order.STATUS_SHIPPED: "Order shipped",
    Order.STATUS_DELIVERED: "Order delivered",
    Order.STATUS_CANCELLED: "Order cancelled by administrator",
}

CUSTOMER_CANCEL_COMMENT = "Cancelled by customer"


# ============================================================
# DOMAIN RULES
# ============================================================


def allowed_transitions(status: str) -> tuple:
    """Statuses reachable from `status` in one step (empty for unknown)."""
    return ALLOWED_TRANSITIONS.get(status, ())


def can_transition(*, from_status: str, to_status: str) -> bool:
    return to_status in allowed_transitions(from_status)


def validate_transition(*, from_status: str, to_status: str) -> None:
    if not can_transition(from_status=from_status, to_status=to_status):
        raise InvalidTransitionError(from_status=from_status, to_status=to_status)


def default_comment(status: str) -> str:
    return STATUS_COMMENTS.get(status, "")


# ============================================================
# PAYMENT STATUS
# ============================================================

ALLOWED_PAYMENT_TRANSITIONS = {
    Order.PAYMENT_PENDING: (Order.PAYMENT_PAID,),
    Order.PAYMENT_PAID: (Order.PAYMENT_REFUNDED,),
    Order.PAYMENT_REFUNDED: (),
}


def can_change_payment_status(*, from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_PAYMENT_TRANSITIONS.get(from_status, ())
