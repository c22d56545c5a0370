# orders/services/notifications.py

"""
ORDER NOTIFICATIONS (POST-COMMIT, FIRE-AND-FORGET)

- Called by the views that create or transition orders.
- The e-mail is registered with transaction.on_commit: nothing is sent for a
  rolled-back transaction, and a failing mail server never undoes an order.
- Failures are logged and swallowed.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from orders.models import Order
from orders.services.order_lifecycle import NOTIFY_ON_STATUSES

logger = logging.getLogger(__name__)


def _enabled() -> bool:
    return bool(getattr(settings, "ORDER_NOTIFICATIONS_ENABLED", True))


def _send(order_id, *, subject: str, body: str) -> bool:
    try:
        order = Order.objects.select_related("user").get(pk=order_id)
        recipient = getattr(order.user, "email", "")
        if not recipient:
            return False

        send_mail(
            subject=subject.format(number=order.order_number),
            message=body.format(
                number=order.order_number,
                status=order.get_status_display(),
                total=order.total_ttc,
            ),
            from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
            recipient_list=[recipient],
            fail_silently=False,
        )
        return True
    except Exception:
        logger.exception("Order notification failed", extra={"order_id": str(order_id)})
        return False


def send_order_created(order_id) -> bool:
    return _send(
        order_id,
        subject="Order {number} received",
        body="We have received your order {number}.\nTotal: {total} EUR\n",
    )


def send_status_changed(order_id) -> bool:
    return _send(
        order_id,
        subject="Order {number} update",
        body="Your order {number} is now: {status}.\n",
    )


def dispatch_order_created(order_id) -> None:
    if not _enabled():
        return
    transaction.on_commit(lambda: send_order_created(order_id))


def dispatch_status_changed(order_id, status: str) -> None:
    if not _enabled() or status not in NOTIFY_ON_STATUSES:
        return
    transaction.on_commit(lambda: send_status_changed(order_id))
