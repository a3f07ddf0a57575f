import logging

from django.dispatch import Signal, receiver

from .models import Order
from .notifications import send_order_confirmation

logger = logging.getLogger(__name__)

# sent once per order, after the order transaction has committed
order_placed = Signal()


def publish_order_placed(order_id):
    """
    on_commit hook for a freshly committed order. Receivers run through
    send_robust, so a failing receiver is logged and the order stands.
    """
    order = (
        Order.objects.select_related("user")
        .prefetch_related("items__product")
        .get(pk=order_id)
    )
    for receiver_fn, result in order_placed.send_robust(sender=Order, order=order):
        if isinstance(result, Exception):
            logger.error(
                "order_placed receiver %s failed for order %s: %s",
                getattr(receiver_fn, "__name__", receiver_fn), order_id, result,
            )


@receiver(order_placed, sender=Order)
def send_order_confirmation_on_placed(sender, order, **kwargs):
    if order.user is None or not order.user.email:
        return
    send_order_confirmation(order)
