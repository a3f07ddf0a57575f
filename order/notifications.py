import logging
from datetime import timedelta

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone

from .exceptions import NotificationFailure

logger = logging.getLogger(__name__)


def estimated_delivery(now=None):
    now = now or timezone.now()
    return (now + timedelta(days=settings.ORDER_DELIVERY_ESTIMATE_DAYS)).strftime("%d %b %Y")


def build_confirmation_context(order):
    return {
        "store_name": settings.STORE_NAME,
        "name": order.user.display_name,
        "order": order,
        "items": [
            {
                "name": item.product.name,
                "image_url": item.product.primary_image,
                "size": item.size,
                "quantity": item.quantity,
                "price": item.price,
                "line_total": item.line_total,
            }
            for item in order.items.all()
        ],
        "total_price": order.total_price,
        "estimated_delivery": estimated_delivery(),
    }


def send_order_confirmation(order):
    """Email the order summary to the purchaser. Raises NotificationFailure if the mail is not handed off."""
    context = build_confirmation_context(order)
    subject = f"Order Confirmed #{order.pk} - {settings.STORE_NAME}"
    message = render_to_string("order/email/order_confirmation.txt", context)
    html_message = render_to_string("order/email/order_confirmation.html", context)

    try:
        sent = send_mail(
            subject,
            message,
            settings.DEFAULT_FROM_EMAIL,
            [order.user.email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as exc:
        raise NotificationFailure(f"Order confirmation email failed for order {order.pk}") from exc

    if sent < 1:
        raise NotificationFailure(f"Order confirmation email for order {order.pk} was not delivered")

    logger.info("Order confirmation sent for order %s to %s", order.pk, order.user.email)
    return sent
