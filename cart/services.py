import logging

from django.conf import settings
from django.utils import timezone

from .models import CartItem

logger = logging.getLogger(__name__)


def cleanup_expired_cart_items(now=None):
    """
    Delete every cart row whose added_at is older than CART_ITEM_TTL.

    Returns the number of rows deleted. Safe to run concurrently with
    checkout: both only ever delete matching rows, so a row removed by one
    is simply not seen by the other.
    """
    now = now or timezone.now()
    cutoff = now - settings.CART_ITEM_TTL
    deleted, _ = CartItem.objects.filter(added_at__lt=cutoff).delete()
    if deleted:
        logger.info("Cart cleanup removed %s expired item(s) older than %s", deleted, cutoff.isoformat())
    return deleted
