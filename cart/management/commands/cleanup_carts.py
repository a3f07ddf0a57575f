from django.core.management.base import BaseCommand

from cart.services import cleanup_expired_cart_items


class Command(BaseCommand):
    help = "Delete cart items older than CART_ITEM_TTL. Meant to be run from cron."

    def handle(self, *args, **options):
        deleted = cleanup_expired_cart_items()
        self.stdout.write(self.style.SUCCESS(f"Cart cleanup completed, {deleted} item(s) deleted"))
