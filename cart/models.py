from django.conf import settings
from django.db import models
from django.utils import timezone
from product.models import Product

User = settings.AUTH_USER_MODEL


class CartItem(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="cart_items")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="cart_items")
    quantity = models.PositiveIntegerField(default=1)
    size = models.CharField(max_length=20, blank=True, default="")
    # refreshed on every quantity change; drives the expiry sweep
    added_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        unique_together = ("user", "product", "size")
        ordering = ("-added_at",)

    def __str__(self):
        return f"{self.user_id} - {self.product_id} ({self.size or '-'}) x{self.quantity}"
