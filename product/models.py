from decimal import Decimal, ROUND_HALF_UP

from django.db import models
from django.db.models import Sum


class Product(models.Model):
    CATEGORY_CHOICES = [
        ("TSHIRTS", "T-Shirts"),
        ("HOODIES", "Hoodies"),
        ("ACCESSORIES", "Accessories"),
        ("PANTS", "Pants"),
        ("SHOES", "Shoes"),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)

    price = models.DecimalField(max_digits=10, decimal_places=2)
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # decremented by order placement; the check constraint keeps it >= 0 at rest
    stock = models.PositiveIntegerField(default=0)

    sizes = models.JSONField(default=list, blank=True)       # ["S", "M", "L"]
    image_urls = models.JSONField(default=list, blank=True)  # public URLs from object storage

    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(stock__gte=0), name="product_stock_non_negative"),
        ]

    def __str__(self):
        return self.name

    @property
    def primary_image(self):
        return self.image_urls[0] if self.image_urls else ""

    @property
    def has_discount(self):
        return bool(self.original_price and (self.original_price > self.price))

    @property
    def discount_percent(self):
        if not self.has_discount:
            return Decimal("0.0")
        percent = (Decimal(self.original_price) - Decimal(self.price)) / Decimal(self.original_price) * Decimal(100)
        return percent.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    def reserved_stock(self):
        """Units of this product currently sitting in any customer's cart."""
        return self.cart_items.aggregate(total=Sum("quantity"))["total"] or 0

    def available_stock(self):
        return max(0, self.stock - self.reserved_stock())
