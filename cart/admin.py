from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "product", "size", "quantity", "added_at")
    search_fields = ("user__email", "product__name")
