# product/admin.py
from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "price", "original_price", "stock", "is_active", "is_featured", "created_at")
    list_filter = ("category", "is_active", "is_featured")
    list_editable = ("stock", "is_active")
    search_fields = ("name", "description")
