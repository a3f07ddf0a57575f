from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "size", "quantity", "price")
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "total_price", "status", "payment_status", "payment_method", "created_at")
    list_filter = ("status", "payment_status", "payment_method")
    search_fields = ("id", "user__email", "razorpay_order_id", "razorpay_payment_id")
    readonly_fields = ("user", "total_price", "payment_status", "payment_method", "razorpay_order_id", "razorpay_payment_id", "created_at")
    inlines = [OrderItemInline]
