# order/serializers.py
from rest_framework import serializers
from product.serializers import ProductMiniSerializer
from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product = ProductMiniSerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product", "size", "quantity", "price"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    user = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "total_price",
            "status",
            "payment_status",
            "payment_method",
            "razorpay_order_id",
            "razorpay_payment_id",
            "items",
            "created_at",
        ]
        read_only_fields = fields  # output only

    def get_user(self, obj):
        if obj.user_id is None:
            return "guest"
        return {"id": obj.user_id, "name": obj.user.name, "email": obj.user.email}


# ---- input ----

class OrderLineSerializer(serializers.Serializer):
    product = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    size = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")

    def validate_size(self, value):
        return (value or "").strip()


class CheckoutSerializer(serializers.Serializer):
    items = OrderLineSerializer(many=True, allow_empty=False)
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class PaymentOrderSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(required=False, allow_blank=True)
    receipt = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.DictField(required=False)
