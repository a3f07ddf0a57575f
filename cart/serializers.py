from rest_framework import serializers

from product.serializers import ProductMiniSerializer
from .models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_detail = ProductMiniSerializer(source="product", read_only=True)

    class Meta:
        model = CartItem
        fields = ("id", "product", "product_detail", "size", "quantity", "added_at")
        read_only_fields = fields


class CartItemCreateSerializer(serializers.Serializer):
    product = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    size = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")

    def validate_size(self, value):
        return (value or "").strip()


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
    size = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_size(self, value):
        return (value or "").strip()
