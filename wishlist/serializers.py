from rest_framework import serializers

from product.serializers import ProductMiniSerializer
from .models import WishlistItem


class WishlistProductSerializer(ProductMiniSerializer):
    class Meta(ProductMiniSerializer.Meta):
        fields = ProductMiniSerializer.Meta.fields + ("original_price", "sizes", "stock", "is_active")


class WishlistItemSerializer(serializers.ModelSerializer):
    product_detail = WishlistProductSerializer(source="product", read_only=True)

    class Meta:
        model = WishlistItem
        fields = ("id", "product", "product_detail", "created_at")
        read_only_fields = fields


class WishlistItemAdminSerializer(WishlistItemSerializer):
    user = serializers.SerializerMethodField()

    class Meta(WishlistItemSerializer.Meta):
        fields = ("id", "user", "product", "product_detail", "created_at")
        read_only_fields = fields

    def get_user(self, obj):
        return {"id": obj.user_id, "name": obj.user.name, "email": obj.user.email}


class WishlistAddSerializer(serializers.Serializer):
    product = serializers.IntegerField(error_messages={"required": "Product ID is required"})
