from rest_framework import serializers

from .models import Product


class ProductMiniSerializer(serializers.ModelSerializer):
    # minimal product shape for cart and order lines
    image = serializers.CharField(source="primary_image", read_only=True)

    class Meta:
        model = Product
        fields = ("id", "name", "category", "image", "price")


class ProductSerializer(serializers.ModelSerializer):
    has_discount = serializers.BooleanField(read_only=True)
    discount_percent = serializers.DecimalField(max_digits=4, decimal_places=1, read_only=True)

    class Meta:
        model = Product
        fields = (
            "id", "name", "description", "category",
            "price", "original_price", "has_discount", "discount_percent",
            "stock", "sizes", "image_urls", "is_featured",
            "created_at", "updated_at",
        )
        read_only_fields = fields


class ProductStockSerializer(serializers.Serializer):
    product_name = serializers.CharField()
    total_stock = serializers.IntegerField()
    reserved_stock = serializers.IntegerField()
    available_stock = serializers.IntegerField()
