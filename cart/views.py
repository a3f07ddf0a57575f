import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status, permissions
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from product.models import Product
from .models import CartItem
from .serializers import CartItemSerializer, CartItemCreateSerializer, CartItemUpdateSerializer
from .services import cleanup_expired_cart_items

logger = logging.getLogger(__name__)


def _cart_response(request, status_code=status.HTTP_200_OK):
    qs = CartItem.objects.filter(user=request.user).select_related("product")
    serializer = CartItemSerializer(qs, many=True, context={"request": request})
    return Response({"items": serializer.data}, status=status_code)


class CartListCreateAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, format=None):
        cleanup_expired_cart_items()
        return _cart_response(request)

    @transaction.atomic
    def post(self, request, format=None):
        """
        Expected payload:
        {
            "product": <id>,
            "quantity": <int>,
            "size": "XL"
        }
        """
        serializer = CartItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_id = serializer.validated_data["product"]
        qty = serializer.validated_data["quantity"]
        size = serializer.validated_data["size"]

        product = Product.objects.filter(pk=product_id, is_active=True).first()
        if product is None:
            raise NotFound("Product not found")

        available = product.stock - product.reserved_stock()
        if available < qty:
            raise ValidationError(f"Only {max(0, available)} items available in stock")

        item = CartItem.objects.filter(user=request.user, product=product, size=size).first()
        if item is None:
            CartItem.objects.create(user=request.user, product=product, size=size, quantity=qty)
            return _cart_response(request, status.HTTP_201_CREATED)

        new_quantity = item.quantity + qty
        if product.stock < new_quantity:
            raise ValidationError("Insufficient stock for requested quantity")

        item.quantity = new_quantity
        item.added_at = timezone.now()
        item.save(update_fields=["quantity", "added_at"])
        return _cart_response(request)

    def delete(self, request, format=None):
        """ Clear the whole cart. """
        deleted, _ = CartItem.objects.filter(user=request.user).delete()
        logger.info("Cleared %s cart item(s) for user %s", deleted, request.user.pk)
        return _cart_response(request)


class CartItemDetailAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @transaction.atomic
    def patch(self, request, pk, format=None):
        """
        Update quantity (0 removes the row) and optionally move the line to
        another size. Moving onto a size already in the cart replaces that
        line's quantity and drops this one.
        """
        obj = get_object_or_404(CartItem.objects.select_related("product"), pk=pk, user=request.user)

        serializer = CartItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        qty = serializer.validated_data["quantity"]
        size = serializer.validated_data.get("size", obj.size)

        if qty == 0:
            obj.delete()
            return _cart_response(request)

        if qty > obj.product.stock:
            raise ValidationError(f"Only {obj.product.stock} items available in stock")

        target = obj
        if size != obj.size:
            existing = CartItem.objects.filter(user=request.user, product=obj.product, size=size).first()
            if existing is not None:
                obj.delete()
                target = existing
            else:
                obj.size = size

        target.quantity = qty
        target.added_at = timezone.now()
        target.save()
        return _cart_response(request)

    def delete(self, request, pk, format=None):
        obj = get_object_or_404(CartItem, pk=pk, user=request.user)
        obj.delete()
        return _cart_response(request)


class CartCleanupAPIView(APIView):
    """
    POST /api/v1/cart/cleanup/ -> sweep expired cart rows (staff only).
    The same sweep is available as `manage.py cleanup_carts`.
    """
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, format=None):
        deleted = cleanup_expired_cart_items()
        return Response({"message": "Cart cleanup completed", "deleted_items": deleted}, status=status.HTTP_200_OK)
