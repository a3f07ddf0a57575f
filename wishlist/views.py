import logging

from django.shortcuts import get_object_or_404
from rest_framework import status, permissions
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from product.models import Product
from .models import WishlistItem
from .serializers import WishlistAddSerializer, WishlistItemAdminSerializer, WishlistItemSerializer

logger = logging.getLogger(__name__)


def _wishlist_response(request, status_code=status.HTTP_200_OK):
    qs = WishlistItem.objects.filter(user=request.user).select_related("product")
    serializer = WishlistItemSerializer(qs, many=True, context={"request": request})
    return Response({"items": serializer.data}, status=status_code)


class WishlistListCreateAPIView(APIView):
    """
    GET    /api/v1/wishlist/                 -> current user's wishlist
    POST   /api/v1/wishlist/                 -> add { "product": <id> }
    DELETE /api/v1/wishlist/?product=<id>    -> remove a product
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, format=None):
        return _wishlist_response(request)

    def post(self, request, format=None):
        serializer = WishlistAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_id = serializer.validated_data["product"]

        product = Product.objects.filter(pk=product_id, is_active=True).first()
        if product is None:
            raise NotFound("Product not found or inactive")

        if WishlistItem.objects.filter(user=request.user, product=product).exists():
            raise ValidationError("Product already in wishlist")

        WishlistItem.objects.create(user=request.user, product=product)
        return _wishlist_response(request, status.HTTP_201_CREATED)

    def delete(self, request, format=None):
        product_id = request.query_params.get("product")
        if not product_id or not product_id.isdigit():
            raise ValidationError("Product ID is required")

        deleted, _ = WishlistItem.objects.filter(user=request.user, product_id=int(product_id)).delete()
        logger.debug("Removed %s wishlist row(s) for user %s", deleted, request.user.pk)
        return _wishlist_response(request)


class WishlistItemDeleteAPIView(APIView):
    """
    DELETE /api/v1/wishlist/<pk>/  -> deletes that wishlist row (pk is the wishlist item id)
    """
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, pk, format=None):
        item = get_object_or_404(WishlistItem, pk=pk, user=request.user)
        item.delete()
        return _wishlist_response(request)


class WishlistAdminPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class WishlistAdminListAPIView(APIView):
    """ GET /api/v1/wishlist/all/?user=<id>  -> every wishlist row, staff only """
    permission_classes = [permissions.IsAdminUser]

    def get(self, request, format=None):
        qs = WishlistItem.objects.select_related("user", "product")
        user_id = request.query_params.get("user")
        if user_id:
            qs = qs.filter(user_id=user_id)

        paginator = WishlistAdminPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        serializer = WishlistItemAdminSerializer(page, many=True, context={"request": request})
        return paginator.get_paginated_response(serializer.data)
