from rest_framework import viewsets, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.pagination import PageNumberPagination

from .models import Product
from .serializers import ProductSerializer, ProductStockSerializer


class ProductPagination(PageNumberPagination):
    page_size = 12
    page_size_query_param = "page_size"
    max_page_size = 100


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public catalog. Inactive products are hidden from every endpoint.
    """
    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    queryset = Product.objects.filter(is_active=True)
    serializer_class = ProductSerializer
    pagination_class = ProductPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter, SearchFilter]

    filterset_fields = {
        "category": ["exact"],
        "is_featured": ["exact"],
    }
    ordering_fields = ["created_at", "price"]
    search_fields = ["name", "description"]

    @action(detail=True, methods=["get"])
    def stock(self, request, pk=None):
        """
        GET /api/v1/products/<id>/stock/
        Stock left after subtracting what is already reserved in carts.
        """
        product = self.get_object()
        reserved = product.reserved_stock()
        data = {
            "product_name": product.name,
            "total_stock": product.stock,
            "reserved_stock": reserved,
            "available_stock": max(0, product.stock - reserved),
        }
        return Response(ProductStockSerializer(data).data)
