from django.urls import path
from .views import CartListCreateAPIView, CartItemDetailAPIView, CartCleanupAPIView

urlpatterns = [
    path("", CartListCreateAPIView.as_view(), name="cart-list-create"),
    path("cleanup/", CartCleanupAPIView.as_view(), name="cart-cleanup"),
    path("<int:pk>/", CartItemDetailAPIView.as_view(), name="cart-item-detail"),
]
