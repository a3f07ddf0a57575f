from django.urls import path
from .views import WishlistAdminListAPIView, WishlistItemDeleteAPIView, WishlistListCreateAPIView

urlpatterns = [
    path("", WishlistListCreateAPIView.as_view(), name="wishlist-list-create"),
    path("all/", WishlistAdminListAPIView.as_view(), name="wishlist-admin-list"),
    path("<int:pk>/", WishlistItemDeleteAPIView.as_view(), name="wishlist-delete"),
]
