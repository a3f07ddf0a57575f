from django.urls import path
from .views import (
    OrderListCreateAPIView,
    order_detail,
    razorpay_create_order,
    razorpay_verify,
)

urlpatterns = [
    path("", OrderListCreateAPIView.as_view(), name="order-list-create"),
    path("<int:order_id>/", order_detail, name="order-detail"),

    # Razorpay checkout
    path("checkout/razorpay/create/", razorpay_create_order, name="razorpay_create_order"),
    path("checkout/razorpay/verify/", razorpay_verify, name="razorpay_verify"),
]
