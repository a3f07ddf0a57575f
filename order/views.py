import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import TransactionFailure
from .models import Order
from .payments import get_payment_gateway
from .serializers import CheckoutSerializer, OrderSerializer, PaymentOrderSerializer
from .services import place_order

logger = logging.getLogger(__name__)


class OrderPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


def _orders_for(user):
    qs = Order.objects.select_related("user").prefetch_related("items__product")
    if user.is_staff:
        return qs
    return qs.filter(user=user)


class OrderListCreateAPIView(APIView):
    """
    GET  /api/v1/order/  -> order history (staff see every order)
    POST /api/v1/order/  -> direct checkout, cash on delivery; anonymous
                            requests create a guest order
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request):
        qs = _orders_for(request.user).order_by("-created_at")
        paginator = OrderPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(OrderSerializer(page, many=True).data)

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # owner comes from the session only, never from the payload
        user = request.user if request.user.is_authenticated else None
        order = place_order(
            user,
            serializer.validated_data["items"],
            total_price=serializer.validated_data["total_price"],
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def order_detail(request, order_id):
    order = _orders_for(request.user).filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")
    return Response(OrderSerializer(order).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def razorpay_create_order(request):
    """
    POST /api/v1/order/checkout/razorpay/create/
    Body: { "amount": <rupees>, "currency": "INR", "receipt": "...", "notes": {...} }
    Returns: order_id, amount (in paise), currency, key_id
    """
    serializer = PaymentOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    amount = data.get("amount")
    if not amount or amount <= 0:
        raise ValidationError("Valid amount is required")

    gateway = get_payment_gateway()
    gateway_order = gateway.create_order(
        amount,
        currency=data.get("currency") or None,
        receipt=data.get("receipt") or None,
        notes=data.get("notes"),
    )

    return Response({
        "order_id": gateway_order["id"],
        "amount": gateway_order["amount"],
        "currency": gateway_order["currency"],
        "key_id": gateway.key_id,
    }, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def razorpay_verify(request):
    """
    POST /api/v1/order/checkout/razorpay/verify/
    Body: {
        "razorpay_order_id": "...", "razorpay_payment_id": "...", "razorpay_signature": "...",
        "order_data": { "items": [...], "total_price": "..." }   (optional)
    }
    """
    order_id = request.data.get("razorpay_order_id")
    payment_id = request.data.get("razorpay_payment_id")
    signature = request.data.get("razorpay_signature")

    if not all([order_id, payment_id, signature]):
        raise ValidationError("Missing payment verification data")

    gateway = get_payment_gateway()
    order_data = request.data.get("order_data")

    if not order_data:
        gateway.verify(order_id, payment_id, signature)
        return Response({
            "success": True,
            "message": "Payment verified successfully",
            "payment_id": payment_id,
        }, status=status.HTTP_200_OK)

    checkout = CheckoutSerializer(data=order_data)
    checkout.is_valid(raise_exception=True)

    try:
        order = place_order(
            request.user,
            checkout.validated_data["items"],
            total_price=checkout.validated_data["total_price"],
            payment={"razorpay_order_id": order_id, "razorpay_payment_id": payment_id},
            gateway=gateway,
            signature=signature,
        )
    except TransactionFailure:
        logger.error("Payment %s captured but order creation failed for user %s", payment_id, request.user.pk)
        raise TransactionFailure("Payment successful but order creation failed. Please contact support.")

    return Response({
        "success": True,
        "message": "Payment verified and order created successfully",
        "order_id": order.pk,
        "payment_id": payment_id,
    }, status=status.HTTP_200_OK)
