"""
Checkout failures. Everything except NotificationFailure is an APIException
and is turned into a JSON error body by rotkit.exceptions.api_exception_handler.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound


class ProductNotFoundError(NotFound):
    default_detail = "Product not found"
    default_code = "product_not_found"


class InsufficientStockError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Insufficient stock"
    default_code = "insufficient_stock"

    def __init__(self, product, available, requested):
        self.product_id = product.pk
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product.name}. Available: {available}, Requested: {requested}"
        )


class SignatureMismatchError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Payment verification failed"
    default_code = "signature_mismatch"


class TransactionFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Order could not be created"
    default_code = "transaction_failure"


class PaymentNotConfigured(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Payment service not configured"
    default_code = "payment_not_configured"


class PaymentGatewayError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Failed to create payment order"
    default_code = "payment_gateway_error"


class NotificationFailure(Exception):
    """Raised when the order confirmation could not be delivered. Never reaches the client."""


class DuplicatePaymentError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This payment has already been used for an order"
    default_code = "duplicate_payment"

    def __init__(self, payment_id, order_id=None):
        self.payment_id = payment_id
        self.order_id = order_id
        super().__init__()
