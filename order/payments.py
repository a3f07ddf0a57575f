import hashlib
import hmac
import logging
import time
from decimal import Decimal, ROUND_HALF_UP

import razorpay
from django.conf import settings

from .exceptions import PaymentGatewayError, PaymentNotConfigured, SignatureMismatchError

logger = logging.getLogger(__name__)


def expected_signature(order_id, payment_id, secret):
    """
    Sign "<order_id>|<payment_id>" the way Razorpay signs a checkout. Used to
    build callbacks for local testing; verification goes through the SDK.
    """
    message = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def to_paise(amount):
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RazorpayGateway:
    """
    Thin wrapper over the Razorpay SDK client. Built per request through
    get_payment_gateway(); pass `client` to substitute the SDK in tests.
    """

    def __init__(self, key_id, key_secret, client=None):
        if not key_id or not key_secret:
            raise PaymentNotConfigured()
        self.key_id = key_id
        self.key_secret = key_secret
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    @classmethod
    def from_settings(cls):
        return cls(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)

    def create_order(self, amount, currency=None, receipt=None, notes=None):
        """
        Create a gateway order for `amount` rupees. Returns the gateway's
        order dict (id, amount in paise, currency, ...).
        """
        payload = {
            "amount": to_paise(amount),
            "currency": currency or settings.PAYMENT_CURRENCY,
            "receipt": receipt or f"order_{int(time.time() * 1000)}",
            "notes": notes or {},
        }
        try:
            gateway_order = self.client.order.create(data=payload)
        except (razorpay.errors.BadRequestError, razorpay.errors.ServerError, razorpay.errors.GatewayError) as exc:
            logger.error("Razorpay order creation failed: %s", exc)
            raise PaymentGatewayError() from exc

        logger.info("Razorpay order %s created for %s %s", gateway_order.get("id"), payload["amount"], payload["currency"])
        return gateway_order

    def verify(self, order_id, payment_id, signature):
        """
        Raise SignatureMismatchError unless `signature` is the one the gateway
        issued for this order/payment pair under our key secret.
        """
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except razorpay.errors.SignatureVerificationError as exc:
            logger.warning("Payment signature mismatch for gateway order %s payment %s", order_id, payment_id)
            raise SignatureMismatchError() from exc


def get_payment_gateway():
    return RazorpayGateway.from_settings()
