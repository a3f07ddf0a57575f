from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from order.payments import expected_signature
from product.models import Product

RAZORPAY_KEY_ID = "rzp_test_key"
RAZORPAY_KEY_SECRET = "rzp_test_secret"


@pytest.fixture(autouse=True)
def razorpay_settings(settings):
    settings.RAZORPAY_KEY_ID = RAZORPAY_KEY_ID
    settings.RAZORPAY_KEY_SECRET = RAZORPAY_KEY_SECRET
    settings.CHECKOUT_STRICT_STOCK = False


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user("buyer@test.com", name="Buyer", password="pw-12345")


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user("other@test.com", name="Other", password="pw-12345")


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_user("staff@test.com", name="Staff", password="pw-12345", is_staff=True)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def make_product(db):
    def _make(name="Oversized Tee", price="499.00", stock=5, **extra):
        extra.setdefault("category", "TSHIRTS")
        return Product.objects.create(name=name, price=Decimal(price), stock=stock, **extra)
    return _make


@pytest.fixture
def sign():
    def _sign(order_id, payment_id, secret=RAZORPAY_KEY_SECRET):
        return expected_signature(order_id, payment_id, secret)
    return _sign
