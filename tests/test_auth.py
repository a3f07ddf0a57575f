import pytest
from rest_framework_simplejwt.tokens import AccessToken

pytestmark = pytest.mark.django_db

CART_URL = "/api/v1/cart/"


def test_bearer_header_authenticates(api_client, user):
    token = AccessToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    assert api_client.get(CART_URL).status_code == 200


def test_access_token_cookie_authenticates(api_client, user):
    api_client.cookies["access_token"] = str(AccessToken.for_user(user))

    assert api_client.get(CART_URL).status_code == 200


def test_invalid_token_is_rejected(api_client):
    api_client.cookies["access_token"] = "not-a-jwt"

    res = api_client.get(CART_URL)

    assert res.status_code == 401
    assert "error" in res.json()


def test_guest_checkout_with_bad_token_is_rejected(api_client, make_product):
    tee = make_product(stock=5)
    api_client.credentials(HTTP_AUTHORIZATION="Bearer garbage")

    res = api_client.post("/api/v1/order/", {
        "items": [{"product": tee.pk, "quantity": 1}],
        "total_price": "499.00",
    }, format="json")

    assert res.status_code == 401
