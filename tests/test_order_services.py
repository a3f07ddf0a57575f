from decimal import Decimal

import pytest
from django.db import DatabaseError
from rest_framework.exceptions import ValidationError

from cart.models import CartItem
from order.exceptions import (
    DuplicatePaymentError,
    InsufficientStockError,
    ProductNotFoundError,
    SignatureMismatchError,
    TransactionFailure,
)
from order.models import Order, OrderItem
from order.payments import RazorpayGateway
from order.services import create_order, place_order, requested_quantities, validate_stock
from product.models import Product

pytestmark = pytest.mark.django_db

SECRET = "rzp_test_secret"


def line(product, quantity, size=""):
    return {"product": product.pk, "quantity": quantity, "size": size}


def test_requested_quantities_sums_repeated_products():
    lines = [{"product": 1, "quantity": 2}, {"product": 2, "quantity": 1}, {"product": 1, "quantity": 3}]
    assert dict(requested_quantities(lines)) == {1: 5, 2: 1}


def test_validate_stock_returns_products(make_product):
    tee = make_product(stock=3)
    products = validate_stock([line(tee, 3)])
    assert products[tee.pk] == tee


def test_validate_stock_rejects_unknown_product():
    with pytest.raises(ProductNotFoundError) as excinfo:
        validate_stock([{"product": 9999, "quantity": 1, "size": ""}])
    assert "9999" in str(excinfo.value.detail)


def test_validate_stock_rejects_inactive_product(make_product):
    hidden = make_product(is_active=False)
    with pytest.raises(ProductNotFoundError):
        validate_stock([line(hidden, 1)])


def test_validate_stock_names_the_offending_product(make_product):
    tee = make_product(name="Boxy Tee", stock=2)
    with pytest.raises(InsufficientStockError) as excinfo:
        validate_stock([line(tee, 3)])
    assert str(excinfo.value.detail) == "Insufficient stock for Boxy Tee. Available: 2, Requested: 3"
    assert excinfo.value.status_code == 400


def test_validate_stock_counts_split_lines_together(make_product):
    tee = make_product(stock=3)
    with pytest.raises(InsufficientStockError):
        validate_stock([line(tee, 2, "M"), line(tee, 2, "L")])


def test_insufficient_stock_creates_nothing(user, make_product):
    tee = make_product(stock=5)
    hoodie = make_product(name="Hoodie", price="1299.00", stock=1)
    CartItem.objects.create(user=user, product=tee, quantity=1)

    with pytest.raises(InsufficientStockError):
        place_order(user, [line(tee, 2), line(hoodie, 2)], total_price=Decimal("3596.00"))

    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    tee.refresh_from_db()
    hoodie.refresh_from_db()
    assert (tee.stock, hoodie.stock) == (5, 1)
    assert CartItem.objects.filter(user=user).count() == 1


def test_successful_order_decrements_stock_and_clears_cart(user, other_user, make_product):
    tee = make_product(price="499.00", stock=5)
    hoodie = make_product(name="Hoodie", price="1299.00", stock=4)
    CartItem.objects.create(user=user, product=tee, quantity=2, size="M")
    CartItem.objects.create(user=user, product=hoodie, quantity=1)
    CartItem.objects.create(user=other_user, product=tee, quantity=1)

    lines = [line(tee, 1, "M"), line(tee, 1, "L"), line(hoodie, 1)]
    order = place_order(user, lines, total_price=Decimal("2297.00"))

    assert order.user == user
    assert order.total_price == Decimal("2297.00")
    assert order.payment_method == "COD"
    assert order.payment_status == "PENDING"
    assert order.items.count() == 3

    for product, before in ((tee, 5), (hoodie, 4)):
        product.refresh_from_db()
        ordered = sum(item.quantity for item in order.items.filter(product=product))
        assert before - product.stock == ordered

    assert not CartItem.objects.filter(user=user).exists()
    assert CartItem.objects.filter(user=other_user).count() == 1


def test_order_items_snapshot_unit_price(user, make_product):
    tee = make_product(price="499.00", stock=5)
    order = place_order(user, [line(tee, 2)], total_price=Decimal("998.00"))

    Product.objects.filter(pk=tee.pk).update(price=Decimal("799.00"))

    item = order.items.get()
    item.refresh_from_db()
    assert item.price == Decimal("499.00")
    assert item.line_total == Decimal("998.00")


def test_guest_order_leaves_carts_alone(user, make_product):
    tee = make_product(stock=5)
    CartItem.objects.create(user=user, product=tee, quantity=1)

    order = place_order(None, [line(tee, 1)], total_price=Decimal("499.00"))

    assert order.is_guest
    assert CartItem.objects.filter(user=user).count() == 1


def test_total_price_must_match_server_total(user, make_product):
    tee = make_product(price="499.00", stock=5)
    with pytest.raises(ValidationError):
        place_order(user, [line(tee, 1)], total_price=Decimal("1.00"))
    assert Order.objects.count() == 0


def test_forged_signature_mutates_nothing(user, make_product):
    tee = make_product(stock=5)
    CartItem.objects.create(user=user, product=tee, quantity=2)
    gateway = RazorpayGateway("key", SECRET)

    with pytest.raises(SignatureMismatchError):
        place_order(
            user,
            [line(tee, 2)],
            total_price=Decimal("998.00"),
            payment={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1"},
            gateway=gateway,
            signature="0" * 64,
        )

    tee.refresh_from_db()
    assert tee.stock == 5
    assert Order.objects.count() == 0
    assert CartItem.objects.filter(user=user).count() == 1


def test_paid_order_records_gateway_ids(user, make_product, sign):
    tee = make_product(stock=5)
    gateway = RazorpayGateway("key", SECRET)

    order = place_order(
        user,
        [line(tee, 2)],
        total_price=Decimal("998.00"),
        payment={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1"},
        gateway=gateway,
        signature=sign("order_1", "pay_1", SECRET),
    )

    assert order.payment_status == "PAID"
    assert order.payment_method == "RAZORPAY"
    assert order.razorpay_order_id == "order_1"
    assert order.razorpay_payment_id == "pay_1"


def test_failure_inside_transaction_rolls_everything_back(user, make_product, monkeypatch):
    tee = make_product(stock=5)
    CartItem.objects.create(user=user, product=tee, quantity=1)
    products = validate_stock([line(tee, 2)])

    def explode(*args, **kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr("order.services.CartItem.objects.filter", explode)

    with pytest.raises(TransactionFailure):
        create_order(user, [line(tee, 2)], products)

    monkeypatch.undo()
    tee.refresh_from_db()
    assert tee.stock == 5
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    assert CartItem.objects.filter(user=user).count() == 1


def test_unguarded_decrement_below_zero_is_rolled_back(user, make_product):
    # stock dropped after validation, as a concurrent checkout would do
    tee = make_product(stock=2)
    products = validate_stock([line(tee, 2)])
    Product.objects.filter(pk=tee.pk).update(stock=1)

    with pytest.raises(TransactionFailure):
        create_order(user, [line(tee, 2)], products)

    tee.refresh_from_db()
    assert tee.stock == 1
    assert Order.objects.count() == 0


def test_strict_mode_rechecks_stock_inside_transaction(user, make_product, settings):
    settings.CHECKOUT_STRICT_STOCK = True
    tee = make_product(name="Boxy Tee", stock=2)
    products = validate_stock([line(tee, 2)])
    Product.objects.filter(pk=tee.pk).update(stock=1)

    with pytest.raises(InsufficientStockError) as excinfo:
        create_order(user, [line(tee, 2)], products)

    assert "Available: 1, Requested: 2" in str(excinfo.value.detail)
    tee.refresh_from_db()
    assert tee.stock == 1
    assert Order.objects.count() == 0


def test_payment_cannot_pay_for_a_second_order(user, make_product, sign):
    tee = make_product(stock=5)
    gateway = RazorpayGateway("key", SECRET)
    payment = {"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1"}
    signature = sign("order_1", "pay_1", SECRET)

    first = place_order(user, [line(tee, 2)], total_price=Decimal("998.00"),
                        payment=payment, gateway=gateway, signature=signature)

    with pytest.raises(DuplicatePaymentError) as excinfo:
        place_order(user, [line(tee, 2)], total_price=Decimal("998.00"),
                    payment=payment, gateway=gateway, signature=signature)

    assert excinfo.value.status_code == 409
    assert excinfo.value.order_id == first.pk
    tee.refresh_from_db()
    assert tee.stock == 3
    assert Order.objects.count() == 1


def test_racing_payment_reuse_is_rejected_by_the_database(user, make_product):
    # the other request committed between our pre-check and our insert
    tee = make_product(stock=5)
    products = validate_stock([line(tee, 1)])
    Order.objects.create(user=user, total_price=Decimal("499.00"), razorpay_payment_id="pay_1")
    CartItem.objects.create(user=user, product=tee, quantity=1)

    with pytest.raises(DuplicatePaymentError):
        create_order(user, [line(tee, 1)], products,
                     payment={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1"})

    tee.refresh_from_db()
    assert tee.stock == 5
    assert Order.objects.count() == 1
    assert CartItem.objects.filter(user=user).count() == 1


def test_orders_without_a_payment_id_do_not_collide(user, make_product):
    tee = make_product(stock=5)

    place_order(user, [line(tee, 1)], total_price=Decimal("499.00"))
    place_order(None, [line(tee, 1)], total_price=Decimal("499.00"))

    assert Order.objects.filter(razorpay_payment_id="").count() == 2


@pytest.mark.django_db(transaction=True)
def test_failing_order_placed_hook_does_not_fail_committed_order(user, make_product, monkeypatch):
    tee = make_product(stock=5)

    def broken_publish(order_id):
        raise DatabaseError("replica unavailable")

    monkeypatch.setattr("order.services.publish_order_placed", broken_publish)

    order = place_order(user, [line(tee, 1)], total_price=Decimal("499.00"))

    assert Order.objects.filter(pk=order.pk).exists()
    tee.refresh_from_db()
    assert tee.stock == 4
