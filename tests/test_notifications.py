from decimal import Decimal

import pytest
from django.core.mail import get_connection

from order.exceptions import NotificationFailure
from order.notifications import send_order_confirmation
from order.services import place_order
from order.signals import order_placed

pytestmark = pytest.mark.django_db


def line(product, quantity, size=""):
    return {"product": product.pk, "quantity": quantity, "size": size}


def test_confirmation_is_sent_after_commit(user, make_product, mailoutbox, django_capture_on_commit_callbacks):
    tee = make_product(name="Boxy Tee", price="499.00", stock=5, image_urls=["https://cdn.test/tee.png"])

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        order = place_order(user, [line(tee, 2, "M")], total_price=Decimal("998.00"))

    assert len(callbacks) == 1
    assert len(mailoutbox) == 1
    mail = mailoutbox[0]
    assert mail.to == ["buyer@test.com"]
    assert f"#{order.pk}" in mail.subject
    assert "Boxy Tee" in mail.body
    assert "Size: M" in mail.body
    assert "998.00" in mail.body
    html, mimetype = mail.alternatives[0]
    assert mimetype == "text/html"
    assert "https://cdn.test/tee.png" in html


def test_nothing_is_sent_before_commit(user, make_product, mailoutbox, django_capture_on_commit_callbacks):
    tee = make_product(stock=5)

    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        place_order(user, [line(tee, 1)], total_price=Decimal("499.00"))

    assert len(callbacks) == 1
    assert mailoutbox == []


def test_guest_orders_are_not_emailed(make_product, mailoutbox, django_capture_on_commit_callbacks):
    tee = make_product(stock=5)

    with django_capture_on_commit_callbacks(execute=True):
        place_order(None, [line(tee, 1)], total_price=Decimal("499.00"))

    assert mailoutbox == []


def test_failed_email_does_not_undo_the_order(user, make_product, monkeypatch, django_capture_on_commit_callbacks):
    tee = make_product(stock=5)

    def broken_send_mail(*args, **kwargs):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr("order.notifications.send_mail", broken_send_mail)

    with django_capture_on_commit_callbacks(execute=True):
        order = place_order(user, [line(tee, 2)], total_price=Decimal("998.00"))

    order.refresh_from_db()
    tee.refresh_from_db()
    assert order.items.count() == 1
    assert tee.stock == 3


def test_send_order_confirmation_wraps_transport_errors(user, make_product, monkeypatch):
    tee = make_product(stock=5)
    order = place_order(user, [line(tee, 1)], total_price=Decimal("499.00"))

    def broken_send_mail(*args, **kwargs):
        raise OSError("network unreachable")

    monkeypatch.setattr("order.notifications.send_mail", broken_send_mail)

    with pytest.raises(NotificationFailure):
        send_order_confirmation(order)


def test_order_placed_reaches_other_receivers(user, make_product, django_capture_on_commit_callbacks):
    tee = make_product(stock=5)
    seen = []

    def listener(sender, order, **kwargs):
        seen.append(order.pk)

    order_placed.connect(listener)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            order = place_order(user, [line(tee, 1)], total_price=Decimal("499.00"))
    finally:
        order_placed.disconnect(listener)

    assert seen == [order.pk]


def test_smtp_connections_are_time_bounded(settings):
    settings.EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
    settings.EMAIL_TIMEOUT = 7

    assert get_connection().timeout == 7
