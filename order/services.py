"""
Order placement.

    ensure_payment_unused -> validate_stock -> create_order (one transaction)
        -> on_commit: order_placed

Stock is validated before the transaction and decremented unconditionally
inside it, so two checkouts racing for the last unit can both pass
validation. The stock >= 0 check constraint turns the losing decrement into
a rolled-back TransactionFailure. CHECKOUT_STRICT_STOCK = True re-checks
stock inside the transaction with a conditional UPDATE instead.
"""
import logging
from collections import OrderedDict
from decimal import Decimal
from functools import partial

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from rest_framework.exceptions import ValidationError

from cart.models import CartItem
from product.models import Product
from .exceptions import (
    DuplicatePaymentError,
    InsufficientStockError,
    ProductNotFoundError,
    TransactionFailure,
)
from .models import Order, OrderItem
from .signals import publish_order_placed

logger = logging.getLogger(__name__)


def requested_quantities(lines):
    """Sum quantities per product id, keeping first-seen order."""
    totals = OrderedDict()
    for line in lines:
        totals[line["product"]] = totals.get(line["product"], 0) + line["quantity"]
    return totals


def validate_stock(lines):
    """
    Check every requested product exists, is on sale and has enough stock.
    Returns {product_id: Product}. Writes nothing.
    """
    totals = requested_quantities(lines)
    products = Product.objects.in_bulk(list(totals.keys()))

    for product_id, qty in totals.items():
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise ProductNotFoundError(f"Product not found: {product_id}")
        if product.stock < qty:
            logger.warning(
                "Rejected checkout for product %s: available %s, requested %s",
                product_id, product.stock, qty,
            )
            raise InsufficientStockError(product, product.stock, qty)

    return products


def order_total(lines, products):
    return sum(
        (products[line["product"]].price * line["quantity"] for line in lines),
        Decimal("0.00"),
    )


def check_client_total(client_total, server_total):
    if client_total is None:
        return
    if Decimal(str(client_total)).quantize(Decimal("0.01")) != server_total.quantize(Decimal("0.01")):
        raise ValidationError(
            f"Total price mismatch: expected {server_total.quantize(Decimal('0.01'))}, got {client_total}"
        )


def ensure_payment_unused(payment_id):
    """Reject a gateway payment that already paid for a committed order."""
    existing = Order.objects.filter(razorpay_payment_id=payment_id).values_list("pk", flat=True).first()
    if existing is not None:
        logger.warning("Replayed payment %s, already used by order %s", payment_id, existing)
        raise DuplicatePaymentError(payment_id, existing)


def _decrement_stock(product, qty):
    if settings.CHECKOUT_STRICT_STOCK:
        updated = Product.objects.filter(pk=product.pk, stock__gte=qty).update(stock=F("stock") - qty)
        if not updated:
            current = Product.objects.values_list("stock", flat=True).get(pk=product.pk)
            raise InsufficientStockError(product, current, qty)
    else:
        Product.objects.filter(pk=product.pk).update(stock=F("stock") - qty)


def create_order(user, lines, products, payment=None):
    """
    Insert the order and its items, decrement stock and clear the
    purchaser's cart as one unit. Nothing is persisted if any step fails.

    `payment` is an optional dict with razorpay_order_id / razorpay_payment_id
    for orders paid through the gateway.
    """
    order_kwargs = {
        "user": user,
        "total_price": order_total(lines, products),
    }
    if payment:
        order_kwargs.update(
            payment_method="RAZORPAY",
            payment_status="PAID",
            razorpay_order_id=payment["razorpay_order_id"],
            razorpay_payment_id=payment["razorpay_payment_id"],
        )

    try:
        with transaction.atomic():
            order = Order.objects.create(**order_kwargs)
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product=products[line["product"]],
                    size=line.get("size", ""),
                    quantity=line["quantity"],
                    price=products[line["product"]].price,
                )
                for line in lines
            ])

            for product_id, qty in requested_quantities(lines).items():
                _decrement_stock(products[product_id], qty)

            if user is not None:
                CartItem.objects.filter(user=user).delete()

            transaction.on_commit(partial(publish_order_placed, order.pk), robust=True)
    except IntegrityError as exc:
        if payment:
            ensure_payment_unused(payment["razorpay_payment_id"])
        logger.exception("Order transaction rolled back for user %s", getattr(user, "pk", "guest"))
        raise TransactionFailure() from exc
    except DatabaseError as exc:
        logger.exception("Order transaction rolled back for user %s", getattr(user, "pk", "guest"))
        raise TransactionFailure() from exc

    logger.info("Order %s committed for %s, total %s", order.pk, getattr(user, "pk", "guest"), order.total_price)
    return order


def place_order(user, lines, total_price=None, payment=None, gateway=None, signature=None):
    """
    Full checkout: (payment unused) -> STOCK_VALIDATED -> (SIGNATURE_VERIFIED) -> ORDER_COMMITTED.

    When `gateway` is given the payment signature is verified after the stock
    check and before anything is written; `payment` then carries the gateway
    ids. `user` is None for guest orders.
    """
    if payment is not None:
        ensure_payment_unused(payment["razorpay_payment_id"])

    products = validate_stock(lines)
    check_client_total(total_price, order_total(lines, products))

    if gateway is not None:
        gateway.verify(payment["razorpay_order_id"], payment["razorpay_payment_id"], signature)

    return create_order(user, lines, products, payment=payment)
