from __future__ import annotations

import logging
import uuid
from typing import Iterable, Mapping, Optional

from django.db import transaction
from django.db.models import F

from apps.notifications.tasks import send_order_alert, send_order_confirmation
from apps.products.models import Product
from apps.shipping.services import PICKUP, quote_shipping

from .exceptions import ProductUnavailable, TotalMismatch
from .models import OrderItem, PaymentOrder

logger = logging.getLogger(__name__)


def generate_payment_reference(prefix: str = "ORD") -> str:
    """
    Simple unique-ish payment reference generator.
    """
    return f"{prefix}-{uuid.uuid4().hex[:10].upper()}"


def _find_product(identifier: str) -> Product:
    qs = Product.objects.filter(status="published")
    try:
        product = qs.filter(id=uuid.UUID(str(identifier))).first()
    except ValueError:
        product = qs.filter(slug=identifier).first()
    if product is None:
        raise ProductUnavailable(str(identifier))
    return product


def resolve_lines(items: Iterable[Mapping]) -> list[tuple[Product, int]]:
    lines: list[tuple[Product, int]] = []
    for item in items:
        lines.append((_find_product(item["product"]), int(item["quantity"])))
    return lines


def create_payment_order(
    *,
    provider: str,
    items: Iterable[Mapping],
    delivery: Mapping,
    customer: Mapping,
    expected_total_cents: Optional[int] = None,
) -> PaymentOrder:
    """
    Create a pending PaymentOrder from a checkout request.

    Unit prices come from the catalog and the shipping fee from the rate
    table; nothing monetary is taken from the client. When the client sends
    the total it displayed, it must match the server total exactly.
    """
    lines = resolve_lines(items)
    subtotal = sum(product.base_price_cents * quantity for product, quantity in lines)

    is_pickup = delivery.get("type") == "pickup"
    if is_pickup:
        quote = PICKUP
    else:
        quote = quote_shipping(subtotal, delivery, out_of_area=bool(delivery.get("out_of_area")))
    total = subtotal + quote.price_cents

    if expected_total_cents is not None and int(expected_total_cents) != total:
        logger.warning(
            "Checkout total mismatch: client=%s server=%s (subtotal=%s shipping=%s)",
            expected_total_cents,
            total,
            subtotal,
            quote.price_cents,
        )
        raise TotalMismatch(int(expected_total_cents), total)

    shipping_address = {}
    if not is_pickup:
        shipping_address = {
            key: delivery.get(key, "")
            for key in ("phone", "address1", "address2", "city", "province", "postal_code")
        }
        shipping_address["out_of_area"] = bool(delivery.get("out_of_area"))
        shipping_address["shipping_code"] = quote.code

    with transaction.atomic():
        order = PaymentOrder.objects.create(
            payment_reference=generate_payment_reference(),
            provider=provider,
            status=PaymentOrder.STATUS_PENDING,
            subtotal_cents=subtotal,
            shipping_cents=quote.price_cents,
            amount_total=total,
            delivery_method="pickup" if is_pickup else "delivery",
            shipping_address=shipping_address,
            customer_first_name=customer.get("first_name", ""),
            customer_last_name=customer.get("last_name", ""),
            customer_email=customer.get("email", ""),
            customer_phone=customer.get("phone", "") or delivery.get("phone", ""),
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=product,
                    title=product.title,
                    unit_price_cents=product.base_price_cents,
                    quantity=quantity,
                    position=position,
                )
                for position, (product, quantity) in enumerate(lines)
            ]
        )
        transaction.on_commit(lambda: send_order_alert.delay(str(order.id)))

    logger.info(
        "Created %s order %s total=R%s items=%s",
        provider,
        order.payment_reference,
        order.amount_decimal,
        len(lines),
    )
    return order


def fulfil_paid_order(order: PaymentOrder) -> None:
    """
    Side effects of an order reaching ``paid``.

    Must be called inside the transaction that performed the status
    transition, and only when that transition actually happened.
    """
    for item in order.items.filter(product__isnull=False):
        Product.objects.filter(pk=item.product_id).update(stock_quantity=F("stock_quantity") - item.quantity)

    order_id = str(order.id)
    transaction.on_commit(lambda: send_order_confirmation.delay(order_id))
    transaction.on_commit(lambda: send_order_alert.delay(order_id))
    logger.info("Order %s paid; stock decremented and confirmation queued", order.payment_reference)


def describe_items(order: PaymentOrder) -> str:
    return ", ".join(f"{item.quantity}x {item.title}" for item in order.items.all())
