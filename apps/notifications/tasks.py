import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _load_order(order_id: str):
    from apps.orders.models import PaymentOrder

    try:
        return PaymentOrder.objects.prefetch_related("items").get(id=order_id)
    except PaymentOrder.DoesNotExist:
        logger.warning("Email skipped: order %s no longer exists", order_id)
        return None


def _order_lines(order) -> str:
    lines = [f"  {item.quantity}x {item.title} - R{item.unit_price_cents / 100:.2f}" for item in order.items.all()]
    return "\n".join(lines)


@shared_task
def send_order_confirmation(order_id: str) -> bool:
    """Tell the customer their payment went through."""
    order = _load_order(order_id)
    if order is None or not order.customer_email:
        return False

    body = (
        f"Hi {order.customer_first_name or 'there'},\n\n"
        f"Thanks for your order! Payment for {order.payment_reference} has been received.\n\n"
        f"{_order_lines(order)}\n\n"
        f"Shipping: R{order.shipping_cents / 100:.2f}\n"
        f"Total: R{order.amount_decimal}\n\n"
        "We'll let you know as soon as it ships.\n\n"
        "Pool Beanbags"
    )
    send_mail(
        subject=f"Order confirmed: {order.payment_reference}",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[order.customer_email],
    )
    logger.info("Confirmation email sent for %s", order.payment_reference)
    return True


@shared_task
def send_order_alert(order_id: str) -> bool:
    """Notify the shop inbox about a new or newly paid order."""
    order = _load_order(order_id)
    if order is None:
        return False

    headline = "Order Paid" if order.status == order.STATUS_PAID else "New Order"
    body = (
        f"Status: {order.get_status_display()}\n"
        f"Order Reference: {order.payment_reference}\n"
        f"Provider: {order.get_provider_display()}\n"
        f"Customer: {order.customer_name or 'N/A'}\n"
        f"Email: {order.customer_email or 'N/A'}\n"
        f"Phone: {order.customer_phone or 'N/A'}\n"
        f"Delivery: {order.get_delivery_method_display()}\n"
        f"Total: R{order.amount_decimal}\n\n"
        f"Items:\n{_order_lines(order)}\n"
    )
    send_mail(
        subject=f"{headline}: {order.payment_reference}",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[settings.ORDERS_INBOX],
    )
    return True
