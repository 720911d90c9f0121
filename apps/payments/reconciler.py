"""
Apply verified gateway notifications to payment orders.

Gateways retry notifications, send the browser redirect and the server
notify for the same payment, and may send several statuses for a single
transaction (PayFast sends PENDING before COMPLETE). ``reconcile`` makes
all of that safe: the order row is locked, a pending order moves to a
terminal status at most once, and the paid side effects run only for the
call that performed that transition.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping, Optional

from django.db import transaction
from django.utils import timezone

from apps.orders.models import PaymentOrder
from apps.orders.services import fulfil_paid_order

from .config import OzowConfig, PayFastConfig
from .exceptions import AmountMismatch, DuplicateNotification, InvalidSignature, OrderNotFound
from .models import PaymentLog
from .ozow import OzowNotification, verify_response_hash
from .payfast import PayFastNotification, verify_signature

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE_CENTS = 1

STATUS_MAP = {
    "complete": PaymentOrder.STATUS_PAID,
    "cancelled": PaymentOrder.STATUS_CANCELLED,
    "abandoned": PaymentOrder.STATUS_CANCELLED,
    "failed": PaymentOrder.STATUS_ERROR,
    "error": PaymentOrder.STATUS_ERROR,
}


class Outcome(str, Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    RECORDED = "recorded"
    INVALID_SIGNATURE = "invalid_signature"
    NOT_FOUND = "not_found"
    AMOUNT_MISMATCH = "amount_mismatch"


@dataclass(frozen=True)
class GatewayNotification:
    provider: str
    reference: str
    transaction_id: str
    raw_status: str
    amount: str
    payload: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ReconcileResult:
    outcome: Outcome
    order: Optional[PaymentOrder] = None
    status: Optional[str] = None
    notification: Optional[GatewayNotification] = None


def map_gateway_status(raw_status: Optional[str]) -> Optional[str]:
    """
    Gateway status → order status, or None when the status is informational.
    """
    return STATUS_MAP.get((raw_status or "").strip().lower())


def amount_to_cents(amount) -> Optional[int]:
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return int((value * 100).quantize(Decimal("1")))


def _audit(notification: GatewayNotification, kind: str) -> PaymentLog:
    return PaymentLog.objects.create(
        provider=notification.provider,
        reference=notification.reference[:100],
        transaction_id=notification.transaction_id[:100],
        raw_status=notification.raw_status[:50],
        kind=kind,
        raw_payload={key: "" if value is None else str(value) for key, value in notification.payload.items()},
    )


def reconcile(notification: GatewayNotification, *, signature_valid: bool, kind: str) -> ReconcileResult:
    log = _audit(notification, kind)
    ref = notification.reference
    try:
        result = _reconcile(notification, signature_valid)
    except InvalidSignature as exc:
        logger.error("Rejected %s (status=%s)", exc, notification.raw_status)
        result = ReconcileResult(Outcome.INVALID_SIGNATURE, notification=notification)
    except OrderNotFound as exc:
        logger.warning("%s", exc)
        result = ReconcileResult(Outcome.NOT_FOUND, notification=notification)
    except DuplicateNotification as exc:
        logger.info("Duplicate %s notification: %s", notification.provider, exc)
        result = ReconcileResult(Outcome.DUPLICATE, order=exc.order, status=exc.order.status, notification=notification)
    except AmountMismatch as exc:
        logger.error("Amount mismatch on %s: %s", ref, exc)
        order = _flag_for_review(exc.order, str(exc))
        result = ReconcileResult(Outcome.AMOUNT_MISMATCH, order=order, status=order.status, notification=notification)
    PaymentLog.objects.filter(pk=log.pk).update(outcome=result.outcome.value)
    return result


def _flag_for_review(order: PaymentOrder, reason: str) -> PaymentOrder:
    PaymentOrder.objects.filter(pk=order.pk).update(
        needs_review=True,
        review_reason=reason[:255],
        updated_at=timezone.now(),
    )
    order.refresh_from_db()
    return order


def _reconcile(notification: GatewayNotification, signature_valid: bool) -> ReconcileResult:
    ref = notification.reference

    if not signature_valid:
        raise InvalidSignature(notification.provider, ref)

    with transaction.atomic():
        order = (
            PaymentOrder.objects.select_for_update()
            .filter(payment_reference=ref, provider=notification.provider)
            .first()
        )
        if order is None:
            raise OrderNotFound(notification.provider, ref)

        already_seen = (
            order.gateway_transaction_id == notification.transaction_id
            and order.gateway_raw_status == notification.raw_status
        )
        if order.is_terminal or already_seen:
            raise DuplicateNotification(order, notification.raw_status)

        received_cents = amount_to_cents(notification.amount)
        if received_cents is None or abs(received_cents - order.amount_total) > AMOUNT_TOLERANCE_CENTS:
            raise AmountMismatch(order, notification.amount)

        now = timezone.now()
        new_status = map_gateway_status(notification.raw_status)
        if new_status is None:
            PaymentOrder.objects.filter(pk=order.pk, status=PaymentOrder.STATUS_PENDING).update(
                gateway_transaction_id=notification.transaction_id,
                gateway_raw_status=notification.raw_status,
                updated_at=now,
            )
            order.refresh_from_db()
            logger.info("Recorded %s status %s for %s", notification.provider, notification.raw_status, ref)
            return ReconcileResult(Outcome.RECORDED, order=order, status=order.status, notification=notification)

        updated = PaymentOrder.objects.filter(pk=order.pk, status=PaymentOrder.STATUS_PENDING).update(
            status=new_status,
            gateway_transaction_id=notification.transaction_id,
            gateway_raw_status=notification.raw_status,
            paid_at=now if new_status == PaymentOrder.STATUS_PAID else None,
            updated_at=now,
        )
        order.refresh_from_db()
        if not updated:
            raise DuplicateNotification(order, notification.raw_status)

        if new_status == PaymentOrder.STATUS_PAID:
            fulfil_paid_order(order)

    logger.info("Order %s -> %s via %s (%s)", ref, new_status, notification.provider, notification.raw_status)
    return ReconcileResult(Outcome.APPLIED, order=order, status=new_status, notification=notification)


def process_ozow_notification(
    data: Mapping,
    config: Optional[OzowConfig] = None,
    kind: str = "notify",
) -> ReconcileResult:
    config = config or OzowConfig.from_settings()
    parsed = OzowNotification.from_mapping(data)
    notification = GatewayNotification(
        provider=PaymentOrder.PROVIDER_OZOW,
        reference=parsed.transaction_reference,
        transaction_id=parsed.transaction_id,
        raw_status=parsed.status,
        amount=parsed.amount,
        payload=dict(_flatten(data)),
    )
    logger.info("Ozow %s received for %s: %s", kind, parsed.transaction_reference, parsed.status)
    return reconcile(
        notification,
        signature_valid=verify_response_hash(parsed, config.private_key),
        kind=kind,
    )


def process_payfast_notification(data: Mapping, config: Optional[PayFastConfig] = None) -> ReconcileResult:
    config = config or PayFastConfig.from_settings()
    parsed = PayFastNotification.from_mapping(data)
    notification = GatewayNotification(
        provider=PaymentOrder.PROVIDER_PAYFAST,
        reference=parsed.m_payment_id,
        transaction_id=parsed.pf_payment_id,
        raw_status=parsed.payment_status,
        amount=parsed.amount_gross,
        payload=parsed.data,
    )
    logger.info("PayFast ITN received for %s: %s", parsed.m_payment_id, parsed.payment_status)
    return reconcile(
        notification,
        signature_valid=verify_signature(parsed.data, config.passphrase),
        kind="itn",
    )


def _flatten(data: Mapping):
    for key, value in data.items():
        if isinstance(value, (list, tuple)):
            value = value[-1] if value else ""
        yield key, value
