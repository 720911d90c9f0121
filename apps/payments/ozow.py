"""
Ozow instant EFT: outbound post signing and inbound response verification.

Both hashes are the SHA-512 hex digest of a fixed concatenation of field
values followed by the merchant private key, lower-cased before hashing.
The ``Customer`` and ``Optional1..5`` fields of the outbound post are sent
to Ozow but are not part of its hash.
"""
from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from .config import OzowConfig

logger = logging.getLogger(__name__)

BANK_REFERENCE_MAX_LENGTH = 20
_BANK_REFERENCE_INVALID = re.compile(r"[^A-Za-z0-9 \-]")

OPTIONAL_FIELDS = ("Optional1", "Optional2", "Optional3", "Optional4", "Optional5")


def format_amount(amount) -> str:
    """
    Render an amount in rands with exactly two decimals ("529.00").
    """
    return str(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def sanitize_bank_reference(value: str) -> str:
    return _BANK_REFERENCE_INVALID.sub("", value or "")[:BANK_REFERENCE_MAX_LENGTH]


def _sha512(values, private_key: str) -> str:
    preimage = "".join(str(v) for v in values) + private_key
    return hashlib.sha512(preimage.lower().encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class OzowPaymentRequest:
    site_code: str
    country_code: str
    currency_code: str
    amount: str
    transaction_reference: str
    bank_reference: str
    cancel_url: str
    error_url: str
    success_url: str
    notify_url: str
    is_test: str
    customer: str = ""
    optional: dict = field(default_factory=dict)
    hash_check: str = ""

    def hash_fields(self) -> list[str]:
        return [
            self.site_code,
            self.country_code,
            self.currency_code,
            self.amount,
            self.transaction_reference,
            self.bank_reference,
            self.cancel_url,
            self.error_url,
            self.success_url,
            self.notify_url,
            self.is_test,
        ]

    def as_form(self) -> dict[str, str]:
        form = {
            "SiteCode": self.site_code,
            "CountryCode": self.country_code,
            "CurrencyCode": self.currency_code,
            "Amount": self.amount,
            "TransactionReference": self.transaction_reference,
            "BankReference": self.bank_reference,
            "CancelUrl": self.cancel_url,
            "ErrorUrl": self.error_url,
            "SuccessUrl": self.success_url,
            "NotifyUrl": self.notify_url,
            "IsTest": self.is_test,
        }
        if self.customer:
            form["Customer"] = self.customer
        for name in OPTIONAL_FIELDS:
            if self.optional.get(name):
                form[name] = str(self.optional[name])
        form["HashCheck"] = self.hash_check
        return form


@dataclass(frozen=True)
class OzowNotification:
    """
    Fields Ozow posts back on the browser redirect and the server notify.
    """

    site_code: str = ""
    transaction_id: str = ""
    transaction_reference: str = ""
    amount: str = ""
    status: str = ""
    optional: tuple[str, ...] = ("", "", "", "", "")
    currency_code: str = ""
    is_test: str = ""
    status_message: str = ""
    hash: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping) -> "OzowNotification":
        def get(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            site_code=get("SiteCode"),
            transaction_id=get("TransactionId"),
            transaction_reference=get("TransactionReference"),
            amount=get("Amount"),
            status=get("Status"),
            optional=tuple(get(name) for name in OPTIONAL_FIELDS),
            currency_code=get("CurrencyCode"),
            is_test=get("IsTest"),
            status_message=get("StatusMessage"),
            hash=get("Hash"),
        )

    def hash_fields(self) -> list[str]:
        return [
            self.site_code,
            self.transaction_id,
            self.transaction_reference,
            self.amount,
            self.status,
            *self.optional,
            self.currency_code,
            self.is_test,
            self.status_message,
        ]


def compute_post_hash(request: OzowPaymentRequest, private_key: str) -> str:
    return _sha512(request.hash_fields(), private_key)


def compute_response_hash(notification: OzowNotification, private_key: str) -> str:
    return _sha512(notification.hash_fields(), private_key)


def verify_response_hash(notification: OzowNotification, private_key: str) -> bool:
    """
    Ozow may drop leading zeros from the hex digest it sends, so both sides
    are compared with leading zeros stripped. Case is ignored.
    """
    received = (notification.hash or "").strip().lower()
    if not received or not private_key:
        return False
    expected = compute_response_hash(notification, private_key)
    return expected.lstrip("0") == received.lstrip("0")


class OzowRequestBuilder:
    """
    Builds signed Ozow payment posts for pending orders.
    """

    def __init__(self, config: Optional[OzowConfig] = None):
        self.config = (config or OzowConfig.from_settings()).validate()

    @property
    def action_url(self) -> str:
        return self.config.post_url

    def build(
        self,
        *,
        amount,
        transaction_reference: str,
        bank_reference: str,
        customer: str = "",
        optional: Optional[dict] = None,
    ) -> OzowPaymentRequest:
        cfg = self.config
        unsigned = OzowPaymentRequest(
            site_code=cfg.site_code,
            country_code=cfg.country_code,
            currency_code=cfg.currency_code,
            amount=format_amount(amount),
            transaction_reference=transaction_reference,
            bank_reference=sanitize_bank_reference(bank_reference),
            cancel_url=cfg.cancel_url,
            error_url=cfg.error_url,
            success_url=cfg.success_url,
            notify_url=cfg.notify_url,
            is_test="true" if cfg.is_test else "false",
            customer=customer or "",
            optional=dict(optional or {}),
        )
        signed = replace(unsigned, hash_check=compute_post_hash(unsigned, cfg.private_key))
        logger.debug(
            "Built Ozow post ref=%s amount=%s hash=%s...",
            signed.transaction_reference,
            signed.amount,
            signed.hash_check[:12],
        )
        return signed

    def build_for_order(self, order) -> OzowPaymentRequest:
        return self.build(
            amount=order.amount_decimal,
            transaction_reference=order.payment_reference,
            bank_reference=f"POOLBAGS-{str(order.id)[-6:]}",
            customer=order.customer_email,
            optional={"Optional1": str(order.id)},
        )

    def verify(self, data: Mapping) -> tuple[OzowNotification, bool]:
        notification = OzowNotification.from_mapping(data)
        return notification, verify_response_hash(notification, self.config.private_key)
