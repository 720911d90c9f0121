"""
PayFast hosted checkout: request signing and ITN verification.

The signature is the MD5 hex digest of ``key=value`` pairs joined with
``&``. Keys are sorted, ``signature`` and unset fields are skipped, values
are encoded with ``quote_plus`` (spaces as ``+``, ``~`` left as is, ``'()*!``
percent-encoded) and the passphrase, when configured, is appended last as
``passphrase=...``.
"""
from __future__ import annotations

import hashlib
import ipaddress
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional
from urllib.parse import quote_plus

from .config import PayFastConfig
from .ozow import format_amount

logger = logging.getLogger(__name__)

ITN_REQUIRED_FIELDS = ("signature", "m_payment_id", "payment_status", "amount_gross")


def canonical_string(fields: Mapping, passphrase: str = "") -> str:
    pairs = [
        f"{key}={quote_plus(str(fields[key]))}"
        for key in sorted(fields)
        if key != "signature" and fields[key] is not None
    ]
    if passphrase:
        pairs.append(f"passphrase={quote_plus(passphrase)}")
    return "&".join(pairs)


def compute_signature(fields: Mapping, passphrase: str = "") -> str:
    return hashlib.md5(canonical_string(fields, passphrase).encode("utf-8")).hexdigest()


def verify_signature(fields: Mapping, passphrase: str = "") -> bool:
    received = fields.get("signature")
    if not received:
        return False
    return compute_signature(fields, passphrase) == str(received)


def is_valid_source_ip(address: Optional[str], networks: Iterable[str]) -> bool:
    if not address:
        return False
    try:
        ip = ipaddress.ip_address(address.strip())
    except ValueError:
        return False
    return any(ip in ipaddress.ip_network(network, strict=False) for network in networks)


@dataclass(frozen=True)
class PayFastPaymentRequest:
    merchant_id: str
    merchant_key: str
    return_url: str
    cancel_url: str
    notify_url: str
    m_payment_id: str
    amount: str
    item_name: str
    name_first: str = ""
    name_last: str = ""
    email_address: str = ""
    cell_number: str = ""
    item_description: str = ""
    custom_str1: str = ""
    email_confirmation: str = ""
    confirmation_address: str = ""
    signature: str = ""

    def fields(self) -> dict[str, str]:
        """
        Non-empty fields in PayFast's documented order, without the signature.
        """
        values = {
            "merchant_id": self.merchant_id,
            "merchant_key": self.merchant_key,
            "return_url": self.return_url,
            "cancel_url": self.cancel_url,
            "notify_url": self.notify_url,
            "name_first": self.name_first,
            "name_last": self.name_last,
            "email_address": self.email_address,
            "cell_number": self.cell_number,
            "m_payment_id": self.m_payment_id,
            "amount": self.amount,
            "item_name": self.item_name,
            "item_description": self.item_description,
            "custom_str1": self.custom_str1,
            "email_confirmation": self.email_confirmation,
            "confirmation_address": self.confirmation_address,
        }
        return {key: value for key, value in values.items() if value not in ("", None)}

    def as_form(self) -> dict[str, str]:
        form = self.fields()
        form["signature"] = self.signature
        return form


@dataclass(frozen=True)
class PayFastNotification:
    m_payment_id: str
    pf_payment_id: str
    payment_status: str
    amount_gross: str
    signature: str
    data: dict = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping) -> "PayFastNotification":
        flat = {key: _single(value) for key, value in data.items()}
        return cls(
            m_payment_id=flat.get("m_payment_id", "") or "",
            pf_payment_id=flat.get("pf_payment_id", "") or "",
            payment_status=flat.get("payment_status", "") or "",
            amount_gross=flat.get("amount_gross", "") or "",
            signature=flat.get("signature", "") or "",
            data=flat,
        )

    def missing_fields(self) -> list[str]:
        return [name for name in ITN_REQUIRED_FIELDS if not self.data.get(name)]


def _single(value):
    if isinstance(value, (list, tuple)):
        return value[-1] if value else ""
    return value


class PayFastRequestBuilder:
    def __init__(self, config: Optional[PayFastConfig] = None):
        self.config = (config or PayFastConfig.from_settings()).validate()

    @property
    def process_url(self) -> str:
        return self.config.process_url

    def build(
        self,
        *,
        amount,
        m_payment_id: str,
        item_name: str,
        item_description: str = "",
        name_first: str = "",
        name_last: str = "",
        email_address: str = "",
        cell_number: str = "",
        custom_str1: str = "",
    ) -> PayFastPaymentRequest:
        cfg = self.config
        request = PayFastPaymentRequest(
            merchant_id=cfg.merchant_id,
            merchant_key=cfg.merchant_key,
            return_url=cfg.return_url,
            cancel_url=cfg.cancel_url,
            notify_url=cfg.notify_url,
            m_payment_id=m_payment_id,
            amount=format_amount(amount),
            item_name=item_name[:100],
            item_description=item_description[:255],
            name_first=name_first,
            name_last=name_last,
            email_address=email_address,
            cell_number=cell_number,
            custom_str1=custom_str1,
            email_confirmation="1" if email_address else "",
            confirmation_address=email_address,
        )
        signature = compute_signature(request.fields(), cfg.passphrase)
        return replace(request, signature=signature)

    def build_for_order(self, order, item_description: str = "") -> PayFastPaymentRequest:
        return self.build(
            amount=order.amount_decimal,
            m_payment_id=order.payment_reference,
            item_name="Pool Beanbags Order",
            item_description=item_description,
            name_first=order.customer_first_name,
            name_last=order.customer_last_name,
            email_address=order.customer_email,
            custom_str1=str(order.id),
        )

    def redirect_url(self, request: PayFastPaymentRequest) -> str:
        """
        GET variant of the hosted checkout, for clients that cannot post a form.
        """
        query = "&".join(f"{key}={quote_plus(value)}" for key, value in request.as_form().items())
        return f"{self.process_url}?{query}"

    def verify(self, data: Mapping) -> tuple[PayFastNotification, bool]:
        notification = PayFastNotification.from_mapping(data)
        return notification, verify_signature(notification.data, self.config.passphrase)
