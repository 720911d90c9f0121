"""
Gateway configuration objects.

Settings are read from the ``OZOW`` / ``PAYFAST`` dicts once, turned into
immutable dataclasses and handed to the request builders and verifiers.
Nothing below this module reads the environment.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Optional

from django.conf import settings

from .exceptions import ConfigurationMissing


@dataclass(frozen=True)
class OzowConfig:
    site_code: str = ""
    private_key: str = ""
    api_key: str = ""
    success_url: str = ""
    cancel_url: str = ""
    error_url: str = ""
    notify_url: str = ""
    is_test: bool = True
    country_code: str = "ZA"
    currency_code: str = "ZAR"
    post_url: str = "https://pay.ozow.com/"
    api_url: str = "https://api.ozow.com"

    provider = "ozow"
    required = ("site_code", "private_key", "success_url", "cancel_url", "error_url", "notify_url")

    @classmethod
    def from_settings(cls, source: Optional[dict] = None) -> "OzowConfig":
        source = getattr(settings, "OZOW", {}) if source is None else source
        return cls(**_pick(cls, source))

    def missing(self) -> list[str]:
        return [name.upper() for name in self.required if not getattr(self, name)]

    def validate(self) -> "OzowConfig":
        missing = self.missing()
        if missing:
            raise ConfigurationMissing(self.provider, missing)
        return self


@dataclass(frozen=True)
class PayFastConfig:
    merchant_id: str = ""
    merchant_key: str = ""
    passphrase: str = ""
    return_url: str = ""
    cancel_url: str = ""
    notify_url: str = ""
    is_sandbox: bool = True
    validate_source_ip: bool = False
    valid_networks: tuple[str, ...] = field(default_factory=tuple)

    provider = "payfast"
    required = ("merchant_id", "merchant_key", "return_url", "cancel_url", "notify_url")

    @classmethod
    def from_settings(cls, source: Optional[dict] = None) -> "PayFastConfig":
        source = getattr(settings, "PAYFAST", {}) if source is None else source
        values = _pick(cls, source)
        if "valid_networks" in values:
            values["valid_networks"] = tuple(values["valid_networks"] or ())
        return cls(**values)

    @property
    def process_url(self) -> str:
        if self.is_sandbox:
            return "https://sandbox.payfast.co.za/eng/process"
        return "https://www.payfast.co.za/eng/process"

    def missing(self) -> list[str]:
        return [name.upper() for name in self.required if not getattr(self, name)]

    def validate(self) -> "PayFastConfig":
        missing = self.missing()
        if missing:
            raise ConfigurationMissing(self.provider, missing)
        return self


def _pick(cls, source: dict) -> dict:
    names = {f.name for f in fields(cls)}
    values = {}
    for key, value in source.items():
        name = key.lower()
        if name in names and value is not None:
            values[name] = value
    return values
