from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Mapping, Optional

FREE_SHIPPING_THRESHOLD_CENTS = 149900
OUT_OF_AREA_SURCHARGE_CENTS = 7000

KZN_PROVINCE_TOKENS = ("kwazulu", "kzn", "natal")
MAJOR_CITY_TOKENS = (
    "johannesburg",
    "jhb",
    "pretoria",
    "pta",
    "cape town",
    "capetown",
    "gqeberha",
    "port elizabeth",
    "durban",
    "dbn",
    "pietermaritzburg",
    "pmb",
    "bloemfontein",
)
MAJOR_PROVINCE_TOKENS = ("gauteng", "western cape", "eastern cape", "free state", "kwazulu")


@dataclass(frozen=True)
class ShippingQuote:
    code: str
    name: str
    price_cents: int
    eta_days: str

    def as_dict(self) -> dict:
        data = asdict(self)
        data["price"] = f"{self.price_cents / 100:.2f}"
        return data


PICKUP = ShippingQuote(code="PICKUP", name="Collect in store", price_cents=0, eta_days="0")


def _bucket(city: str, province: str) -> tuple[str, str, int, str]:
    if any(token in province for token in KZN_PROVINCE_TOKENS):
        return "KZN", "KZN Delivery", 12900, "1–2"
    if any(token in city for token in MAJOR_CITY_TOKENS) and any(
        token in province for token in MAJOR_PROVINCE_TOKENS
    ):
        return "MAJOR", "Major Centre Delivery", 19900, "2–3"
    return "REMOTE", "Remote Area Delivery", 27900, "3–5"


def quote_shipping(
    cart_total_cents: int,
    destination: Mapping[str, Optional[str]],
    out_of_area: bool = False,
) -> ShippingQuote:
    """
    Flat-rate courier quote by destination bucket.

    KZN goes first because the courier is based in Durban. Orders at or over
    the free-shipping threshold ship free regardless of bucket or surcharge.
    """
    city = (destination.get("city") or "").strip().lower()
    province = (destination.get("province") or "").strip().lower()

    code, name, price_cents, eta_days = _bucket(city, province)

    if out_of_area:
        price_cents += OUT_OF_AREA_SURCHARGE_CENTS
        name += " (Out of Area)"

    if cart_total_cents >= FREE_SHIPPING_THRESHOLD_CENTS:
        price_cents = 0
        name += " - FREE"

    return ShippingQuote(code=code, name=name, price_cents=price_cents, eta_days=eta_days)
