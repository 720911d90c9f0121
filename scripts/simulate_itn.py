from __future__ import annotations

import os
import time

import requests

from apps.payments.payfast import canonical_string, compute_signature

DEFAULT_ITN_URL = "http://localhost:8000/api/payments/payfast/itn/"


def _print(title: str, data) -> None:
    print(f"\n=== {title} ===")
    print(data)


def run(m_payment_id: str, amount_gross: str, payment_status: str = "COMPLETE", url: str | None = None) -> int:
    """
    Post a correctly signed PayFast ITN to a running server.

    Run with:
      python manage.py shell -c "from scripts.simulate_itn import run; run('ORD-XXXXXXXXXX', '529.00')"

    ``ITN_URL`` and ``PAYFAST_PASSPHRASE`` are read from the environment.
    """
    url = url or os.getenv("ITN_URL", DEFAULT_ITN_URL)
    passphrase = os.getenv("PAYFAST_PASSPHRASE", "")

    payload = {
        "m_payment_id": m_payment_id,
        "pf_payment_id": f"PF-{int(time.time())}",
        "payment_status": payment_status,
        "amount_gross": str(amount_gross),
    }
    payload["signature"] = compute_signature(payload, passphrase)

    _print("Posting ITN", url)
    _print("Signed string", canonical_string(payload))
    resp = requests.post(url, data=payload, timeout=15)
    _print("Response", f"{resp.status_code} {resp.text}")
    return resp.status_code
