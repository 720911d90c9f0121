"""HTTP tests for checkout, gateway callbacks and payment status."""

from urllib.parse import urlencode

import pytest
import requests
from django.conf import settings
from django.test import override_settings
from django.urls import reverse

from apps.orders.models import PaymentOrder
from apps.payments import views
from apps.payments.models import PaymentLog
from apps.payments.ozow import OzowNotification, compute_response_hash
from apps.payments.payfast import compute_signature

FORM = "application/x-www-form-urlencoded"


def post_form(client, url, data, **extra):
    return client.post(url, data=urlencode(data), content_type=FORM, **extra)


def signed_itn(reference, amount="529.00", status="COMPLETE", pf_payment_id="1089250"):
    data = {
        "m_payment_id": reference,
        "pf_payment_id": pf_payment_id,
        "payment_status": status,
        "item_name": "Pool Beanbags Order",
        "amount_gross": amount,
        "amount_fee": "-12.17",
        "amount_net": "516.83",
        "name_first": "Pool",
        "email_address": "buyer@example.com",
        "merchant_id": "10000100",
    }
    data["signature"] = compute_signature(data, settings.PAYFAST["PASSPHRASE"])
    return data


def signed_ozow(reference, status="Complete", amount="529.00", transaction_id="OZ-1"):
    data = {
        "SiteCode": settings.OZOW["SITE_CODE"],
        "TransactionId": transaction_id,
        "TransactionReference": reference,
        "Amount": amount,
        "Status": status,
        "Optional1": "",
        "Optional2": "",
        "Optional3": "",
        "Optional4": "",
        "Optional5": "",
        "CurrencyCode": "ZAR",
        "IsTest": "true",
        "StatusMessage": "",
    }
    data["Hash"] = compute_response_hash(OzowNotification.from_mapping(data), settings.OZOW["PRIVATE_KEY"])
    return data


@pytest.mark.django_db
class TestCheckout:
    def test_payfast_checkout_then_itn_marks_paid(
        self, api_client, checkout_payload, product, mailoutbox, django_capture_on_commit_callbacks
    ):
        checkout_payload["expected_total_cents"] = 52900
        response = api_client.post(reverse("payfast-create"), checkout_payload, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == "529.00"
        assert body["total_cents"] == 52900
        assert body["action"] == "https://sandbox.payfast.co.za/eng/process"
        assert body["post"]["amount"] == "529.00"
        assert body["post"]["m_payment_id"] == body["reference"]
        assert body["redirect"].startswith(body["action"] + "?")

        order = PaymentOrder.objects.get(payment_reference=body["reference"])
        assert order.status == PaymentOrder.STATUS_PENDING
        assert (order.subtotal_cents, order.shipping_cents, order.amount_total) == (40000, 12900, 52900)

        with django_capture_on_commit_callbacks(execute=True):
            itn = post_form(api_client, reverse("payfast-itn"), signed_itn(body["reference"]))

        assert itn.status_code == 200
        assert itn.content == b"OK"
        order.refresh_from_db()
        assert order.status == PaymentOrder.STATUS_PAID
        product.refresh_from_db()
        assert product.stock_quantity == 9
        assert len([m for m in mailoutbox if "buyer@example.com" in m.to]) == 1

    def test_ozow_checkout_returns_signed_form(self, api_client, checkout_payload):
        response = api_client.post(reverse("ozow-create"), checkout_payload, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["action"] == "https://pay.ozow.com/"
        form = body["ozow"]
        assert form["Amount"] == "529.00"
        assert form["TransactionReference"] == body["reference"]
        assert form["BankReference"].startswith("POOLBAGS-")
        assert len(form["BankReference"]) <= 20
        assert len(form["HashCheck"]) == 128
        assert PaymentOrder.objects.get(payment_reference=body["reference"]).provider == "ozow"

    @override_settings(OZOW={"SITE_CODE": "TEST-001"})
    def test_unconfigured_gateway_is_503(self, api_client, checkout_payload):
        response = api_client.post(reverse("ozow-create"), checkout_payload, format="json")

        assert response.status_code == 503
        assert "PRIVATE_KEY" in response.json()["missing"]
        assert not PaymentOrder.objects.exists()

    def test_total_mismatch(self, api_client, checkout_payload):
        checkout_payload["expected_total_cents"] = 40000
        response = api_client.post(reverse("payfast-create"), checkout_payload, format="json")

        assert response.status_code == 400
        assert response.json()["error"] == "TOTAL_MISMATCH"
        assert not PaymentOrder.objects.exists()

    def test_delivery_requires_address(self, api_client, checkout_payload):
        checkout_payload["delivery"]["phone"] = ""
        checkout_payload["delivery"]["city"] = " "
        response = api_client.post(reverse("payfast-create"), checkout_payload, format="json")

        assert response.status_code == 400
        errors = response.json()["delivery"]
        assert errors["phone"] == ["MISSING_PHONE"]
        assert errors["city"] == ["MISSING_CITY"]

    def test_pickup_needs_no_address_and_ships_free(self, api_client, checkout_payload):
        checkout_payload["delivery"] = {"type": "pickup"}
        response = api_client.post(reverse("payfast-create"), checkout_payload, format="json")

        assert response.status_code == 201
        order = PaymentOrder.objects.get()
        assert order.delivery_method == "pickup"
        assert order.amount_total == 40000
        assert order.shipping_address == {}

    def test_draft_product_cannot_be_bought(self, api_client, checkout_payload, draft_product):
        checkout_payload["items"] = [{"product": draft_product.slug, "quantity": 1}]
        response = api_client.post(reverse("payfast-create"), checkout_payload, format="json")

        assert response.status_code == 400
        assert response.json()["error"] == "PRODUCT_UNAVAILABLE"


@pytest.mark.django_db
class TestPayFastITN:
    def test_duplicate_itn_is_acknowledged(self, api_client, make_order, product):
        order = make_order()
        data = signed_itn(order.payment_reference)

        assert post_form(api_client, reverse("payfast-itn"), data).status_code == 200
        assert post_form(api_client, reverse("payfast-itn"), data).status_code == 200

        product.refresh_from_db()
        assert product.stock_quantity == 9
        assert list(PaymentLog.objects.order_by("id").values_list("outcome", flat=True)) == ["applied", "duplicate"]

    def test_invalid_signature_is_acknowledged_but_ignored(self, api_client, make_order):
        order = make_order()
        data = signed_itn(order.payment_reference)
        data["amount_gross"] = "1.00"

        response = post_form(api_client, reverse("payfast-itn"), data)

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == PaymentOrder.STATUS_PENDING
        assert PaymentLog.objects.get().outcome == "invalid_signature"

    def test_missing_fields_is_400(self, api_client):
        response = post_form(api_client, reverse("payfast-itn"), {"m_payment_id": "ORD-1"})
        assert response.status_code == 400
        assert not PaymentLog.objects.exists()

    def test_unknown_order_is_404(self, api_client, db):
        response = post_form(api_client, reverse("payfast-itn"), signed_itn("ORD-NOPE"))
        assert response.status_code == 404
        assert response.content == b"Order not found"

    def test_amount_mismatch_is_acknowledged_and_flagged(self, api_client, make_order):
        order = make_order()
        response = post_form(api_client, reverse("payfast-itn"), signed_itn(order.payment_reference, amount="100.00"))

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == PaymentOrder.STATUS_PENDING
        assert order.needs_review

    def test_source_ip_allow_list(self, api_client, make_order):
        order = make_order()
        data = signed_itn(order.payment_reference)

        with override_settings(PAYFAST={**settings.PAYFAST, "VALIDATE_SOURCE_IP": True}):
            blocked = post_form(api_client, reverse("payfast-itn"), data, REMOTE_ADDR="10.1.2.3")
            order.refresh_from_db()
            assert blocked.status_code == 200
            assert order.status == PaymentOrder.STATUS_PENDING

            allowed = post_form(api_client, reverse("payfast-itn"), data, REMOTE_ADDR="197.221.189.20")
            order.refresh_from_db()
            assert allowed.status_code == 200
            assert order.status == PaymentOrder.STATUS_PAID


@pytest.mark.django_db
class TestOzowCallbacks:
    def test_notify_marks_paid(self, api_client, make_order):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)

        response = post_form(api_client, reverse("ozow-notify"), signed_ozow(order.payment_reference))

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == PaymentOrder.STATUS_PAID
        assert order.gateway_transaction_id == "OZ-1"

    def test_notify_with_bad_hash_is_acknowledged(self, api_client, make_order):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)
        data = signed_ozow(order.payment_reference)
        data["Hash"] = "f" * 128

        assert post_form(api_client, reverse("ozow-notify"), data).status_code == 200
        order.refresh_from_db()
        assert order.status == PaymentOrder.STATUS_PENDING

    def test_notify_unknown_order_is_404(self, api_client, db):
        assert post_form(api_client, reverse("ozow-notify"), signed_ozow("ORD-NOPE")).status_code == 404

    @pytest.mark.parametrize(
        "ozow_status,target,order_status",
        [
            ("Complete", "SUCCESS_URL", "paid"),
            ("Cancelled", "CANCEL_URL", "cancelled"),
            ("Abandoned", "CANCEL_URL", "cancelled"),
            ("Error", "ERROR_URL", "error"),
            ("PendingInvestigation", "ERROR_URL", "pending"),
        ],
    )
    def test_redirect_applies_and_redirects(self, api_client, make_order, ozow_status, target, order_status):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)

        response = post_form(api_client, reverse("ozow-redirect"), signed_ozow(order.payment_reference, ozow_status))

        assert response.status_code == 302
        assert response["Location"] == settings.OZOW[target]
        order.refresh_from_db()
        assert order.status == order_status

    def test_redirect_and_notify_apply_once(self, api_client, make_order, product):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)
        data = signed_ozow(order.payment_reference)

        post_form(api_client, reverse("ozow-redirect"), data)
        post_form(api_client, reverse("ozow-notify"), data)

        product.refresh_from_db()
        assert product.stock_quantity == 9
        assert list(PaymentLog.objects.order_by("id").values_list("kind", "outcome")) == [
            ("redirect", "applied"),
            ("notify", "duplicate"),
        ]

    def test_redirect_with_bad_hash_goes_to_error_url(self, api_client, make_order):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)
        data = signed_ozow(order.payment_reference)
        data["Hash"] = "bad"

        response = post_form(api_client, reverse("ozow-redirect"), data)

        assert response.status_code == 302
        assert response["Location"] == settings.OZOW["ERROR_URL"]

    def test_redirect_with_wrong_amount_goes_to_error_url(self, api_client, make_order):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)

        response = post_form(api_client, reverse("ozow-redirect"), signed_ozow(order.payment_reference, amount="1.00"))

        assert response.status_code == 302
        assert response["Location"] == settings.OZOW["ERROR_URL"]
        order.refresh_from_db()
        assert order.status == PaymentOrder.STATUS_PENDING
        assert order.needs_review is True

    def test_redirect_for_unknown_order_goes_to_error_url(self, api_client, db):
        response = post_form(api_client, reverse("ozow-redirect"), signed_ozow("ORD-NOPE"))

        assert response.status_code == 302
        assert response["Location"] == settings.OZOW["ERROR_URL"]

    def test_repeated_redirect_for_paid_order_goes_to_success_url(self, api_client, make_order):
        order = make_order(provider=PaymentOrder.PROVIDER_OZOW)
        post_form(api_client, reverse("ozow-notify"), signed_ozow(order.payment_reference))

        response = post_form(api_client, reverse("ozow-redirect"), signed_ozow(order.payment_reference))

        assert response["Location"] == settings.OZOW["SUCCESS_URL"]
        assert PaymentLog.objects.order_by("-id").first().outcome == "duplicate"


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


@pytest.mark.django_db
class TestOzowVerify:
    def test_requires_admin(self, customer_client):
        response = customer_client.get(reverse("ozow-verify", args=["ORD-1"]))
        assert response.status_code == 403

    def test_proxies_lookup_with_api_key(self, admin_client, monkeypatch):
        calls = {}

        def fake_get(url, params=None, headers=None, timeout=None):
            calls.update(url=url, params=params, headers=headers)
            return FakeResponse([{"status": "Complete", "transactionReference": "ORD-1"}])

        monkeypatch.setattr(views.requests, "get", fake_get)
        response = admin_client.get(reverse("ozow-verify", args=["ORD-1"]))

        assert response.status_code == 200
        assert response.json()["provider_response"][0]["status"] == "Complete"
        assert calls["url"] == "https://api.ozow.com/GetTransactionByReference"
        assert calls["params"] == {"siteCode": "TEST-001", "transactionReference": "ORD-1"}
        assert calls["headers"]["ApiKey"] == settings.OZOW["API_KEY"]

    def test_gateway_failure_is_502(self, admin_client, monkeypatch):
        def fake_get(*args, **kwargs):
            raise requests.ConnectionError("boom")

        monkeypatch.setattr(views.requests, "get", fake_get)
        response = admin_client.get(reverse("ozow-verify", args=["ORD-1"]))

        assert response.status_code == 502

    def test_http_error_is_502(self, admin_client, monkeypatch):
        monkeypatch.setattr(views.requests, "get", lambda *a, **kw: FakeResponse({}, status_code=500))
        assert admin_client.get(reverse("ozow-verify", args=["ORD-1"])).status_code == 502


@pytest.mark.django_db
class TestPaymentStatus:
    def test_status(self, api_client, make_order):
        order = make_order()
        response = api_client.get(reverse("payment-status", args=[order.payment_reference]))

        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["total"] == "529.00"

    def test_unknown(self, api_client, db):
        assert api_client.get(reverse("payment-status", args=["ORD-NOPE"])).status_code == 404
