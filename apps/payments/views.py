import logging

import requests
from django.http import HttpResponse, HttpResponseRedirect
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authentication.permissions import IsAdmin
from apps.orders.exceptions import CheckoutError
from apps.orders.models import PaymentOrder
from apps.orders.serializers import CheckoutSerializer
from apps.orders.services import create_payment_order, describe_items

from .config import OzowConfig, PayFastConfig
from .exceptions import ConfigurationMissing
from .ozow import OzowRequestBuilder
from .payfast import PayFastNotification, PayFastRequestBuilder, is_valid_source_ip
from .reconciler import Outcome, process_ozow_notification, process_payfast_notification

logger = logging.getLogger(__name__)


def _ok() -> HttpResponse:
    return HttpResponse("OK", content_type="text/plain", status=status.HTTP_200_OK)


class CheckoutView(APIView):
    """
    Shared flow for both gateways: validate the basket, price it on the
    server, store a pending order and hand back a signed gateway form.
    """

    permission_classes = [permissions.AllowAny]
    provider = None

    def get_builder(self):
        raise NotImplementedError

    def build_payload(self, builder, order) -> dict:
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        try:
            builder = self.get_builder()
        except ConfigurationMissing as exc:
            logger.error("%s checkout unavailable: %s", self.provider, exc)
            return Response(
                {"error": "SERVER_CONFIG_ERROR", "missing": exc.missing},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = create_payment_order(
                provider=self.provider,
                items=data["items"],
                delivery=data["delivery"],
                customer=data.get("customer") or {},
                expected_total_cents=data.get("expected_total_cents"),
            )
        except CheckoutError as exc:
            return Response({"error": exc.code, "detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        body = self.build_payload(builder, order)
        body.update(
            {
                "reference": order.payment_reference,
                "total": str(order.amount_decimal),
                "total_cents": order.amount_total,
            }
        )
        return Response(body, status=status.HTTP_201_CREATED)


class OzowCheckoutView(CheckoutView):
    provider = PaymentOrder.PROVIDER_OZOW

    def get_builder(self):
        return OzowRequestBuilder(OzowConfig.from_settings())

    def build_payload(self, builder, order) -> dict:
        post = builder.build_for_order(order)
        return {"ozow": post.as_form(), "action": builder.action_url}


class PayFastCheckoutView(CheckoutView):
    provider = PaymentOrder.PROVIDER_PAYFAST

    def get_builder(self):
        return PayFastRequestBuilder(PayFastConfig.from_settings())

    def build_payload(self, builder, order) -> dict:
        post = builder.build_for_order(order, item_description=describe_items(order))
        return {
            "post": post.as_form(),
            "action": builder.process_url,
            "redirect": builder.redirect_url(post),
        }


class GatewayCallbackView(APIView):
    """
    Base for gateway callbacks: unauthenticated, unthrottled, form encoded.
    """

    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    throttle_classes = []
    parser_classes = [FormParser, MultiPartParser, JSONParser]


class OzowNotifyView(GatewayCallbackView):
    def post(self, request, *args, **kwargs):
        result = process_ozow_notification(request.data, OzowConfig.from_settings(), kind="notify")
        if result.outcome == Outcome.NOT_FOUND:
            return HttpResponse("Order not found", content_type="text/plain", status=status.HTTP_404_NOT_FOUND)
        return _ok()


class OzowRedirectView(GatewayCallbackView):
    """
    The customer's browser comes back here from Ozow. The post carries the
    same signed fields as the server notify, so it is applied the same way
    before the customer is sent on to the storefront.
    """

    def post(self, request, *args, **kwargs):
        config = OzowConfig.from_settings()
        result = process_ozow_notification(request.data, config, kind="redirect")
        return HttpResponseRedirect(self.target_url(config, result))

    @staticmethod
    def target_url(config: OzowConfig, result) -> str:
        """
        Where the browser lands depends on what the order became, not on the
        status Ozow posted: an unknown or under-paid order is never a success.
        """
        if result.outcome == Outcome.AMOUNT_MISMATCH or result.order is None:
            return config.error_url
        if result.order.status == PaymentOrder.STATUS_PAID:
            return config.success_url
        if result.order.status == PaymentOrder.STATUS_CANCELLED:
            return config.cancel_url
        return config.error_url


class OzowVerifyView(APIView):
    """
    Ask Ozow for the current state of a transaction by our reference.
    """

    permission_classes = [IsAdmin]

    def get(self, request, reference, *args, **kwargs):
        config = OzowConfig.from_settings()
        if not config.site_code or not config.api_key:
            return Response(
                {"detail": "Payment provider is not configured."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        url = f"{config.api_url.rstrip('/')}/GetTransactionByReference"
        params = {"siteCode": config.site_code, "transactionReference": reference}
        headers = {"ApiKey": config.api_key, "Accept": "application/json"}
        try:
            resp = requests.get(url, params=params, headers=headers, timeout=15)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Ozow lookup for %s failed: %s", reference, exc)
            return Response(
                {"detail": "Failed to verify payment with Ozow.", "error": str(exc)},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        return Response({"reference": reference, "provider_response": payload}, status=status.HTTP_200_OK)


class PayFastITNView(GatewayCallbackView):
    def post(self, request, *args, **kwargs):
        config = PayFastConfig.from_settings()
        if not _source_allowed(config, request.META.get("REMOTE_ADDR")):
            logger.error("Ignoring PayFast ITN from unexpected address %s", request.META.get("REMOTE_ADDR"))
            return _ok()

        missing = PayFastNotification.from_mapping(request.data).missing_fields()
        if missing:
            logger.error("PayFast ITN missing required fields: %s", ", ".join(missing))
            return HttpResponse("Missing required fields", content_type="text/plain", status=status.HTTP_400_BAD_REQUEST)

        result = process_payfast_notification(request.data, config)
        if result.outcome == Outcome.NOT_FOUND:
            return HttpResponse("Order not found", content_type="text/plain", status=status.HTTP_404_NOT_FOUND)
        return _ok()


def _source_allowed(config: PayFastConfig, address) -> bool:
    if not config.validate_source_ip:
        return True
    return is_valid_source_ip(address, config.valid_networks)


class PaymentStatusView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, reference, *args, **kwargs):
        order = get_object_or_404(PaymentOrder, payment_reference=reference)
        return Response(
            {
                "reference": order.payment_reference,
                "provider": order.provider,
                "status": order.status,
                "total": str(order.amount_decimal),
                "paid_at": order.paid_at,
            },
            status=status.HTTP_200_OK,
        )
