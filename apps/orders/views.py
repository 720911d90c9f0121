from rest_framework import mixins, permissions, viewsets
from rest_framework.generics import RetrieveAPIView

from apps.authentication.permissions import IsAdmin

from .models import PaymentOrder
from .serializers import PaymentOrderSerializer, PublicOrderSerializer


class PaymentOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Admin order management: list, inspect and update fulfilment details.
    """

    queryset = PaymentOrder.objects.prefetch_related("items").all()
    serializer_class = PaymentOrderSerializer
    permission_classes = [IsAdmin]
    filterset_fields = ["status", "provider", "delivery_status", "delivery_method", "needs_review"]
    ordering_fields = ["created_at", "amount_total"]
    http_method_names = ["get", "patch", "head", "options"]


class OrderLookupView(RetrieveAPIView):
    """
    Public order summary for the checkout return pages.
    """

    queryset = PaymentOrder.objects.prefetch_related("items").all()
    serializer_class = PublicOrderSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "payment_reference"
    lookup_url_kwarg = "reference"
