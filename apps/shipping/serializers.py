from decimal import Decimal

from rest_framework import serializers


class DestinationSerializer(serializers.Serializer):
    city = serializers.CharField(allow_blank=True, required=False, default="")
    province = serializers.CharField(allow_blank=True, required=False, default="")
    postal_code = serializers.CharField(allow_blank=True, required=False, default="")


class ShippingQuoteRequestSerializer(serializers.Serializer):
    cart_total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    destination = DestinationSerializer()
    out_of_area = serializers.BooleanField(required=False, default=False)
