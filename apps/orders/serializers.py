from rest_framework import serializers

from .models import OrderItem, PaymentOrder

REQUIRED_DELIVERY_FIELDS = ("phone", "address1", "city", "province", "postal_code")


class OrderItemSerializer(serializers.ModelSerializer):
    line_total_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product", "title", "unit_price_cents", "quantity", "line_total_cents"]
        read_only_fields = fields


class PaymentOrderSerializer(serializers.ModelSerializer):
    """
    Admin view of an order. Only the fulfilment fields are writable; money,
    payment state and the reference belong to checkout and the gateways.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    total = serializers.DecimalField(source="amount_decimal", max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = PaymentOrder
        fields = "__all__"
        read_only_fields = [
            "id",
            "payment_reference",
            "provider",
            "status",
            "subtotal_cents",
            "shipping_cents",
            "amount_total",
            "gateway_transaction_id",
            "gateway_raw_status",
            "delivery_method",
            "shipping_address",
            "customer_first_name",
            "customer_last_name",
            "customer_email",
            "customer_phone",
            "paid_at",
            "created_at",
            "updated_at",
        ]


class PublicOrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    total = serializers.DecimalField(source="amount_decimal", max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = PaymentOrder
        fields = [
            "payment_reference",
            "provider",
            "status",
            "total",
            "subtotal_cents",
            "shipping_cents",
            "amount_total",
            "delivery_method",
            "delivery_status",
            "items",
            "created_at",
        ]
        read_only_fields = fields


class CheckoutItemSerializer(serializers.Serializer):
    product = serializers.CharField(help_text="Product slug or id")
    quantity = serializers.IntegerField(min_value=1, max_value=100)


class DeliverySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["delivery", "pickup"])
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    address1 = serializers.CharField(required=False, allow_blank=True, default="")
    address2 = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(required=False, allow_blank=True, default="")
    province = serializers.CharField(required=False, allow_blank=True, default="")
    postal_code = serializers.CharField(required=False, allow_blank=True, default="")
    out_of_area = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs["type"] == "delivery":
            errors = {
                field: f"MISSING_{field.upper()}"
                for field in REQUIRED_DELIVERY_FIELDS
                if not str(attrs.get(field) or "").strip()
            }
            if errors:
                raise serializers.ValidationError(errors)
        return attrs


class CustomerSerializer(serializers.Serializer):
    first_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=150)
    last_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="", max_length=30)


class CheckoutSerializer(serializers.Serializer):
    """
    Input payload for starting a gateway checkout.
    """

    items = CheckoutItemSerializer(many=True, allow_empty=False)
    delivery = DeliverySerializer()
    customer = CustomerSerializer(required=False, default=dict)
    expected_total_cents = serializers.IntegerField(required=False, min_value=0)
