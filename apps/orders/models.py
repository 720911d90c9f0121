import uuid
from decimal import Decimal

from django.db import models


class PaymentOrder(models.Model):
    """
    One row per checkout attempt.

    ``amount_total`` is computed server-side from the line items and the
    shipping fee when the order is created; gateway callbacks are only ever
    compared against it. ``status`` moves from ``pending`` to exactly one
    terminal value and never changes again.
    """

    PROVIDER_OZOW = "ozow"
    PROVIDER_PAYFAST = "payfast"
    PROVIDER_CHOICES = [
        (PROVIDER_OZOW, "Ozow"),
        (PROVIDER_PAYFAST, "PayFast"),
    ]

    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"
    STATUS_CANCELLED = "cancelled"
    STATUS_ERROR = "error"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_ERROR, "Error"),
    ]
    TERMINAL_STATUSES = (STATUS_PAID, STATUS_CANCELLED, STATUS_ERROR)

    DELIVERY_METHOD_CHOICES = [
        ("delivery", "Delivery"),
        ("pickup", "Pickup"),
    ]

    DELIVERY_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("shipped", "Shipped"),
        ("delivered", "Delivered"),
        ("picked_up", "Picked up"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    payment_reference = models.CharField(max_length=50, unique=True, editable=False)
    provider = models.CharField(max_length=20, choices=PROVIDER_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    subtotal_cents = models.PositiveIntegerField(default=0)
    shipping_cents = models.PositiveIntegerField(default=0)
    amount_total = models.PositiveIntegerField()
    gateway_transaction_id = models.CharField(max_length=100, blank=True, default="")
    gateway_raw_status = models.CharField(max_length=50, blank=True, default="")
    delivery_method = models.CharField(max_length=20, choices=DELIVERY_METHOD_CHOICES, default="delivery")
    shipping_address = models.JSONField(default=dict, blank=True)
    delivery_status = models.CharField(max_length=20, choices=DELIVERY_STATUS_CHOICES, default="pending")
    tracking_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    customer_first_name = models.CharField(max_length=150, blank=True)
    customer_last_name = models.CharField(max_length=150, blank=True)
    customer_email = models.EmailField(blank=True)
    customer_phone = models.CharField(max_length=30, blank=True)
    needs_review = models.BooleanField(default=False)
    review_reason = models.CharField(max_length=255, blank=True)
    paid_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.payment_reference} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def amount_decimal(self) -> Decimal:
        return (Decimal(self.amount_total) / Decimal(100)).quantize(Decimal("0.01"))

    @property
    def customer_name(self) -> str:
        return f"{self.customer_first_name} {self.customer_last_name}".strip()

    def items_total_cents(self) -> int:
        return sum(item.line_total_cents for item in self.items.all())


class OrderItem(models.Model):
    order = models.ForeignKey(PaymentOrder, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    title = models.CharField(max_length=255)
    unit_price_cents = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField()
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.title}"

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity
