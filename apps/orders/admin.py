from django.contrib import admin

from .models import OrderItem, PaymentOrder


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "title", "unit_price_cents", "quantity", "position")


@admin.register(PaymentOrder)
class PaymentOrderAdmin(admin.ModelAdmin):
    list_display = (
        "payment_reference",
        "provider",
        "status",
        "amount_total",
        "delivery_method",
        "delivery_status",
        "needs_review",
        "created_at",
    )
    search_fields = ("payment_reference", "customer_email", "gateway_transaction_id")
    list_filter = ("provider", "status", "delivery_status", "needs_review")
    readonly_fields = (
        "payment_reference",
        "provider",
        "status",
        "subtotal_cents",
        "shipping_cents",
        "amount_total",
        "gateway_transaction_id",
        "gateway_raw_status",
        "paid_at",
    )
    inlines = [OrderItemInline]
