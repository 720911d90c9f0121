from django.contrib import admin

from .models import PaymentLog


@admin.register(PaymentLog)
class PaymentLogAdmin(admin.ModelAdmin):
    list_display = ("provider", "kind", "reference", "raw_status", "outcome", "created_at")
    list_filter = ("provider", "kind", "outcome")
    search_fields = ("reference", "transaction_id")
    readonly_fields = [f.name for f in PaymentLog._meta.fields]
