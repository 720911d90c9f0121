from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "status", "base_price_cents", "stock_quantity", "is_promotional")
    list_filter = ("status", "is_promotional")
    search_fields = ("title", "slug")
    prepopulated_fields = {"slug": ("title",)}
