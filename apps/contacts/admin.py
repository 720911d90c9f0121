from django.contrib import admin

from .models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "is_resolved", "created_at")
    list_filter = ("is_resolved",)
    search_fields = ("name", "email", "message")
