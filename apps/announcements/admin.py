from django.contrib import admin

from .models import Announcement


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "published_at", "start_at", "end_at", "is_featured")
    list_filter = ("is_featured",)
    search_fields = ("title", "slug")
    prepopulated_fields = {"slug": ("title",)}
