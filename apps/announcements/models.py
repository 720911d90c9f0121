from django.db import models
from django.db.models import Q
from django.utils import timezone


class AnnouncementQuerySet(models.QuerySet):
    def live(self, now=None):
        """Published announcements whose display window contains ``now``."""
        now = now or timezone.now()
        return self.filter(
            Q(published_at__isnull=False, published_at__lte=now),
            Q(start_at__isnull=True) | Q(start_at__lte=now),
            Q(end_at__isnull=True) | Q(end_at__gte=now),
        )


class Announcement(models.Model):
    slug = models.SlugField(max_length=255, unique=True)
    title = models.CharField(max_length=255)
    excerpt = models.TextField(blank=True)
    body_richtext = models.TextField(blank=True)
    banner_image = models.URLField(blank=True)
    published_at = models.DateTimeField(blank=True, null=True)
    start_at = models.DateTimeField(blank=True, null=True)
    end_at = models.DateTimeField(blank=True, null=True)
    is_featured = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AnnouncementQuerySet.as_manager()

    class Meta:
        ordering = ["-is_featured", "-published_at", "-created_at"]

    def __str__(self) -> str:
        return self.title
