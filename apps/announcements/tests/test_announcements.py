from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from apps.announcements.models import Announcement


@pytest.fixture
def announcements(db):
    now = timezone.now()
    return {
        "live": Announcement.objects.create(slug="summer-sale", title="Summer sale", published_at=now - timedelta(days=1)),
        "draft": Announcement.objects.create(slug="draft", title="Draft"),
        "expired": Announcement.objects.create(
            slug="old",
            title="Old",
            published_at=now - timedelta(days=10),
            end_at=now - timedelta(days=1),
        ),
        "upcoming": Announcement.objects.create(
            slug="soon",
            title="Soon",
            published_at=now - timedelta(days=1),
            start_at=now + timedelta(days=2),
        ),
    }


def test_live_queryset(announcements):
    assert list(Announcement.objects.live()) == [announcements["live"]]


def test_public_list_shows_live_only(api_client, announcements):
    response = api_client.get(reverse("announcement-list"))
    assert [a["slug"] for a in response.json()["results"]] == ["summer-sale"]


def test_admin_sees_all(admin_client, announcements):
    response = admin_client.get(reverse("announcement-list"))
    assert response.json()["count"] == 4


def test_window_must_be_ordered(admin_client):
    now = timezone.now()
    response = admin_client.post(
        reverse("announcement-list"),
        {
            "slug": "backwards",
            "title": "Backwards",
            "start_at": now.isoformat(),
            "end_at": (now - timedelta(days=1)).isoformat(),
        },
        format="json",
    )
    assert response.status_code == 400
    assert "end_at" in response.json()
