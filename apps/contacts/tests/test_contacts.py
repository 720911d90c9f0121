import pytest
from django.urls import reverse

from apps.contacts.models import Contact


@pytest.mark.django_db
class TestContacts:
    def test_anyone_can_submit(self, api_client):
        response = api_client.post(
            reverse("contact-list"),
            {"name": "Thandi", "email": "thandi@example.com", "message": "Do you deliver to Ballito?", "is_resolved": True},
            format="json",
        )

        assert response.status_code == 201
        contact = Contact.objects.get()
        assert contact.is_resolved is False

    def test_public_cannot_list(self, api_client, customer_client):
        assert api_client.get(reverse("contact-list")).status_code == 401
        assert customer_client.get(reverse("contact-list")).status_code == 403

    def test_admin_resolves(self, admin_client):
        contact = Contact.objects.create(name="A", email="a@example.com", message="Hi")
        response = admin_client.patch(reverse("contact-detail", args=[contact.pk]), {"is_resolved": True}, format="json")

        assert response.status_code == 200
        contact.refresh_from_db()
        assert contact.is_resolved
