import pytest
from django.urls import reverse

from apps.products.models import Product


@pytest.mark.django_db
class TestProductApi:
    def test_public_sees_published_only(self, api_client, product, draft_product):
        response = api_client.get(reverse("product-list"))

        assert response.status_code == 200
        assert [p["slug"] for p in response.json()["results"]] == [product.slug]

    def test_retrieve_by_slug_with_price(self, api_client, product):
        response = api_client.get(reverse("product-detail", args=[product.slug]))

        assert response.status_code == 200
        assert response.json()["price"] == "400.00"

    def test_draft_hidden_from_public(self, api_client, draft_product):
        assert api_client.get(reverse("product-detail", args=[draft_product.slug])).status_code == 404

    def test_admin_sees_drafts(self, admin_client, product, draft_product):
        response = admin_client.get(reverse("product-list"))
        assert {p["slug"] for p in response.json()["results"]} == {product.slug, draft_product.slug}

    def test_public_cannot_write(self, customer_client):
        response = customer_client.post(reverse("product-list"), {"slug": "x", "title": "X"}, format="json")
        assert response.status_code == 403

    def test_admin_creates(self, admin_client):
        response = admin_client.post(
            reverse("product-list"),
            {
                "slug": "mini-beanbag",
                "title": "Mini Beanbag",
                "status": "published",
                "base_price_cents": 25000,
                "images": ["https://cdn.example.com/mini.jpg"],
            },
            format="json",
        )

        assert response.status_code == 201
        assert Product.objects.get(slug="mini-beanbag").is_published

    def test_images_must_be_urls(self, admin_client):
        response = admin_client.post(
            reverse("product-list"),
            {"slug": "bad", "title": "Bad", "images": [1, 2]},
            format="json",
        )
        assert response.status_code == 400
        assert "images" in response.json()
