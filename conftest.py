"""Shared pytest fixtures for the storefront API tests."""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.orders.models import OrderItem, PaymentOrder
from apps.products.models import Product

User = get_user_model()


@pytest.fixture
def api_client():
    """Return an unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@poolbeanbags.test",
        password="Admin123!",
        first_name="Shop",
        last_name="Admin",
        role="admin",
        is_staff=True,
    )


@pytest.fixture
def customer_user(db):
    return User.objects.create_user(
        email="customer@example.com",
        password="Customer123!",
        first_name="Pool",
        last_name="Owner",
    )


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def customer_client(customer_user):
    client = APIClient()
    client.force_authenticate(user=customer_user)
    return client


@pytest.fixture
def product(db):
    """A published R400.00 beanbag with stock on hand."""
    return Product.objects.create(
        slug="classic-pool-beanbag",
        title="Classic Pool Beanbag",
        description="Floats, dries fast.",
        status="published",
        base_price_cents=40000,
        stock_quantity=10,
    )


@pytest.fixture
def draft_product(db):
    return Product.objects.create(
        slug="prototype-lounger",
        title="Prototype Lounger",
        status="draft",
        base_price_cents=90000,
        stock_quantity=1,
    )


@pytest.fixture
def make_order(db, product):
    """Factory for pending orders with one line of ``product``."""

    def _make(provider=PaymentOrder.PROVIDER_PAYFAST, quantity=1, shipping_cents=12900, reference="ORD-TEST000001"):
        subtotal = product.base_price_cents * quantity
        order = PaymentOrder.objects.create(
            payment_reference=reference,
            provider=provider,
            subtotal_cents=subtotal,
            shipping_cents=shipping_cents,
            amount_total=subtotal + shipping_cents,
            customer_first_name="Pool",
            customer_last_name="Owner",
            customer_email="buyer@example.com",
        )
        OrderItem.objects.create(
            order=order,
            product=product,
            title=product.title,
            unit_price_cents=product.base_price_cents,
            quantity=quantity,
        )
        return order

    return _make


@pytest.fixture
def checkout_payload(product):
    return {
        "items": [{"product": product.slug, "quantity": 1}],
        "delivery": {
            "type": "delivery",
            "phone": "0821234567",
            "address1": "12 Marine Parade",
            "address2": "",
            "city": "Durban",
            "province": "KwaZulu-Natal",
            "postal_code": "4001",
            "out_of_area": False,
        },
        "customer": {
            "first_name": "Pool",
            "last_name": "Owner",
            "email": "buyer@example.com",
            "phone": "0821234567",
        },
    }


@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()
