# tests/conftest.py
"""
Pytest configuration for django-storefront tests.
"""
from decimal import Decimal

import django
import pytest
from django.conf import settings


def pytest_configure():
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY="test-secret-key-for-storefront-tests",
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME": ":memory:",
                }
            },
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
                "django.contrib.auth",
                "django_storefront",
            ],
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            USE_TZ=True,
            STOREFRONT_ESTIMATED_DELIVERY_DAYS=7,
        )
    django.setup()


@pytest.fixture
def make_user(db, django_user_model):
    """Factory for users with an optional storefront profile."""
    from django_storefront.models import CustomerProfile

    def _make(username, role=None, affiliation=None, profile=True, **extra):
        user = django_user_model.objects.create_user(
            username=username, password="testpass123", **extra,
        )
        if profile:
            CustomerProfile.objects.create(user=user, role=role, affiliation=affiliation)
        return user

    return _make


@pytest.fixture
def owner(make_user):
    """Staff account posting products for the College of Computing Studies."""
    return make_user("ccs_staff", role="STAFF_FACULTY", affiliation="CCS", is_staff=True)


@pytest.fixture
def student(make_user):
    """Student from the same college as the product owner."""
    return make_user("student", role="STUDENT", affiliation="CCS")


@pytest.fixture
def outsider(make_user):
    """Student from another college."""
    return make_user("outsider", role="STUDENT", affiliation="COE")


@pytest.fixture
def product(owner):
    from django_storefront.models import Product

    return Product.objects.create(posted_by=owner, title="Org Shirt", slug="org-shirt")


@pytest.fixture
def variant(product):
    """basePrice 500 with STUDENT 400 and OTHERS 450 overrides."""
    from django_storefront.models import ProductVariant

    return ProductVariant.objects.create(
        product=product,
        name="Medium",
        size="M",
        price=Decimal("500.00"),
        role_pricing={"STUDENT": 400, "OTHERS": 450},
        inventory=20,
    )


@pytest.fixture
def plain_variant(product):
    """Variant without role overrides."""
    from django_storefront.models import ProductVariant

    return ProductVariant.objects.create(
        product=product,
        name="Large",
        size="L",
        price=Decimal("600.00"),
        role_pricing={},
        inventory=5,
    )


@pytest.fixture
def order(student, variant):
    """Freshly checked-out PENDING order: 2 x 400 for the student."""
    from django_storefront.cart import Cart
    from django_storefront.services import checkout

    cart = Cart()
    cart.add_item(variant, quantity=2)
    return checkout(cart, student)
