"""Django Storefront app configuration."""

from django.apps import AppConfig


class DjangoStorefrontConfig(AppConfig):
    """Configuration for django-storefront app."""

    name = "django_storefront"
    verbose_name = "Storefront"
    default_auto_field = "django.db.models.BigAutoField"
