"""Django Storefront configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    STOREFRONT_CURRENCY_SYMBOL = '₱'
    STOREFRONT_ESTIMATED_DELIVERY_DAYS = 7
"""

from django.conf import settings


def get_setting(name: str, default=None):
    """Get a setting with STOREFRONT_ prefix."""
    return getattr(settings, f"STOREFRONT_{name}", default)


def get_currency_symbol() -> str:
    """Symbol prefixed to formatted prices."""
    return get_setting('CURRENCY_SYMBOL', '₱')


def get_estimated_delivery_days() -> int:
    """Days added to the order date for the estimated delivery date."""
    return int(get_setting('ESTIMATED_DELIVERY_DAYS', 7))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# STOREFRONT_CURRENCY_SYMBOL = '₱'
# STOREFRONT_ESTIMATED_DELIVERY_DAYS = 7
