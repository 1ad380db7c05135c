"""Django Storefront - Role-aware pricing and order lifecycle for a campus shop.

Provides:
- CustomerProfile: Buyer role and college affiliation used for pricing
- Product / ProductVariant: Catalog entries with sparse role price overrides
- Order / OrderItem: Checkout aggregate with immutable price snapshots
- Fulfillment / Payment: Production tracking and payment records per order
- OrderStatusLog: Append-only history of every accepted status change

Usage:
    INSTALLED_APPS = [
        ...
        'django_storefront',
    ]

    from django_storefront.pricing import resolve_price
    from django_storefront.services import checkout, request_transition

See conf.py for all configuration options.
"""

__version__ = "0.1.0"
