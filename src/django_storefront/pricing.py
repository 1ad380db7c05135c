"""Role-aware price resolution for product variants.

Functions here are pure: they read the variant's price data and the
buyer's role/affiliation and never touch the database or raise on bad
data. Malformed prices degrade to the base price (or zero) so a product
can always be displayed.

Rules:
- No role, no buyer affiliation or no owner affiliation -> base price
- Buyer and owner from different colleges -> role_pricing["OTHERS"] or base price
- Same college -> role_pricing[buyer role] or base price
- applied_role is "OTHERS" unless a role override was actually used
"""

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import NamedTuple, Optional

from .choices import Role
from .conf import get_currency_symbol

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


class PricingResult(NamedTuple):
    """Outcome of resolving a price for one buyer."""

    unit_price: Decimal
    applied_role: str
    is_fallback: bool
    formatted_price: str
    base_price: Decimal
    original_price: Optional[str] = None
    is_range: bool = False
    low_price: Optional[Decimal] = None
    high_price: Optional[Decimal] = None


class PricingContext(NamedTuple):
    """Buyer attributes threaded into pricing and checkout calls."""

    role: Optional[str] = None
    affiliation: Optional[str] = None


ANONYMOUS = PricingContext()


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to display precision using banker's rounding (ROUND_HALF_EVEN)."""
    return amount.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_EVEN)


def format_price(amount: Decimal) -> str:
    """Format an amount for display, e.g. "₱1,250.00"."""
    return f"{get_currency_symbol()}{round_money(amount):,.2f}"


def parse_price(value) -> Optional[Decimal]:
    """Parse a price given as a number or numeric string.

    Returns None for missing, non-numeric, non-finite or negative input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite() or amount < 0:
        return None
    return amount


def lookup_role_price(role_pricing, role: str) -> Optional[Decimal]:
    """Look up a role override in a sparse role -> price mapping.

    A missing mapping, a missing key or an unusable value all count as
    "no override" and return None.
    """
    if not isinstance(role_pricing, Mapping) or not role:
        return None
    return parse_price(role_pricing.get(role))


def _variant_price_data(variant):
    """Read (base price, role pricing) from a model, object or wire mapping."""
    if variant is None:
        return None, None
    if isinstance(variant, Mapping):
        base = variant['price'] if 'price' in variant else variant.get('basePrice')
        if 'role_pricing' in variant:
            role_pricing = variant['role_pricing']
        else:
            role_pricing = variant.get('rolePriceMap')
        return base, role_pricing
    return getattr(variant, 'price', None), getattr(variant, 'role_pricing', None)


def resolve_price(
    variant,
    actor_role: Optional[str],
    actor_affiliation: Optional[str],
    owner_affiliation: Optional[str],
) -> PricingResult:
    """Resolve the unit price a buyer pays for one variant.

    Args:
        variant: ProductVariant, or a mapping with price/role_pricing
            (or the wire names basePrice/rolePriceMap)
        actor_role: Buyer's Role value, None if unknown
        actor_affiliation: Buyer's Affiliation value, None if unknown
        owner_affiliation: Affiliation of the product's poster

    Returns:
        PricingResult; never raises for malformed price data
    """
    raw_base, role_pricing = _variant_price_data(variant)
    base_price = parse_price(raw_base)

    if base_price is None:
        logger.debug("Malformed base price %r, pricing at zero", raw_base)
        return PricingResult(
            unit_price=ZERO,
            applied_role=Role.OTHERS.value,
            is_fallback=True,
            formatted_price=format_price(ZERO),
            base_price=ZERO,
            low_price=ZERO,
            high_price=ZERO,
        )

    unit_price = base_price
    applied_role = Role.OTHERS.value

    if actor_role and actor_affiliation and owner_affiliation:
        if actor_affiliation != owner_affiliation:
            override = lookup_role_price(role_pricing, Role.OTHERS.value)
            if override is not None:
                unit_price = override
        else:
            override = lookup_role_price(role_pricing, actor_role)
            if override is not None:
                unit_price = override
                applied_role = str(actor_role)

    return PricingResult(
        unit_price=unit_price,
        applied_role=applied_role,
        is_fallback=False,
        formatted_price=format_price(unit_price),
        base_price=base_price,
        original_price=format_price(base_price) if unit_price != base_price else None,
        low_price=unit_price,
        high_price=unit_price,
    )


def aggregate_pricing(
    variants,
    actor_role: Optional[str],
    actor_affiliation: Optional[str],
    owner_affiliation: Optional[str],
) -> PricingResult:
    """Combine per-variant prices into one display price or a price range.

    Callers must fall back to the product-level price for products without
    variants; an empty sequence raises ValueError.
    """
    variants = list(variants)
    if not variants:
        raise ValueError("aggregate_pricing requires at least one variant")
    if len(variants) == 1:
        return resolve_price(variants[0], actor_role, actor_affiliation, owner_affiliation)

    results = [
        resolve_price(v, actor_role, actor_affiliation, owner_affiliation)
        for v in variants
    ]
    low = min(r.unit_price for r in results)
    high = max(r.unit_price for r in results)

    roles = {r.applied_role for r in results}
    applied_role = roles.pop() if len(roles) == 1 else Role.OTHERS.value
    is_fallback = any(r.is_fallback for r in results)

    if low == high:
        originals = {r.original_price for r in results}
        return PricingResult(
            unit_price=low,
            applied_role=applied_role,
            is_fallback=is_fallback,
            formatted_price=format_price(low),
            base_price=results[0].base_price,
            original_price=originals.pop() if len(originals) == 1 else None,
            low_price=low,
            high_price=high,
        )

    return PricingResult(
        unit_price=low,
        applied_role=applied_role,
        is_fallback=is_fallback,
        formatted_price=f"{format_price(low)} - {format_price(high)}",
        base_price=min(r.base_price for r in results),
        is_range=True,
        low_price=low,
        high_price=high,
    )


def pricing_context_for(user) -> PricingContext:
    """Build the pricing context for a user.

    Anonymous users, users without a profile and inactive profiles get an
    empty context and therefore base prices.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return ANONYMOUS
    profile = getattr(user, 'storefront_profile', None)
    if profile is None or not profile.is_active:
        return ANONYMOUS
    return PricingContext(role=profile.role or None, affiliation=profile.affiliation or None)


def resolve_variant_pricing(variant, context: PricingContext = ANONYMOUS) -> PricingResult:
    """Resolve a ProductVariant for a buyer, reading the owner from its product."""
    return resolve_price(
        variant,
        context.role,
        context.affiliation,
        variant.product.owner_affiliation,
    )


def resolve_product_pricing(product, context: PricingContext = ANONYMOUS) -> PricingResult:
    """Display price for a whole product.

    Products without variants are priced from the product-level price.
    """
    variants = list(product.variants.all())
    owner_affiliation = product.owner_affiliation
    if not variants:
        return resolve_price(
            {'price': product.price, 'role_pricing': None},
            context.role,
            context.affiliation,
            owner_affiliation,
        )
    return aggregate_pricing(variants, context.role, context.affiliation, owner_affiliation)
