"""In-memory shopping cart passed explicitly to pricing and checkout.

The cart holds variants and quantities only. Prices are never stored on
the cart; they are resolved for the buyer when displayed and once more,
for good, at checkout.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from .pricing import ANONYMOUS, PricingContext, resolve_variant_pricing


@dataclass
class CartLine:
    variant: object
    quantity: int = 1
    size: str = ''
    customer_note: str = ''

    @property
    def key(self) -> tuple:
        return (self.variant.pk, self.size)


@dataclass
class Cart:
    """Lines keyed by (variant, size); adding the same pair merges quantities."""

    lines: list[CartLine] = field(default_factory=list)

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def _find(self, key):
        for line in self.lines:
            if line.key == key:
                return line
        return None

    def add_item(self, variant, quantity: int = 1, size: str = '', customer_note: str = '') -> CartLine:
        """Add a variant, merging into an existing line for the same variant and size."""
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        size = size or getattr(variant, 'size', '') or ''
        line = self._find((variant.pk, size))
        if line is not None:
            line.quantity += quantity
            if customer_note:
                line.customer_note = customer_note
            return line

        line = CartLine(variant=variant, quantity=quantity, size=size, customer_note=customer_note)
        self.lines.append(line)
        return line

    def remove_item(self, variant, size: str = '') -> None:
        size = size or getattr(variant, 'size', '') or ''
        self.lines = [line for line in self.lines if line.key != (variant.pk, size)]

    def update_quantity(self, variant, quantity: int, size: str = '') -> None:
        """Set a line's quantity; values below one are clamped to one."""
        size = size or getattr(variant, 'size', '') or ''
        line = self._find((variant.pk, size))
        if line is not None:
            line.quantity = max(1, quantity)

    def update_note(self, variant, customer_note: str, size: str = '') -> None:
        size = size or getattr(variant, 'size', '') or ''
        line = self._find((variant.pk, size))
        if line is not None:
            line.customer_note = customer_note

    def clear(self) -> None:
        self.lines = []

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    def subtotal(self, context: PricingContext = ANONYMOUS) -> Decimal:
        """Sum of resolved unit price x quantity for the given buyer."""
        return sum(
            (resolve_variant_pricing(line.variant, context).unit_price * line.quantity
             for line in self.lines),
            Decimal('0'),
        )
