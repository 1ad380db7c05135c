"""Exceptions for django-storefront."""


class StorefrontError(Exception):
    """Base exception for storefront errors."""
    pass


class LifecycleError(StorefrontError):
    """Base exception for order, payment and fulfillment state errors."""
    pass


class IllegalTransitionError(LifecycleError):
    """Raised when a requested state is not reachable from the current one."""

    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from '{from_state}' to '{to_state}'"
        super().__init__(self.reason)


class MissingCancellationReasonError(IllegalTransitionError):
    """Raised when cancelling without a valid cancellation reason."""

    def __init__(self, from_state: str, to_state: str = "CANCELLED"):
        super().__init__(
            from_state, to_state,
            "A cancellation reason is required to cancel an order",
        )


class CheckoutError(StorefrontError):
    """Raised when a cart cannot be turned into an order."""
    pass


class EmptyCartError(CheckoutError):
    """Raised when checking out a cart with no lines."""
    pass


class PaymentError(StorefrontError):
    """Raised when a payment cannot be recorded against an order."""
    pass


class ImmutableOrderItemError(StorefrontError):
    """Raised when attempting to modify an order line after creation."""
    pass


class OrderTotalMismatchError(StorefrontError):
    """Raised when a stored order total disagrees with its line items."""

    def __init__(self, order_id, stored, expected):
        self.order_id = order_id
        self.stored = stored
        self.expected = expected
        super().__init__(
            f"Order {order_id} total mismatch: stored={stored}, expected={expected}"
        )
