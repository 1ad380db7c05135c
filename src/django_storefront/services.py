"""Storefront services for checkout and the order lifecycle.

- Prices are resolved once per line at checkout and snapshotted on OrderItem
- total_amount = sum(price * quantity) - discount_amount, never below zero
- Every status change locks the order row, re-reads it, validates against
  django_storefront.lifecycle and only then writes; a rejected request
  leaves the order untouched
- Fulfillment and payment changes lock the parent order too, so all three
  dimensions of one order are serialized
- Accepted changes are appended to OrderStatusLog
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import NamedTuple, Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from .choices import (
    FulfillmentStatus,
    OrderStatus,
    PaymentMethod,
    PaymentRecordStatus,
    PaymentStatus,
)
from .conf import get_estimated_delivery_days
from .exceptions import (
    CheckoutError,
    EmptyCartError,
    LifecycleError,
    OrderTotalMismatchError,
    PaymentError,
)
from .lifecycle import (
    FULFILLMENT_TERMINAL_STATES,
    PAYMENT_TRANSITIONS,
    allowed_fulfillment_transitions,
    allowed_order_transitions,
    validate_fulfillment_transition,
    validate_order_transition,
    validate_payment_transition,
)
from .models import Fulfillment, Order, OrderItem, OrderStatusLog, Payment
from .pricing import (
    PricingContext,
    parse_price,
    pricing_context_for,
    resolve_variant_pricing,
    round_money,
)

logger = logging.getLogger(__name__)


class TransitionResult(NamedTuple):
    """Outcome of a request_* call.

    value is the updated object on success and the untouched object on
    failure; error carries the LifecycleError explaining the rejection.
    """

    ok: bool
    value: object
    error: Optional[LifecycleError] = None


# =============================================================================
# Totals
# =============================================================================

def calculate_order_total(items, discount_amount) -> Decimal:
    """Sum line prices times quantities, minus the discount, clamped at zero.

    Args:
        items: Iterable of objects with price and quantity
        discount_amount: Discount applied to the whole order
    """
    subtotal = sum((item.price * item.quantity for item in items), Decimal('0'))
    total = subtotal - Decimal(str(discount_amount or 0))
    return round_money(max(total, Decimal('0')))


def recompute_order_total(order: Order) -> Decimal:
    """Recompute an order's total from its stored line items."""
    return calculate_order_total(order.items.all(), order.discount_amount)


def verify_order_total(order: Order) -> Decimal:
    """Check the stored total against the line items.

    Raises:
        OrderTotalMismatchError: If the stored header value disagrees
    """
    expected = recompute_order_total(order)
    if expected != order.total_amount:
        logger.error(
            "Order %s total mismatch: stored=%s expected=%s",
            order.pk, order.total_amount, expected,
        )
        raise OrderTotalMismatchError(order.pk, order.total_amount, expected)
    return expected


def find_total_mismatches(queryset=None) -> list[tuple[Order, Decimal, Decimal]]:
    """Return (order, stored, expected) for every order whose total is off.

    Soft-deleted orders are included; a deleted order still must add up.
    """
    if queryset is None:
        queryset = Order.all_objects.all()
    mismatches = []
    for order in queryset.prefetch_related('items'):
        expected = recompute_order_total(order)
        if expected != order.total_amount:
            mismatches.append((order, order.total_amount, expected))
    return mismatches


# =============================================================================
# Checkout
# =============================================================================

def _log_status(order: Order, dimension: str, status: str, message: str = '', by_user=None) -> OrderStatusLog:
    return OrderStatusLog.objects.create(
        order=order,
        dimension=dimension,
        status=status,
        message=message,
        created_by=by_user,
    )


def checkout(
    cart,
    customer,
    discount_amount=Decimal('0'),
    context: PricingContext = None,
    message: str = '',
) -> Order:
    """Turn a cart into a persisted order.

    Each line is priced once for the buyer; the result is copied into the
    OrderItem snapshot and never recomputed. Inventory is not reserved or
    decremented.

    Args:
        cart: Cart with at least one line
        customer: User placing the order
        discount_amount: Order-level discount, non-negative
        context: Pricing context; defaults to the customer's profile
        message: Optional note for the first status log entry

    Returns:
        Order: The created order with items and a pending fulfillment

    Raises:
        EmptyCartError: Cart has no lines
        CheckoutError: Invalid discount, quantity, an unavailable variant or
            a variant whose base price cannot be resolved
    """
    lines = list(cart)
    if not lines:
        raise EmptyCartError("Cannot check out an empty cart")

    discount = parse_price(discount_amount)
    if discount is None:
        raise CheckoutError(f"Invalid discount amount: {discount_amount!r}")

    if context is None:
        context = pricing_context_for(customer)

    priced_lines = []
    for line in lines:
        variant = line.variant
        if line.quantity < 1:
            raise CheckoutError(f"Invalid quantity {line.quantity} for {variant}")
        if variant.is_deleted or variant.product.is_deleted or not variant.product.is_active:
            raise CheckoutError(f"{variant} is no longer available")
        pricing = resolve_variant_pricing(variant, context)
        if pricing.is_fallback:
            # Display-only price; never sell at it
            logger.warning("Refusing checkout of %s: unusable base price %r", variant, variant.price)
            raise CheckoutError(f"{variant} has no valid price")
        priced_lines.append((line, pricing))

    with transaction.atomic():
        order = Order.objects.create(
            customer=customer,
            discount_amount=round_money(discount),
            estimated_delivery=timezone.now().date() + timedelta(days=get_estimated_delivery_days()),
        )

        items = [
            OrderItem.objects.create(
                order=order,
                variant=line.variant,
                product=line.variant.product,
                quantity=line.quantity,
                price=round_money(pricing.unit_price),
                original_price=round_money(pricing.base_price),
                applied_role=pricing.applied_role,
                size=line.size,
                customer_note=line.customer_note,
            )
            for line, pricing in priced_lines
        ]

        order.total_amount = calculate_order_total(items, order.discount_amount)
        update_fields = ['total_amount', 'updated_at']
        if order.total_amount == 0:
            order.payment_status = PaymentStatus.PAID
            update_fields.append('payment_status')
        order.save(update_fields=update_fields)

        Fulfillment.objects.create(order=order)
        _log_status(order, 'order', order.status, message or 'Order placed', customer)
        if order.payment_status == PaymentStatus.PAID:
            _log_status(order, 'payment', order.payment_status, 'No payment due', customer)

    logger.info(
        "Order %s placed by %s: %d line(s), total=%s",
        order.pk, customer, len(items), order.total_amount,
    )
    return order


# =============================================================================
# Order status
# =============================================================================

def _lock_order(order: Order) -> Order:
    return Order.all_objects.select_for_update().get(pk=order.pk)


def _cancel_fulfillment(order: Order, by_user=None) -> None:
    fulfillment = Fulfillment.objects.filter(order=order).first()
    if fulfillment is None or fulfillment.status in FULFILLMENT_TERMINAL_STATES:
        return
    fulfillment.status = FulfillmentStatus.CANCELLED
    fulfillment.save(update_fields=['status', 'updated_at'])
    _log_status(order, 'fulfillment', fulfillment.status, 'Order cancelled', by_user)


def get_allowed_transitions(order: Order) -> list[str]:
    """Order states currently reachable, honouring the payment guard."""
    return allowed_order_transitions(order.status, order.payment_status)


def transition_order(
    order: Order,
    to_status: str,
    cancellation_reason: str = None,
    by_user=None,
    message: str = '',
) -> Order:
    """
    Move an order to a new status.

    Cancelling requires a cancellation reason and also cancels an
    unfinished fulfillment. Delivering requires a PAID payment status.

    Returns:
        The updated Order (a fresh, locked copy)

    Raises:
        IllegalTransitionError: Edge not in the table or guard violated
        MissingCancellationReasonError: Cancelling without a reason
    """
    if to_status == OrderStatus.CANCELLED:
        return cancel_order(order, cancellation_reason, by_user=by_user, message=message)

    with transaction.atomic():
        locked = _lock_order(order)
        validate_order_transition(locked.status, locked.payment_status, to_status, cancellation_reason)

        from_status = locked.status
        locked.status = to_status
        update_fields = ['status', 'updated_at']
        if to_status == OrderStatus.PROCESSING and by_user is not None and locked.processed_by_id is None:
            locked.processed_by = by_user
            update_fields.append('processed_by')
        locked.save(update_fields=update_fields)
        _log_status(locked, 'order', to_status, message, by_user)

    logger.info("Order %s: %s -> %s", locked.pk, from_status, to_status)
    return locked


def cancel_order(
    order: Order,
    reason: str,
    by_user=None,
    message: str = '',
    refund: bool = False,
) -> Order:
    """
    Cancel an order, optionally refunding its payments in the same step.

    Both changes are validated before either is written.

    Args:
        order: Order to cancel
        reason: CancellationReason value
        by_user: Staff member or customer cancelling
        message: Note for the status log
        refund: Also move payment status to REFUNDED

    Raises:
        MissingCancellationReasonError: reason is empty or unknown
        IllegalTransitionError: Order already terminal, or nothing to refund
    """
    with transaction.atomic():
        locked = _lock_order(order)
        validate_order_transition(
            locked.status, locked.payment_status, OrderStatus.CANCELLED, reason,
        )
        if refund:
            validate_payment_transition(
                locked.payment_status, PaymentStatus.REFUNDED, OrderStatus.CANCELLED,
            )

        from_status = locked.status
        locked.status = OrderStatus.CANCELLED
        locked.cancellation_reason = reason
        update_fields = ['status', 'cancellation_reason', 'updated_at']
        if refund:
            locked.payment_status = PaymentStatus.REFUNDED
            update_fields.append('payment_status')
        locked.save(update_fields=update_fields)

        _log_status(locked, 'order', OrderStatus.CANCELLED, message or reason, by_user)
        if refund:
            _log_status(locked, 'payment', PaymentStatus.REFUNDED, message, by_user)
        _cancel_fulfillment(locked, by_user)

    logger.info("Order %s: %s -> CANCELLED (%s)", locked.pk, from_status, reason)
    return locked


# =============================================================================
# Payment status
# =============================================================================

def transition_payment_status(
    order: Order,
    to_status: str,
    by_user=None,
    message: str = '',
) -> Order:
    """
    Move an order's aggregate payment status.

    REFUNDED is only accepted on an order that is already cancelled; use
    cancel_order(refund=True) to do both at once.
    """
    with transaction.atomic():
        locked = _lock_order(order)
        validate_payment_transition(locked.payment_status, to_status, locked.status)

        from_status = locked.payment_status
        locked.payment_status = to_status
        locked.save(update_fields=['payment_status', 'updated_at'])
        _log_status(locked, 'payment', to_status, message, by_user)

    logger.info("Order %s payment: %s -> %s", locked.pk, from_status, to_status)
    return locked


def derive_payment_status(order: Order) -> str:
    """Aggregate payment status implied by the order's completed payments."""
    paid = order.payments.filter(
        status=PaymentRecordStatus.COMPLETED,
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0')

    if paid >= order.total_amount:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.DOWNPAYMENT
    return PaymentStatus.PENDING


def record_payment(
    order: Order,
    amount,
    method: str = PaymentMethod.CASH,
    by_user=None,
    status: str = PaymentRecordStatus.COMPLETED,
    transaction_id: str = '',
    reference_no: str = '',
    last4: str = '',
) -> Payment:
    """
    Store a payment and advance the order's payment status if it moved.

    Payment status only ever moves forward along the payment table; a
    failed or pending payment record leaves it where it is.

    Raises:
        PaymentError: Non-positive amount, or order cancelled/refunded
    """
    parsed = parse_price(amount)
    if parsed is None or parsed <= 0:
        raise PaymentError(f"Invalid payment amount: {amount!r}")

    with transaction.atomic():
        locked = _lock_order(order)
        if locked.status == OrderStatus.CANCELLED or locked.payment_status == PaymentStatus.REFUNDED:
            raise PaymentError(f"Cannot record a payment on order {locked.pk} ({locked.status})")

        payment = Payment.objects.create(
            order=locked,
            customer=locked.customer,
            processed_by=by_user,
            amount=round_money(parsed),
            method=method,
            status=status,
            transaction_id=transaction_id,
            reference_no=reference_no,
            last4=last4,
        )

        derived = derive_payment_status(locked)
        if derived != locked.payment_status and derived in PAYMENT_TRANSITIONS[locked.payment_status]:
            locked.payment_status = derived
            locked.save(update_fields=['payment_status', 'updated_at'])
            _log_status(locked, 'payment', derived, f"Payment of {payment.amount} received", by_user)

    logger.info(
        "Payment %s of %s recorded on order %s (payment status %s)",
        payment.pk, payment.amount, locked.pk, locked.payment_status,
    )
    return payment


# =============================================================================
# Fulfillment status
# =============================================================================

def get_allowed_fulfillment_transitions(fulfillment: Fulfillment) -> list[str]:
    return allowed_fulfillment_transitions(fulfillment.status)


def transition_fulfillment(
    fulfillment: Fulfillment,
    to_status: str,
    by_user=None,
    message: str = '',
) -> Fulfillment:
    """
    Move a fulfillment to a new status.

    Sets started_at when production starts and completed_at when it is
    completed.

    Raises:
        IllegalTransitionError: Edge not in the fulfillment table
    """
    with transaction.atomic():
        order = Order.all_objects.select_for_update().get(pk=fulfillment.order_id)
        locked = Fulfillment.all_objects.get(pk=fulfillment.pk)
        validate_fulfillment_transition(locked.status, to_status)

        from_status = locked.status
        locked.status = to_status
        update_fields = ['status', 'updated_at']
        if to_status == FulfillmentStatus.PRODUCTION:
            locked.started_at = timezone.now()
            update_fields.append('started_at')
        elif to_status == FulfillmentStatus.COMPLETED:
            locked.completed_at = timezone.now()
            update_fields.append('completed_at')
        locked.save(update_fields=update_fields)
        _log_status(order, 'fulfillment', to_status, message, by_user)

    logger.info("Fulfillment %s (order %s): %s -> %s", locked.pk, order.pk, from_status, to_status)
    return locked


# =============================================================================
# Non-raising entry points
# =============================================================================

def _request(func, target, *args, **kwargs) -> TransitionResult:
    try:
        return TransitionResult(ok=True, value=func(target, *args, **kwargs))
    except LifecycleError as e:
        logger.warning("Rejected %s on %r: %s", func.__name__, target, e)
        return TransitionResult(ok=False, value=target, error=e)


def request_transition(
    order: Order,
    target_status: str,
    cancellation_reason: str = None,
    by_user=None,
    message: str = '',
) -> TransitionResult:
    """transition_order, returning a TransitionResult instead of raising."""
    return _request(
        transition_order, order, target_status,
        cancellation_reason=cancellation_reason, by_user=by_user, message=message,
    )


def request_payment_transition(order: Order, target_status: str, by_user=None, message: str = '') -> TransitionResult:
    return _request(transition_payment_status, order, target_status, by_user=by_user, message=message)


def request_fulfillment_transition(
    fulfillment: Fulfillment,
    target_status: str,
    by_user=None,
    message: str = '',
) -> TransitionResult:
    return _request(transition_fulfillment, fulfillment, target_status, by_user=by_user, message=message)
