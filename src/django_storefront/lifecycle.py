"""
Pure transition tables and validators for the order lifecycle.

Three dimensions are tracked per order: order status, aggregate payment
status and fulfillment status. Nothing here touches the database; the
service layer locks the order, calls these validators and only then writes.
"""

from .choices import (
    CancellationReason,
    FulfillmentStatus,
    OrderStatus,
    PaymentStatus,
)
from .exceptions import IllegalTransitionError, MissingCancellationReasonError


ORDER_TRANSITIONS: dict[str, list[str]] = {
    OrderStatus.PENDING: [OrderStatus.PROCESSING, OrderStatus.CANCELLED],
    OrderStatus.PROCESSING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [],
    OrderStatus.CANCELLED: [],
}

PAYMENT_TRANSITIONS: dict[str, list[str]] = {
    PaymentStatus.PENDING: [PaymentStatus.DOWNPAYMENT, PaymentStatus.PAID],
    PaymentStatus.DOWNPAYMENT: [PaymentStatus.PAID, PaymentStatus.REFUNDED],
    PaymentStatus.PAID: [PaymentStatus.REFUNDED],
    PaymentStatus.REFUNDED: [],
}

FULFILLMENT_TRANSITIONS: dict[str, list[str]] = {
    FulfillmentStatus.PENDING: [FulfillmentStatus.PRODUCTION, FulfillmentStatus.CANCELLED],
    FulfillmentStatus.PRODUCTION: [FulfillmentStatus.READY, FulfillmentStatus.CANCELLED],
    FulfillmentStatus.READY: [FulfillmentStatus.COMPLETED, FulfillmentStatus.CANCELLED],
    FulfillmentStatus.COMPLETED: [],
    FulfillmentStatus.CANCELLED: [],
}

ORDER_TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
FULFILLMENT_TERMINAL_STATES = frozenset({FulfillmentStatus.COMPLETED, FulfillmentStatus.CANCELLED})
PAYMENT_TERMINAL_STATES = frozenset({PaymentStatus.REFUNDED})


def _check_edge(transitions: dict[str, list[str]], terminal_states, from_state: str, to_state: str):
    if to_state not in transitions.get(from_state, []):
        if from_state in terminal_states:
            raise IllegalTransitionError(
                from_state, to_state,
                f"Cannot transition from terminal state '{from_state}'",
            )
        raise IllegalTransitionError(from_state, to_state)


def validate_order_transition(
    status: str,
    payment_status: str,
    to_status: str,
    cancellation_reason: str = None,
) -> None:
    """
    Validate an order status change against the table and the payment guard.

    Raises:
        IllegalTransitionError: Edge missing, or DELIVERED while not PAID
        MissingCancellationReasonError: CANCELLED without a known reason
    """
    _check_edge(ORDER_TRANSITIONS, ORDER_TERMINAL_STATES, status, to_status)

    if to_status == OrderStatus.CANCELLED:
        if cancellation_reason not in CancellationReason.values:
            raise MissingCancellationReasonError(status, to_status)
    elif cancellation_reason:
        raise IllegalTransitionError(
            status, to_status,
            f"A cancellation reason is only allowed when cancelling, not for '{to_status}'",
        )

    if to_status == OrderStatus.DELIVERED and payment_status != PaymentStatus.PAID:
        raise IllegalTransitionError(
            status, to_status,
            f"Order cannot be delivered while payment status is '{payment_status}'",
        )


def validate_payment_transition(payment_status: str, to_status: str, order_status: str) -> None:
    """
    Validate an aggregate payment status change.

    Refunds are only legal on a cancelled order; callers cancelling and
    refunding together pass the post-cancellation order status.
    """
    _check_edge(PAYMENT_TRANSITIONS, PAYMENT_TERMINAL_STATES, payment_status, to_status)

    if to_status == PaymentStatus.REFUNDED and order_status != OrderStatus.CANCELLED:
        raise IllegalTransitionError(
            payment_status, to_status,
            "Payments can only be refunded on a cancelled order",
        )
    if order_status == OrderStatus.CANCELLED and to_status != PaymentStatus.REFUNDED:
        raise IllegalTransitionError(
            payment_status, to_status,
            "A cancelled order can only move to a refunded payment status",
        )


def validate_fulfillment_transition(status: str, to_status: str) -> None:
    _check_edge(FULFILLMENT_TRANSITIONS, FULFILLMENT_TERMINAL_STATES, status, to_status)


def allowed_order_transitions(status: str, payment_status: str) -> list[str]:
    """Next order states that would currently pass validation (reason aside)."""
    allowed = []
    for to_status in ORDER_TRANSITIONS.get(status, []):
        if to_status == OrderStatus.DELIVERED and payment_status != PaymentStatus.PAID:
            continue
        allowed.append(to_status)
    return allowed


def allowed_fulfillment_transitions(status: str) -> list[str]:
    return list(FULFILLMENT_TRANSITIONS.get(status, []))
