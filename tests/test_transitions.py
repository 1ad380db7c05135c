"""Tests for order, payment and fulfillment transition services."""
from decimal import Decimal

import pytest

from django_storefront.exceptions import (
    IllegalTransitionError,
    MissingCancellationReasonError,
    PaymentError,
)
from django_storefront.models import Order, OrderStatusLog, Payment
from django_storefront.services import (
    cancel_order,
    derive_payment_status,
    get_allowed_fulfillment_transitions,
    get_allowed_transitions,
    record_payment,
    request_fulfillment_transition,
    request_payment_transition,
    request_transition,
    transition_fulfillment,
    transition_order,
    transition_payment_status,
)


def _advance_to_ready(order, by_user=None):
    order = transition_order(order, "PROCESSING", by_user=by_user)
    return transition_order(order, "READY", by_user=by_user)


@pytest.mark.django_db
class TestTransitionOrder:
    """Test suite for transition_order."""

    def test_forward_transition_updates_and_logs(self, order, owner):
        result = transition_order(order, "PROCESSING", by_user=owner, message="Printing")

        assert result.status == "PROCESSING"
        assert result.processed_by == owner
        order.refresh_from_db()
        assert order.status == "PROCESSING"
        log = order.status_logs.last()
        assert (log.dimension, log.status, log.message, log.created_by) == (
            "order", "PROCESSING", "Printing", owner,
        )

    def test_skip_rejected_and_unmodified(self, order):
        with pytest.raises(IllegalTransitionError):
            transition_order(order, "READY")

        order.refresh_from_db()
        assert order.status == "PENDING"
        assert order.status_logs.count() == 1

    def test_regression_rejected(self, order):
        order = transition_order(order, "PROCESSING")

        with pytest.raises(IllegalTransitionError):
            transition_order(order, "PENDING")

    def test_delivered_requires_paid(self, order):
        order = _advance_to_ready(order)

        with pytest.raises(IllegalTransitionError):
            transition_order(order, "DELIVERED")

        record_payment(order, Decimal("800"))
        order = transition_order(order, "DELIVERED")
        assert order.status == "DELIVERED"

    def test_delivered_is_terminal(self, order):
        order = _advance_to_ready(order)
        record_payment(order, Decimal("800"))
        order = transition_order(order, "DELIVERED")

        assert get_allowed_transitions(order) == []
        with pytest.raises(IllegalTransitionError):
            transition_order(order, "CANCELLED", cancellation_reason="OTHERS")

    def test_state_is_reread_under_lock(self, order):
        """A stale in-memory copy cannot replay an already-applied edge."""
        stale = Order.objects.get(pk=order.pk)
        transition_order(order, "PROCESSING")

        with pytest.raises(IllegalTransitionError) as exc_info:
            transition_order(stale, "PROCESSING")
        assert exc_info.value.from_state == "PROCESSING"

    def test_stale_copy_cannot_resurrect_cancelled_order(self, order):
        stale = Order.objects.get(pk=order.pk)
        cancel_order(order, "CUSTOMER_REQUEST")

        with pytest.raises(IllegalTransitionError):
            transition_order(stale, "PROCESSING")

        order.refresh_from_db()
        assert order.status == "CANCELLED"


@pytest.mark.django_db
class TestCancelOrder:
    """Test suite for cancellation."""

    def test_cancel_sets_reason_and_cancels_fulfillment(self, order, owner):
        result = transition_order(order, "CANCELLED", cancellation_reason="OUT_OF_STOCK", by_user=owner)

        assert result.status == "CANCELLED"
        assert result.cancellation_reason == "OUT_OF_STOCK"
        assert result.fulfillment.status == "CANCELLED"
        assert list(
            OrderStatusLog.objects.filter(order=order).values_list("dimension", "status")
        ) == [("order", "PENDING"), ("order", "CANCELLED"), ("fulfillment", "CANCELLED")]

    def test_cancel_without_reason_rejected(self, order):
        with pytest.raises(MissingCancellationReasonError):
            transition_order(order, "CANCELLED")

        order.refresh_from_db()
        assert order.status == "PENDING"
        assert order.cancellation_reason is None
        assert order.fulfillment.status == "PENDING"

    def test_cancel_from_ready(self, order):
        order = _advance_to_ready(order)

        order = cancel_order(order, "PAYMENT_FAILED")

        assert order.status == "CANCELLED"

    def test_completed_fulfillment_left_alone(self, order):
        fulfillment = order.fulfillment
        for status in ("PRODUCTION", "READY", "COMPLETED"):
            fulfillment = transition_fulfillment(fulfillment, status)

        cancel_order(order, "OTHERS")

        fulfillment.refresh_from_db()
        assert fulfillment.status == "COMPLETED"

    def test_cancel_with_refund(self, order):
        record_payment(order, Decimal("300"))

        order = cancel_order(order, "CUSTOMER_REQUEST", refund=True)

        assert order.status == "CANCELLED"
        assert order.payment_status == "REFUNDED"

    def test_refund_without_payment_rejects_whole_cancel(self, order):
        with pytest.raises(IllegalTransitionError):
            cancel_order(order, "CUSTOMER_REQUEST", refund=True)

        order.refresh_from_db()
        assert order.status == "PENDING"
        assert order.payment_status == "PENDING"
        assert order.cancellation_reason is None


@pytest.mark.django_db
class TestRequestTransition:
    """The non-raising entry points used by UI layers."""

    def test_pending_to_delivered_rejected(self, order):
        result = request_transition(order, "DELIVERED")

        assert result.ok is False
        assert isinstance(result.error, IllegalTransitionError)
        assert result.value is order
        order.refresh_from_db()
        assert order.status == "PENDING"

    def test_pending_to_cancelled_accepted(self, order):
        result = request_transition(order, "CANCELLED", cancellation_reason="CUSTOMER_REQUEST")

        assert result.ok is True
        assert result.error is None
        assert result.value.status == "CANCELLED"
        assert result.value.cancellation_reason == "CUSTOMER_REQUEST"

    def test_missing_reason_reported(self, order):
        result = request_transition(order, "CANCELLED")

        assert result.ok is False
        assert isinstance(result.error, MissingCancellationReasonError)

    def test_payment_request(self, order):
        record_payment(order, Decimal("800"))

        result = request_payment_transition(order, "REFUNDED")

        assert result.ok is False
        assert "cancelled" in str(result.error)

    def test_fulfillment_request(self, order):
        result = request_fulfillment_transition(order.fulfillment, "COMPLETED")
        assert result.ok is False

        result = request_fulfillment_transition(order.fulfillment, "PRODUCTION")
        assert result.ok is True
        assert result.value.status == "PRODUCTION"


@pytest.mark.django_db
class TestPayments:
    """Test suite for payment recording and aggregate payment status."""

    def test_partial_payment_is_downpayment(self, order, owner):
        payment = record_payment(order, Decimal("300"), method="CASH", by_user=owner)

        order.refresh_from_db()
        assert payment.customer == order.customer
        assert payment.processed_by == owner
        assert order.payment_status == "DOWNPAYMENT"

    def test_payments_accumulate_to_paid(self, order):
        record_payment(order, Decimal("300"))
        record_payment(order, "500.00", method="BANK_TRANSFER", reference_no="BT-1")

        order.refresh_from_db()
        assert order.payment_status == "PAID"
        assert Payment.objects.filter(order=order).count() == 2
        assert list(
            order.status_logs.filter(dimension="payment").values_list("status", flat=True)
        ) == ["DOWNPAYMENT", "PAID"]

    def test_full_payment_skips_downpayment(self, order):
        record_payment(order, Decimal("800"))

        order.refresh_from_db()
        assert order.payment_status == "PAID"

    def test_failed_payment_does_not_count(self, order):
        record_payment(order, Decimal("800"), status="FAILED")

        order.refresh_from_db()
        assert order.payment_status == "PENDING"
        assert derive_payment_status(order) == "PENDING"

    @pytest.mark.parametrize("amount", [0, "-5", "abc", None])
    def test_invalid_amount_rejected(self, order, amount):
        with pytest.raises(PaymentError):
            record_payment(order, amount)

    def test_payment_on_cancelled_order_rejected(self, order):
        cancel_order(order, "CUSTOMER_REQUEST")

        with pytest.raises(PaymentError):
            record_payment(order, Decimal("100"))
        assert not Payment.objects.exists()

    def test_refund_after_cancellation(self, order):
        record_payment(order, Decimal("800"))
        order = cancel_order(order, "OUT_OF_STOCK")

        order = transition_payment_status(order, "REFUNDED")

        assert order.payment_status == "REFUNDED"

    def test_refund_on_open_order_rejected(self, order):
        record_payment(order, Decimal("800"))

        with pytest.raises(IllegalTransitionError):
            transition_payment_status(order, "REFUNDED")

        order.refresh_from_db()
        assert order.payment_status == "PAID"


@pytest.mark.django_db
class TestFulfillment:
    """Test suite for fulfillment transitions."""

    def test_full_path_sets_timestamps(self, order):
        fulfillment = order.fulfillment
        assert get_allowed_fulfillment_transitions(fulfillment) == ["PRODUCTION", "CANCELLED"]

        fulfillment = transition_fulfillment(fulfillment, "PRODUCTION")
        assert fulfillment.started_at is not None
        fulfillment = transition_fulfillment(fulfillment, "READY")
        fulfillment = transition_fulfillment(fulfillment, "COMPLETED")

        assert fulfillment.status == "COMPLETED"
        assert fulfillment.completed_at is not None
        assert get_allowed_fulfillment_transitions(fulfillment) == []

    def test_regression_rejected(self, order):
        fulfillment = transition_fulfillment(order.fulfillment, "PRODUCTION")
        fulfillment = transition_fulfillment(fulfillment, "READY")

        with pytest.raises(IllegalTransitionError):
            transition_fulfillment(fulfillment, "PRODUCTION")

        fulfillment.refresh_from_db()
        assert fulfillment.status == "READY"

    def test_cancelled_is_terminal(self, order):
        fulfillment = transition_fulfillment(order.fulfillment, "CANCELLED")

        with pytest.raises(IllegalTransitionError):
            transition_fulfillment(fulfillment, "PRODUCTION")
