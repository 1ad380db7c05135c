"""Tests for order total verification and the audit_order_totals command."""
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from django_storefront.exceptions import OrderTotalMismatchError
from django_storefront.models import Order
from django_storefront.services import find_total_mismatches, verify_order_total


def _corrupt(order, total="999.00"):
    Order.all_objects.filter(pk=order.pk).update(total_amount=Decimal(total))
    order.refresh_from_db()
    return order


@pytest.mark.django_db
class TestVerifyOrderTotal:

    def test_consistent_order_passes(self, order):
        assert verify_order_total(order) == Decimal("800.00")

    def test_mismatch_raises(self, order):
        order = _corrupt(order)

        with pytest.raises(OrderTotalMismatchError) as exc_info:
            verify_order_total(order)

        assert exc_info.value.stored == Decimal("999.00")
        assert exc_info.value.expected == Decimal("800.00")

    def test_mismatch_not_corrected(self, order):
        order = _corrupt(order)

        assert find_total_mismatches() == [(order, Decimal("999.00"), Decimal("800.00"))]
        order.refresh_from_db()
        assert order.total_amount == Decimal("999.00")

    def test_soft_deleted_orders_still_checked(self, order):
        order = _corrupt(order)
        order.delete()

        assert len(find_total_mismatches()) == 1


@pytest.mark.django_db
class TestAuditOrderTotalsCommand:
    """Test suite for audit_order_totals command."""

    def test_reports_success(self, order):
        out = StringIO()
        call_command('audit_order_totals', stdout=out)

        assert 'Checked 1 orders, all totals consistent' in out.getvalue()

    def test_fails_on_mismatch(self, order):
        _corrupt(order)
        err = StringIO()

        with pytest.raises(CommandError) as exc_info:
            call_command('audit_order_totals', stdout=StringIO(), stderr=err)

        assert '1 of 1 orders' in str(exc_info.value)
        assert f'Order {order.pk}' in err.getvalue()

    def test_exclude_deleted(self, order):
        _corrupt(order)
        order.delete()

        out = StringIO()
        call_command('audit_order_totals', '--exclude-deleted', stdout=out)

        assert 'Checked 0 orders' in out.getvalue()

    def test_filter_by_order(self, order, student, variant):
        _corrupt(order)
        other = Order.objects.create(customer=student)

        out = StringIO()
        call_command('audit_order_totals', '--order', str(other.pk), stdout=out)

        assert 'Checked 1 orders' in out.getvalue()
