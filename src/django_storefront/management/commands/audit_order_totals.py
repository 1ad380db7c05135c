"""Management command to verify stored order totals against their line items."""

from django.core.management.base import BaseCommand, CommandError

from django_storefront.models import Order
from django_storefront.services import find_total_mismatches


class Command(BaseCommand):
    help = 'Recompute every order total from its line items and report mismatches'

    def add_arguments(self, parser):
        parser.add_argument(
            '--order',
            action='append',
            dest='order_ids',
            type=int,
            help='Only check this order id (may be repeated)'
        )
        parser.add_argument(
            '--exclude-deleted',
            action='store_true',
            help='Skip soft-deleted orders'
        )

    def handle(self, *args, **options):
        manager = Order.objects if options['exclude_deleted'] else Order.all_objects
        qs = manager.all()
        if options['order_ids']:
            qs = qs.filter(pk__in=options['order_ids'])

        checked = qs.count()
        mismatches = find_total_mismatches(qs)

        for order, stored, expected in mismatches:
            self.stderr.write(
                f'Order {order.pk}: stored total {stored} != line items {expected}'
            )

        if mismatches:
            raise CommandError(
                f'{len(mismatches)} of {checked} orders have inconsistent totals'
            )

        self.stdout.write(
            self.style.SUCCESS(f'Checked {checked} orders, all totals consistent')
        )
