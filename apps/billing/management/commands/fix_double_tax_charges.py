"""
Management command to find and correct double-taxed room charges.

Usage:
    python manage.py fix_double_tax_charges --dry-run
    python manage.py fix_double_tax_charges --tenant grand-palace
"""

from django.core.management.base import BaseCommand, CommandError

from apps.billing.services import scan_double_tax_charges, fix_double_tax_charges
from apps.tenants.models import Tenant


class Command(BaseCommand):
    help = 'Correct room charges where taxes were applied on an already-taxed amount'

    def add_arguments(self, parser):
        parser.add_argument(
            '--tenant',
            help='Hotel slug to process (default: all hotels)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List affected charges without changing them',
        )

    def handle(self, *args, **options):
        tenants = Tenant.objects.all()
        if options['tenant']:
            tenants = tenants.filter(hotel_slug=options['tenant'])
            if not tenants.exists():
                raise CommandError(f"No hotel with slug '{options['tenant']}'")

        total_charges = 0
        for tenant in tenants:
            items = scan_double_tax_charges(tenant=tenant)
            if not items:
                continue

            self.stdout.write(f'\n{tenant.hotel_name}: {len(items)} charge(s)')
            for item in items:
                self.stdout.write(
                    f"  - {item['folio_number']} | {item['description']} | "
                    f"{item['current_amount']} -> {item['calculated_total_amount']} "
                    f"(over by {item['difference']})"
                )

            if not options['dry_run']:
                result = fix_double_tax_charges(tenant=tenant, items=items)
                total_charges += result['charges_fixed']

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        self.stdout.write(self.style.SUCCESS(f'\nCorrected {total_charges} charge(s).'))
