"""
Management command to detect and repair room/reservation status drift.

Intended to run from cron for every hotel, or on demand for one.

Usage:
    python manage.py cleanup_room_status
    python manage.py cleanup_room_status --tenant grand-palace --dry-run
    python manage.py cleanup_room_status --sync
"""

from django.core.management.base import BaseCommand, CommandError

from apps.rooms.services import detect_inconsistencies, fix_inconsistencies, sync_room_statuses
from apps.tenants.models import Tenant


class Command(BaseCommand):
    help = 'Detect and fix rooms whose status disagrees with their reservations'

    def add_arguments(self, parser):
        parser.add_argument(
            '--tenant',
            help='Hotel slug to process (default: all hotels)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would change without making changes',
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Also resync available/reserved/occupied statuses from reservations',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        tenants = Tenant.objects.all()
        if options['tenant']:
            tenants = tenants.filter(hotel_slug=options['tenant'])
            if not tenants.exists():
                raise CommandError(f"No hotel with slug '{options['tenant']}'")

        total_fixed = 0
        for tenant in tenants:
            items = detect_inconsistencies(tenant=tenant)

            if items:
                self.stdout.write(f'\n{tenant.hotel_name}: {len(items)} inconsistent room(s)')
                for item in items:
                    self.stdout.write(
                        f"  - Room {item['room_number']} | status {item['room_status']} | "
                        f"{item['active_reservations']} active reservation(s) | "
                        f"expected {item['expected_status']}"
                    )

            if not dry_run and items:
                results = fix_inconsistencies(tenant=tenant, items=items)
                for result in results:
                    style = self.style.SUCCESS if result['success'] else self.style.ERROR
                    self.stdout.write(style(f"    Room {result['room_number']}: {result['action']}"))
                total_fixed += sum(1 for r in results if r['success'])

            if options['sync']:
                updates = sync_room_statuses(tenant=tenant, dry_run=dry_run)
                for update in updates:
                    self.stdout.write(
                        f"  ~ Room {update['room_number']}: "
                        f"{update['current_status']} -> {update['correct_status']}"
                    )

        if dry_run:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        self.stdout.write(self.style.SUCCESS(f'\nFixed {total_fixed} room(s).'))
