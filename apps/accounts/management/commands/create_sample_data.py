"""
Management command to create a demo hotel for trying out the API.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --clear

This creates:
- A platform administrator
- One hotel (Lagoon Demo Hotel) with an owner and one staff member per role
- 3 room types and 12 rooms over 3 floors
- Reservations: arrivals today, a checked-in guest with a folio, a future booking
- A restaurant menu
- Housekeeping supplies
- QR codes for two rooms and the lobby
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, Role
from apps.housekeeping.models import Supply, SupplyCategory
from apps.pos.models import MenuCategory, MenuItem
from apps.qr.models import ScanType
from apps.qr.services import create_qr_code
from apps.reservations.services import create_reservation, check_in
from apps.rooms.models import Room, RoomType
from apps.tenants.models import Tenant
from apps.tenants.services import create_tenant_with_owner

DEMO_HOTEL = 'Lagoon Demo Hotel'
DEMO_DOMAIN = 'lagoon-demo.example.com'
STAFF_PASSWORD = 'password123'


class Command(BaseCommand):
    help = 'Create a demo hotel with rooms, staff, guests and a menu'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete the demo hotel before creating it again',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing demo data...')
            self.clear_data()

        if Tenant.objects.filter(hotel_name=DEMO_HOTEL).exists():
            self.stdout.write(self.style.WARNING('Demo hotel already exists, use --clear to recreate it'))
            return

        self.stdout.write('Creating sample data...')

        self.create_admin()
        hotel, staff = self.create_hotel()
        rooms = self.create_rooms(hotel)
        self.create_reservations(hotel, staff['front_desk'], rooms)
        self.create_menu(hotel)
        self.create_supplies(hotel)
        self.create_qr_codes(hotel, staff['owner'], rooms)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (platform administrator)')
        for member in staff.values():
            self.stdout.write(f'  {member.email} / {STAFF_PASSWORD} ({member.get_role_display()})')

    def clear_data(self):
        """Remove the demo hotel; everything it owns cascades."""
        Tenant.objects.filter(hotel_name=DEMO_HOTEL).delete()
        User.objects.filter(email__endswith=f'@{DEMO_DOMAIN}').delete()

    def create_admin(self):
        self.stdout.write('  Creating platform administrator...')
        admin, created = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'display_name': 'Platform Admin',
                'is_staff': True,
                'is_superuser': True,
                'role': Role.SUPER_ADMIN,
            }
        )
        if created:
            admin.set_password('admin123')
            admin.save()
        return admin

    def create_hotel(self):
        """Create the hotel, its owner and one account per staff role."""
        self.stdout.write('  Creating hotel and staff...')

        hotel, owner = create_tenant_with_owner(
            hotel_name=DEMO_HOTEL,
            owner_email=f'owner@{DEMO_DOMAIN}',
            owner_password=STAFF_PASSWORD,
            owner_name='Ngozi Owner',
            city='Lagos',
            trial=False,
        )

        staff = {'owner': owner}
        for key, role, name in [
            ('manager', Role.MANAGER, 'Tunde Manager'),
            ('accountant', Role.ACCOUNTANT, 'Amaka Accounts'),
            ('front_desk', Role.FRONT_DESK, 'Femi Frontdesk'),
            ('housekeeping', Role.HOUSEKEEPING, 'Kemi Housekeeping'),
            ('maintenance', Role.MAINTENANCE, 'Segun Maintenance'),
            ('pos', Role.POS, 'Bisi Restaurant'),
        ]:
            staff[key] = User.objects.create_user(
                email=f'{key.replace("_", "")}@{DEMO_DOMAIN}',
                password=STAFF_PASSWORD,
                display_name=name,
                tenant=hotel,
                role=role,
            )
        return hotel, staff

    def create_rooms(self, hotel):
        self.stdout.write('  Creating rooms...')

        room_types = {
            name: RoomType.objects.create(
                tenant=hotel,
                name=name,
                base_rate=rate,
                max_occupancy=occupancy,
                amenities=amenities,
            )
            for name, rate, occupancy, amenities in [
                ('Standard', Decimal('25000.00'), 2, ['wifi', 'tv']),
                ('Deluxe', Decimal('40000.00'), 2, ['wifi', 'tv', 'minibar']),
                ('Suite', Decimal('75000.00'), 4, ['wifi', 'tv', 'minibar', 'lounge']),
            ]
        }

        rooms = []
        for floor in (1, 2, 3):
            for number in range(1, 5):
                if floor == 3:
                    room_type = room_types['Suite']
                elif number <= 2:
                    room_type = room_types['Standard']
                else:
                    room_type = room_types['Deluxe']
                rooms.append(Room.objects.create(
                    tenant=hotel,
                    room_number=f'{floor}0{number}',
                    floor=floor,
                    room_type=room_type,
                ))
        return rooms

    def create_reservations(self, hotel, front_desk, rooms):
        """Two arrivals today, one guest in house and one future booking."""
        self.stdout.write('  Creating reservations...')
        today = timezone.localdate()

        in_house = create_reservation(
            tenant=hotel,
            actor=front_desk,
            guest_name='Chidi Okafor',
            guest_email='chidi@example.com',
            guest_phone='+2348000000001',
            check_in_date=today,
            check_out_date=today + timedelta(days=2),
            room_id=rooms[0].id,
        )
        check_in(tenant=hotel, reservation_id=in_house.id, actor=front_desk)

        for guest_name, room in [('Zainab Bello', rooms[1]), ('Emeka Eze', rooms[4])]:
            create_reservation(
                tenant=hotel,
                actor=front_desk,
                guest_name=guest_name,
                check_in_date=today,
                check_out_date=today + timedelta(days=1),
                room_id=room.id,
            )

        create_reservation(
            tenant=hotel,
            actor=front_desk,
            guest_name='Ifeoma Nwosu',
            guest_email='ifeoma@example.com',
            check_in_date=today + timedelta(days=7),
            check_out_date=today + timedelta(days=10),
            room_id=rooms[8].id,
            special_requests='Late arrival',
        )

    def create_menu(self, hotel):
        self.stdout.write('  Creating restaurant menu...')

        menu = {
            'Mains': [
                ('Jollof rice with chicken', Decimal('6500.00'), 20),
                ('Pounded yam and egusi', Decimal('7500.00'), 25),
                ('Grilled fish', Decimal('9000.00'), 30),
            ],
            'Drinks': [
                ('Chapman', Decimal('2500.00'), 5),
                ('Fresh orange juice', Decimal('2000.00'), 5),
                ('Bottled water', Decimal('500.00'), 1),
            ],
        }
        for order, (category_name, items) in enumerate(menu.items(), start=1):
            category = MenuCategory.objects.create(tenant=hotel, name=category_name, display_order=order)
            for name, price, minutes in items:
                MenuItem.objects.create(
                    tenant=hotel,
                    category=category,
                    name=name,
                    price=price,
                    preparation_time=minutes,
                )

    def create_supplies(self, hotel):
        self.stdout.write('  Creating housekeeping supplies...')

        for name, category, unit, stock, minimum in [
            ('Bath towels', SupplyCategory.BATHROOM, 'piece', 120, 40),
            ('Bed sheets', SupplyCategory.BEDDING, 'set', 60, 20),
            ('Shampoo sachets', SupplyCategory.AMENITIES, 'piece', 30, 50),
            ('Floor cleaner', SupplyCategory.CLEANING, 'litre', 12, 5),
        ]:
            Supply.objects.create(
                tenant=hotel,
                name=name,
                category=category,
                unit=unit,
                current_stock=stock,
                minimum_stock=minimum,
            )

    def create_qr_codes(self, hotel, owner, rooms):
        self.stdout.write('  Creating QR codes...')

        for room in rooms[:2]:
            create_qr_code(tenant=hotel, label=f'Room {room.room_number}', actor=owner, room=room)
        create_qr_code(
            tenant=hotel,
            label='Lobby',
            actor=owner,
            scan_type=ScanType.LOBBY,
            services=['wifi-request', 'front-desk-call', 'feedback'],
        )
