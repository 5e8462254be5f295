import pytest
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Role
from apps.tenants.models import Tenant, HotelSettings, SubscriptionStatus
from apps.rooms.models import Room, RoomType, RoomStatus
from apps.reservations.services import create_reservation, check_in


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Build an API client authenticated as the given user."""
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for


# =============================================================================
# Hotels
# =============================================================================

def _make_hotel(name, slug):
    tenant = Tenant.objects.create(
        hotel_name=name,
        hotel_slug=slug,
        subscription_status=SubscriptionStatus.ACTIVE,
    )
    HotelSettings.objects.create(
        tenant=tenant,
        vat_rate=Decimal('7.50'),
        service_charge_rate=Decimal('10.00'),
    )
    return tenant


@pytest.fixture
def hotel(db):
    """Active hotel with 7.5% VAT and 10% service charge on rooms."""
    return _make_hotel('Lagoon Hotel', 'lagoon-hotel')


@pytest.fixture
def other_hotel(db):
    """A second hotel for isolation checks."""
    return _make_hotel('Harbour Inn', 'harbour-inn')


# =============================================================================
# Staff
# =============================================================================

@pytest.fixture
def make_staff(db):
    """Create a staff member of a hotel with a role."""
    def _make_staff(tenant, role, email=None, **extra):
        email = email or f"{role.lower()}@{tenant.hotel_slug}.example.com"
        return User.objects.create_user(
            email=email,
            password='TestPass123!',
            display_name=role.replace('_', ' ').title(),
            tenant=tenant,
            role=role,
            **extra,
        )
    return _make_staff


@pytest.fixture
def owner(hotel, make_staff):
    return make_staff(hotel, Role.OWNER)


@pytest.fixture
def manager(hotel, make_staff):
    return make_staff(hotel, Role.MANAGER)


@pytest.fixture
def accountant(hotel, make_staff):
    return make_staff(hotel, Role.ACCOUNTANT)


@pytest.fixture
def front_desk(hotel, make_staff):
    return make_staff(hotel, Role.FRONT_DESK)


@pytest.fixture
def housekeeper(hotel, make_staff):
    return make_staff(hotel, Role.HOUSEKEEPING)


@pytest.fixture
def technician(hotel, make_staff):
    return make_staff(hotel, Role.MAINTENANCE)


@pytest.fixture
def pos_staff(hotel, make_staff):
    return make_staff(hotel, Role.POS)


@pytest.fixture
def other_manager(other_hotel, make_staff):
    return make_staff(other_hotel, Role.MANAGER)


@pytest.fixture
def super_admin(db):
    return User.objects.create_superuser(
        email='admin@platform.example.com',
        password='TestPass123!',
    )


@pytest.fixture
def owner_client(client_for, owner):
    return client_for(owner)


@pytest.fixture
def manager_client(client_for, manager):
    return client_for(manager)


@pytest.fixture
def accountant_client(client_for, accountant):
    return client_for(accountant)


@pytest.fixture
def front_desk_client(client_for, front_desk):
    return client_for(front_desk)


@pytest.fixture
def housekeeper_client(client_for, housekeeper):
    return client_for(housekeeper)


@pytest.fixture
def technician_client(client_for, technician):
    return client_for(technician)


@pytest.fixture
def pos_client(client_for, pos_staff):
    return client_for(pos_staff)


@pytest.fixture
def other_manager_client(client_for, other_manager):
    return client_for(other_manager)


@pytest.fixture
def super_admin_client(client_for, super_admin):
    return client_for(super_admin)


# =============================================================================
# Rooms & stays
# =============================================================================

@pytest.fixture
def room_type(hotel):
    return RoomType.objects.create(
        tenant=hotel,
        name='Deluxe',
        base_rate=Decimal('10000.00'),
        max_occupancy=2,
    )


@pytest.fixture
def room(hotel, room_type):
    return Room.objects.create(tenant=hotel, room_number='101', floor=1, room_type=room_type)


@pytest.fixture
def second_room(hotel, room_type):
    return Room.objects.create(tenant=hotel, room_number='102', floor=1, room_type=room_type)


@pytest.fixture
def other_hotel_room(other_hotel):
    room_type = RoomType.objects.create(tenant=other_hotel, name='Standard', base_rate=Decimal('5000.00'))
    return Room.objects.create(tenant=other_hotel, room_number='101', room_type=room_type)


@pytest.fixture
def reservation(hotel, room, front_desk):
    """Confirmed one-night stay arriving today in room 101."""
    today = timezone.localdate()
    return create_reservation(
        tenant=hotel,
        actor=front_desk,
        guest_name='Ada Obi',
        guest_email='ada@example.com',
        check_in_date=today,
        check_out_date=today + timedelta(days=1),
        room_id=room.id,
    )


@pytest.fixture
def checked_in_reservation(hotel, reservation, front_desk):
    """Guest checked into room 101 with the night posted (11,825.00)."""
    return check_in(tenant=hotel, reservation_id=reservation.id, actor=front_desk)


@pytest.fixture
def dirty_room(room):
    Room.objects.filter(id=room.id).update(status=RoomStatus.DIRTY)
    room.refresh_from_db()
    return room
