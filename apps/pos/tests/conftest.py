import pytest
from decimal import Decimal

from apps.pos.models import MenuCategory, MenuItem
from apps.tenants.models import HotelSettings


@pytest.fixture
def taxed_restaurant(hotel):
    """VAT and service charge also apply to restaurant bills."""
    HotelSettings.objects.filter(tenant=hotel).update(
        vat_applicable_to=['room', 'restaurant'],
        service_applicable_to=['room', 'restaurant'],
    )
    return hotel


@pytest.fixture
def mains(hotel):
    return MenuCategory.objects.create(tenant=hotel, name='Mains', display_order=1)


@pytest.fixture
def jollof(hotel, mains):
    return MenuItem.objects.create(
        tenant=hotel,
        category=mains,
        name='Jollof rice',
        price=Decimal('2500.00'),
        preparation_time=20,
    )


@pytest.fixture
def chapman(hotel):
    return MenuItem.objects.create(
        tenant=hotel,
        name='Chapman',
        price=Decimal('1500.00'),
        preparation_time=5,
    )


@pytest.fixture
def sold_out(hotel):
    return MenuItem.objects.create(tenant=hotel, name='Pepper soup', price=Decimal('3000.00'), is_available=False)
