import pytest

from apps.qr.models import ScanType
from apps.qr.services import create_qr_code


@pytest.fixture
def room_qr(hotel, room, manager):
    return create_qr_code(tenant=hotel, label='Room 101', actor=manager, room=room)


@pytest.fixture
def lobby_qr(hotel, manager):
    return create_qr_code(
        tenant=hotel,
        label='Lobby',
        actor=manager,
        scan_type=ScanType.LOBBY,
        services=['wifi-request', 'front-desk-call'],
    )
