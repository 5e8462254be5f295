import pytest
from datetime import timedelta
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from apps.rooms.models import Room, RoomStatus


@pytest.mark.django_db
class TestRoomInventory:
    """Tests for /api/rooms/rooms/ and /api/rooms/types/"""

    def test_list_rooms_scoped_to_hotel(self, front_desk_client, room, other_hotel_room):
        url = reverse('rooms:room-list')
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        ids = [row['id'] for row in response.data['results']]
        assert str(room.id) in ids
        assert str(other_hotel_room.id) not in ids

    def test_filter_by_status(self, front_desk_client, room, second_room):
        Room.objects.filter(id=second_room.id).update(status=RoomStatus.DIRTY)

        url = reverse('rooms:room-list')
        response = front_desk_client.get(url, {'status': RoomStatus.DIRTY})

        assert response.data['count'] == 1
        assert response.data['results'][0]['room_number'] == '102'

    def test_other_hotel_room_is_404(self, front_desk_client, other_hotel_room):
        url = reverse('rooms:room-detail', args=[other_hotel_room.id])
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_manager_creates_room(self, manager_client, hotel, room_type):
        url = reverse('rooms:room-list')
        response = manager_client.post(url, {
            'room_number': '201',
            'floor': 2,
            'room_type': str(room_type.id),
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert Room.objects.get(room_number='201').tenant_id == hotel.id
        assert response.data['status'] == RoomStatus.AVAILABLE

    def test_duplicate_room_number_rejected(self, manager_client, room):
        url = reverse('rooms:room-list')
        response = manager_client.post(url, {'room_number': room.room_number})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_front_desk_cannot_create_room(self, front_desk_client):
        url = reverse('rooms:room-list')
        response = front_desk_client.post(url, {'room_number': '301'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_room_types_include_room_count(self, front_desk_client, room, second_room, room_type):
        url = reverse('rooms:roomtype-list')
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['room_count'] == 2


@pytest.mark.django_db
class TestRoomStatusEndpoint:
    """Tests for POST /api/rooms/rooms/{id}/status/"""

    def test_valid_transition(self, housekeeper_client, dirty_room):
        url = reverse('rooms:room-change-status', args=[dirty_room.id])
        response = housekeeper_client.post(url, {'status': RoomStatus.CLEAN})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == RoomStatus.CLEAN

    def test_invalid_transition_conflict(self, housekeeper_client, dirty_room):
        url = reverse('rooms:room-change-status', args=[dirty_room.id])
        response = housekeeper_client.post(url, {'status': RoomStatus.OCCUPIED})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'error' in response.data

    def test_unknown_status_rejected(self, housekeeper_client, room):
        url = reverse('rooms:room-change-status', args=[room.id])
        response = housekeeper_client.post(url, {'status': 'haunted'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestAvailabilityEndpoint:
    """Tests for GET /api/rooms/rooms/available/"""

    def test_available_rooms(self, front_desk_client, reservation, second_room):
        today = timezone.localdate()
        url = reverse('rooms:room-available')
        response = front_desk_client.get(url, {
            'check_in': today.isoformat(),
            'check_out': (today + timedelta(days=1)).isoformat(),
        })

        assert response.status_code == status.HTTP_200_OK
        assert [row['room_number'] for row in response.data] == ['102']

    def test_reversed_dates(self, front_desk_client):
        today = timezone.localdate()
        url = reverse('rooms:room-available')
        response = front_desk_client.get(url, {
            'check_in': today.isoformat(),
            'check_out': today.isoformat(),
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestConsistencyEndpoints:
    """Tests for /api/rooms/consistency/"""

    def test_report_and_fix(self, manager_client, room):
        Room.objects.filter(id=room.id).update(status=RoomStatus.OCCUPIED)

        response = manager_client.get(reverse('rooms:consistency-report'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_inconsistencies'] == 1

        response = manager_client.post(reverse('rooms:consistency-fix'))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['fixed'] == 1
        room.refresh_from_db()
        assert room.status == RoomStatus.AVAILABLE

    def test_front_desk_forbidden(self, front_desk_client):
        response = front_desk_client.get(reverse('rooms:consistency-report'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
