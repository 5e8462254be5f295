import pytest
from django.urls import reverse
from rest_framework import status

from apps.housekeeping.models import HousekeepingTask, Supply, TaskStatus, TaskType
from apps.housekeeping.services import create_task
from apps.reservations.services import check_out
from apps.rooms.models import RoomStatus


@pytest.fixture
def cleaning_task(hotel, dirty_room):
    return create_task(tenant=hotel, room=dirty_room, title='Clean room 101', task_type=TaskType.CLEANING)


# =============================================================================
# TASKS
# =============================================================================

@pytest.mark.django_db
class TestTaskEndpoints:
    """Tests for /api/housekeeping/tasks/"""

    def test_create_task(self, front_desk_client, room):
        url = reverse('housekeeping:task-list')
        data = {'room': str(room.id), 'title': 'Extra pillows', 'task_type': TaskType.AMENITY_REQUEST}

        response = front_desk_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['room_number'] == '101'
        assert response.data['status'] == TaskStatus.PENDING

    def test_create_for_other_hotel_room(self, front_desk_client, other_hotel_room):
        url = reverse('housekeeping:task-list')

        response = front_desk_client.post(url, {'room': str(other_hotel_room.id), 'title': 'Nope'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mine_filter(self, housekeeper_client, housekeeper, cleaning_task, hotel):
        create_task(tenant=hotel, title='Corridor', assigned_to=housekeeper)
        url = reverse('housekeeping:task-list')

        everything = housekeeper_client.get(url)
        mine = housekeeper_client.get(url, {'mine': 'true'})

        assert everything.data['count'] == 2
        assert mine.data['count'] == 1

    def test_accept_and_complete(self, housekeeper_client, cleaning_task, dirty_room):
        accept_url = reverse('housekeeping:task-accept', kwargs={'pk': cleaning_task.id})
        complete_url = reverse('housekeeping:task-complete', kwargs={'pk': cleaning_task.id})

        accepted = housekeeper_client.post(accept_url)
        completed = housekeeper_client.post(complete_url, {'notes': 'Linen changed'}, format='json')

        dirty_room.refresh_from_db()
        assert accepted.status_code == status.HTTP_200_OK
        assert completed.status_code == status.HTTP_200_OK
        assert completed.data['status'] == TaskStatus.COMPLETED
        assert dirty_room.status == RoomStatus.CLEAN

    def test_complete_pending_conflict(self, housekeeper_client, cleaning_task):
        url = reverse('housekeeping:task-complete', kwargs={'pk': cleaning_task.id})

        response = housekeeper_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_assign_requires_management(self, housekeeper_client, housekeeper, cleaning_task):
        url = reverse('housekeeping:task-assign', kwargs={'pk': cleaning_task.id})

        response = housekeeper_client.post(url, {'assignee': str(housekeeper.id)}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_manager_assigns(self, manager_client, housekeeper, cleaning_task):
        url = reverse('housekeeping:task-assign', kwargs={'pk': cleaning_task.id})

        response = manager_client.post(url, {'assignee': str(housekeeper.id)}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['assigned_to_email'] == housekeeper.email

    def test_assign_to_wrong_role(self, manager_client, front_desk, cleaning_task):
        url = reverse('housekeeping:task-assign', kwargs={'pk': cleaning_task.id})

        response = manager_client.post(url, {'assignee': str(front_desk.id)}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_pos_staff_forbidden(self, pos_client):
        response = pos_client.get(reverse('housekeeping:task-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_checkout_task_visible(self, housekeeper_client, hotel, manager, checked_in_reservation):
        check_out(tenant=hotel, reservation_id=checked_in_reservation.id, actor=manager, force=True)

        response = housekeeper_client.get(
            reverse('housekeeping:task-list'), {'task_type': TaskType.CHECKOUT_CLEANING}
        )

        assert response.data['count'] == 1
        assert response.data['results'][0]['priority'] == 'high'


# =============================================================================
# SUPPLIES
# =============================================================================

@pytest.mark.django_db
class TestSupplyEndpoints:
    """Tests for /api/housekeeping/supplies/"""

    def test_manager_creates_supply(self, manager_client, hotel):
        url = reverse('housekeeping:supply-list')
        data = {'name': 'Shampoo', 'category': 'amenities', 'current_stock': 50, 'minimum_stock': 10}

        response = manager_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Supply.objects.get(id=response.data['id']).tenant == hotel

    def test_duplicate_name_rejected(self, manager_client, hotel):
        Supply.objects.create(tenant=hotel, name='Shampoo')
        url = reverse('housekeeping:supply-list')

        response = manager_client.post(url, {'name': 'shampoo'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_housekeeper_cannot_create(self, housekeeper_client):
        response = housekeeper_client.post(reverse('housekeeping:supply-list'), {'name': 'Soap'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_use_and_low_stock(self, housekeeper_client, hotel):
        supply = Supply.objects.create(tenant=hotel, name='Soap', current_stock=5, minimum_stock=2)
        use_url = reverse('housekeeping:supply-use', kwargs={'pk': supply.id})

        used = housekeeper_client.post(use_url, {'quantity': 3}, format='json')
        too_many = housekeeper_client.post(use_url, {'quantity': 3}, format='json')
        low = housekeeper_client.get(reverse('housekeeping:supply-low-stock'))

        assert used.status_code == status.HTTP_201_CREATED
        assert too_many.status_code == status.HTTP_400_BAD_REQUEST
        assert [s['name'] for s in low.data] == ['Soap']


@pytest.mark.django_db
class TestStatsEndpoint:
    """Tests for GET /api/housekeeping/stats/"""

    def test_stats(self, housekeeper_client, cleaning_task):
        response = housekeeper_client.get(reverse('housekeeping:stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pending'] == 1
        assert response.data['dirty_rooms'] == 1
        assert HousekeepingTask.objects.count() == 1
