import pytest
from django.urls import reverse
from rest_framework import status

from apps.maintenance.models import WorkOrderStatus
from apps.maintenance.services import create_work_order
from apps.rooms.models import RoomStatus


@pytest.fixture
def work_order(hotel, room):
    return create_work_order(tenant=hotel, room=room, title='Leaking tap')


@pytest.mark.django_db
class TestWorkOrderEndpoints:
    """Tests for /api/maintenance/work-orders/"""

    def test_housekeeper_reports_issue(self, housekeeper_client, room):
        url = reverse('maintenance:work-order-list')
        data = {'room': str(room.id), 'title': 'Broken lamp', 'category': 'electrical'}

        response = housekeeper_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['work_order_number'].startswith('WO-')
        assert response.data['room_number'] == '101'

    def test_take_room_offline(self, manager_client, room):
        url = reverse('maintenance:work-order-list')
        data = {'room': str(room.id), 'title': 'Flooded bathroom', 'take_room_offline': True}

        response = manager_client.post(url, data, format='json')

        room.refresh_from_db()
        assert response.status_code == status.HTTP_201_CREATED
        assert room.status == RoomStatus.MAINTENANCE

    def test_pos_staff_cannot_report(self, pos_client, room):
        url = reverse('maintenance:work-order-list')

        response = pos_client.post(url, {'title': 'Broken fridge'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_open_filter(self, technician_client, hotel, work_order):
        done = create_work_order(tenant=hotel, title='Old issue')
        done.status = WorkOrderStatus.CANCELLED
        done.save()
        url = reverse('maintenance:work-order-list')

        response = technician_client.get(url, {'open': 'true'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(work_order.id)

    def test_technician_accepts_and_completes(self, technician_client, technician, work_order):
        accept = technician_client.post(reverse('maintenance:work-order-accept', kwargs={'pk': work_order.id}))
        complete = technician_client.post(
            reverse('maintenance:work-order-complete', kwargs={'pk': work_order.id}),
            {'completion_notes': 'Washer replaced', 'actual_cost': '1500.00'},
            format='json',
        )

        assert accept.status_code == status.HTTP_200_OK
        assert accept.data['assigned_to_email'] == technician.email
        assert complete.status_code == status.HTTP_200_OK
        assert complete.data['status'] == WorkOrderStatus.COMPLETED

    def test_front_desk_cannot_accept(self, front_desk_client, work_order):
        url = reverse('maintenance:work-order-accept', kwargs={'pk': work_order.id})

        response = front_desk_client.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_complete_pending_conflict(self, technician_client, work_order):
        url = reverse('maintenance:work-order-complete', kwargs={'pk': work_order.id})

        response = technician_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_escalate_requires_reason(self, technician_client, work_order):
        url = reverse('maintenance:work-order-escalate', kwargs={'pk': work_order.id})

        response = technician_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_escalate(self, technician_client, work_order):
        url = reverse('maintenance:work-order-escalate', kwargs={'pk': work_order.id})

        response = technician_client.post(url, {'reason': 'Pipe burst behind wall'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['priority'] == 'high'

    def test_cancel_requires_management(self, technician_client, manager_client, work_order):
        url = reverse('maintenance:work-order-cancel', kwargs={'pk': work_order.id})

        forbidden = technician_client.post(url, {}, format='json')
        allowed = manager_client.post(url, {'reason': 'Reported twice'}, format='json')

        assert forbidden.status_code == status.HTTP_403_FORBIDDEN
        assert allowed.status_code == status.HTTP_200_OK

    def test_other_hotel_not_found(self, other_manager_client, work_order):
        url = reverse('maintenance:work-order-detail', kwargs={'pk': work_order.id})

        response = other_manager_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestMaintenanceStatsEndpoint:
    """Tests for GET /api/maintenance/stats/"""

    def test_stats(self, technician_client, work_order):
        response = technician_client.get(reverse('maintenance:stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['open_issues'] == 1
        assert response.data['average_resolution_minutes'] is None
