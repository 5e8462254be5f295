"""
API tests for qr app.

Tests cover:
- Public guest portal: scan, submit, follow-up with a session id
- QR code management by managers
- Staff request dashboard with updated_since polling
"""

import pytest
from datetime import timedelta
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.qr.models import RequestStatus, ServiceRequest
from apps.qr.services import submit_guest_request


@pytest.fixture
def guest_request(room_qr):
    return submit_guest_request(token=room_qr.qr_token, service='front-desk-call', session_id='guest-abc')


# =============================================================================
# Guest portal
# =============================================================================

@pytest.mark.django_db
class TestGuestPortal:
    """Tests for the anonymous guest endpoints."""

    def test_scan(self, api_client, room_qr):
        url = reverse('qr:guest-portal', kwargs={'token': room_qr.qr_token})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['hotel_name'] == 'Lagoon Hotel'
        assert response.data['room_number'] == '101'
        assert 'housekeeping' in response.data['services']

    def test_unknown_token(self, api_client):
        url = reverse('qr:guest-portal', kwargs={'token': 'not-a-token'})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_submit_request(self, api_client, room_qr):
        url = reverse('qr:guest-submit', kwargs={'token': room_qr.qr_token, 'service': 'housekeeping'})
        response = api_client.post(url, {'details': {'item': 'Pillows'}}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['service_type'] == 'housekeeping'
        assert response.data['assigned_team'] == 'Housekeeping'
        assert response.data['guest_session_id']

    def test_submit_disabled_service(self, api_client, lobby_qr):
        url = reverse('qr:guest-submit', kwargs={'token': lobby_qr.qr_token, 'service': 'room-service'})
        response = api_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_submit_invalid_priority(self, api_client, room_qr):
        url = reverse('qr:guest-submit', kwargs={'token': room_qr.qr_token, 'service': 'feedback'})
        response = api_client.post(url, {'priority': 'whenever'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_follow_up_with_session(self, api_client, guest_request):
        url = reverse('qr:guest-request-detail', kwargs={'request_id': guest_request.id})

        response = api_client.get(url, {'session': 'guest-abc'})
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == RequestStatus.PENDING

        response = api_client.get(url, {'session': 'someone-else'})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_guest_message(self, api_client, guest_request):
        url = reverse('qr:guest-request-message', kwargs={'request_id': guest_request.id})
        response = api_client.post(url, {'session_id': 'guest-abc', 'message': 'Late checkout please'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['sender'] == 'guest'


# =============================================================================
# QR code management
# =============================================================================

@pytest.mark.django_db
class TestQRCodeManagement:
    """Tests for /api/qr/codes/."""

    def test_create_room_code(self, manager_client, room):
        url = reverse('qr:qr-code-list')
        response = manager_client.post(url, {'label': 'Room 101', 'room': str(room.id)}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['room_number'] == '101'
        assert response.data['portal_url'].endswith(response.data['qr_token'])

    def test_room_code_needs_room(self, manager_client):
        url = reverse('qr:qr-code-list')
        response = manager_client.post(url, {'label': 'Room ?'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'room' in response.data

    def test_lobby_code_with_services(self, manager_client):
        url = reverse('qr:qr-code-list')
        response = manager_client.post(url, {
            'label': 'Lobby',
            'scan_type': 'lobby',
            'services': ['wifi-request'],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['services'] == ['wifi-request']

    def test_unknown_service_rejected(self, manager_client):
        url = reverse('qr:qr-code-list')
        response = manager_client.post(url, {
            'label': 'Lobby',
            'scan_type': 'lobby',
            'services': ['spa'],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_front_desk_forbidden(self, front_desk_client):
        response = front_desk_client.get(reverse('qr:qr-code-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_deactivate(self, manager_client, room_qr):
        url = reverse('qr:qr-code-deactivate', kwargs={'pk': room_qr.id})
        response = manager_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_active'] is False

    def test_regenerate(self, manager_client, room_qr):
        url = reverse('qr:qr-code-regenerate', kwargs={'pk': room_qr.id})
        response = manager_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['qr_token'] != room_qr.qr_token

    def test_image(self, manager_client, room_qr):
        url = reverse('qr:qr-code-image', kwargs={'pk': room_qr.id})
        response = manager_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'image/png'

    def test_other_hotel_code_not_found(self, other_manager_client, room_qr):
        url = reverse('qr:qr-code-deactivate', kwargs={'pk': room_qr.id})
        response = other_manager_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Request dashboard
# =============================================================================

@pytest.mark.django_db
class TestRequestDashboard:
    """Tests for /api/qr/requests/."""

    def test_list_open(self, front_desk_client, guest_request):
        response = front_desk_client.get(reverse('qr:service-request-list'), {'open': 'true'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['assigned_team'] == 'Front Desk'

    def test_team_filter(self, front_desk_client, guest_request):
        response = front_desk_client.get(reverse('qr:service-request-list'), {'team': 'it'})
        assert response.data['count'] == 0

    def test_updated_since(self, front_desk_client, guest_request, room_qr):
        stale = submit_guest_request(token=room_qr.qr_token, service='feedback')
        ServiceRequest.objects.filter(id=stale.id).update(updated_at=timezone.now() - timedelta(hours=2))

        since = (timezone.now() - timedelta(hours=1)).isoformat()
        response = front_desk_client.get(reverse('qr:service-request-list'), {'updated_since': since})

        ids = [row['id'] for row in response.data['results']]
        assert ids == [str(guest_request.id)]

    def test_accept_and_complete(self, front_desk_client, guest_request, front_desk):
        accept_url = reverse('qr:service-request-accept', kwargs={'pk': guest_request.id})
        complete_url = reverse('qr:service-request-complete', kwargs={'pk': guest_request.id})

        response = front_desk_client.post(accept_url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['assigned_to_email'] == front_desk.email

        response = front_desk_client.post(complete_url, {'notes': 'Sorted'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == RequestStatus.COMPLETED

    def test_complete_pending_conflict(self, front_desk_client, guest_request):
        url = reverse('qr:service-request-complete', kwargs={'pk': guest_request.id})
        response = front_desk_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_assign_requires_manager(self, front_desk_client, manager_client, guest_request, front_desk):
        url = reverse('qr:service-request-assign', kwargs={'pk': guest_request.id})

        response = front_desk_client.post(url, {'assignee': str(front_desk.id)}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = manager_client.post(url, {'assignee': str(front_desk.id)}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == RequestStatus.ASSIGNED

    def test_staff_message_visible_to_guest(self, front_desk_client, api_client, guest_request, front_desk):
        url = reverse('qr:service-request-messages', kwargs={'pk': guest_request.id})
        response = front_desk_client.post(url, {'message': 'On our way'}, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['staff_email'] == front_desk.email

        detail = api_client.get(
            reverse('qr:guest-request-detail', kwargs={'request_id': guest_request.id}),
            {'session': 'guest-abc'},
        )
        assert [m['message'] for m in detail.data['messages']] == ['On our way']

    def test_other_hotel_cannot_see_requests(self, other_manager_client, guest_request):
        response = other_manager_client.get(reverse('qr:service-request-list'))
        assert response.data['count'] == 0

    def test_analytics(self, manager_client, guest_request):
        response = manager_client.get(reverse('qr:analytics'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 1
        assert response.data['open'] == 1

    def test_analytics_bad_range(self, manager_client):
        response = manager_client.get(reverse('qr:analytics'), {'start_date': '2026-02-01', 'end_date': '2026-01-01'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
