import pytest
from django.urls import reverse
from rest_framework import status
from apps.audit.models import AuditLog
from apps.audit.services import record_audit


@pytest.fixture
def audit_entries(hotel, other_hotel, manager, other_manager):
    """Two entries for the hotel and one for another hotel."""
    record_audit(
        tenant=hotel,
        actor=manager,
        action='room_status_changed',
        resource_type='room',
        resource_id='room-1',
        description='Room 101: dirty -> clean',
    )
    record_audit(
        tenant=hotel,
        actor=None,
        action='folio_closed',
        resource_type='folio',
        resource_id='folio-1',
    )
    record_audit(
        tenant=other_hotel,
        actor=other_manager,
        action='room_status_changed',
        resource_type='room',
        resource_id='room-9',
    )


@pytest.mark.django_db
class TestRecordAudit:

    def test_actor_snapshot(self, hotel, manager):
        entry = record_audit(
            tenant=hotel,
            actor=manager,
            action='settings_updated',
            resource_type='hotel_settings',
            resource_id=hotel.id,
            metadata={'fields': ['vat_rate']},
        )

        assert entry.actor_email == manager.email
        assert entry.actor_role == manager.role
        assert entry.resource_id == str(hotel.id)
        assert entry.metadata == {'fields': ['vat_rate']}

    def test_system_entry_without_actor(self, hotel):
        entry = record_audit(tenant=hotel, action='room_consistency_fixed', resource_type='room')

        assert entry.actor is None
        assert entry.actor_email == ''
        assert str(entry).endswith('by system')


@pytest.mark.django_db
class TestAuditLogApi:
    """Tests for GET /api/audit/"""

    def test_manager_sees_own_hotel_only(self, manager_client, audit_entries):
        url = reverse('audit:auditlog-list')
        response = manager_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        assert {row['resource_id'] for row in response.data['results']} == {'room-1', 'folio-1'}

    def test_filter_by_resource_type(self, manager_client, audit_entries):
        url = reverse('audit:auditlog-list')
        response = manager_client.get(url, {'resource_type': 'folio'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['action'] == 'folio_closed'

    def test_filter_by_actor(self, manager_client, manager, audit_entries):
        url = reverse('audit:auditlog-list')
        response = manager_client.get(url, {'actor': str(manager.id)})

        assert response.data['count'] == 1

    def test_invalid_date_range(self, manager_client, audit_entries):
        url = reverse('audit:auditlog-list')
        response = manager_client.get(url, {'date_from': '2025-02-01', 'date_to': '2025-01-01'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_hotel_entry_is_404(self, manager_client, audit_entries):
        entry = AuditLog.objects.get(resource_id='room-9')
        url = reverse('audit:auditlog-detail', args=[entry.id])
        response = manager_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_front_desk_forbidden(self, front_desk_client, audit_entries):
        url = reverse('audit:auditlog-list')
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
