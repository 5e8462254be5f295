"""
API tests for analytics app.

Tests cover:
- Report access for finance roles only
- Date range and period validation
- Response shapes of each report
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status


@pytest.mark.django_db
class TestReportAccess:
    """Tests for report permissions."""

    @pytest.mark.parametrize('name', ['occupancy', 'revenue', 'dashboard', 'outstanding-balances'])
    def test_accountant_allowed(self, accountant_client, name):
        response = accountant_client.get(reverse(f'analytics:{name}'))
        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize('name', ['occupancy', 'revenue', 'dashboard', 'outstanding-balances'])
    def test_front_desk_forbidden(self, front_desk_client, name):
        response = front_desk_client.get(reverse(f'analytics:{name}'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('analytics:dashboard'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestOccupancyReport:
    """Tests for GET /api/analytics/occupancy/."""

    def test_today(self, manager_client, checked_in_reservation, second_room):
        response = manager_client.get(reverse('analytics:occupancy'))

        assert response.data['occupied'] == 1
        assert Decimal(str(response.data['occupancy_rate'])) == Decimal('50.00')

    def test_bad_date(self, manager_client):
        response = manager_client.get(reverse('analytics:occupancy'), {'date': 'tomorrow'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestRevenueReport:
    """Tests for GET /api/analytics/revenue/."""

    def test_default_range_is_last_30_days(self, accountant_client):
        response = accountant_client.get(reverse('analytics:revenue'))

        today = timezone.localdate()
        assert response.data['end_date'] == today.isoformat()
        assert response.data['start_date'] == (today - timedelta(days=29)).isoformat()

    def test_period_covers_month(self, accountant_client):
        response = accountant_client.get(reverse('analytics:revenue'), {'period': '2026-02'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['start_date'] == '2026-02-01'
        assert response.data['end_date'] == '2026-02-28'

    def test_invalid_period(self, accountant_client):
        response = accountant_client.get(reverse('analytics:revenue'), {'period': '2026-13'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reversed_range(self, accountant_client):
        response = accountant_client.get(
            reverse('analytics:revenue'), {'start_date': '2026-03-10', 'end_date': '2026-03-01'},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_range_too_long(self, accountant_client):
        response = accountant_client.get(
            reverse('analytics:revenue'), {'start_date': '2024-01-01', 'end_date': '2026-01-01'},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_figures(self, accountant_client, checked_in_reservation):
        today = timezone.localdate().isoformat()
        response = accountant_client.get(reverse('analytics:revenue'), {'start_date': today, 'end_date': today})

        assert Decimal(str(response.data['total_revenue'])) == Decimal('11825.00')
        assert Decimal(str(response.data['adr'])) == Decimal('10000.00')
        assert response.data['by_charge_type'][0]['charge_type'] == 'room'
        assert response.data['by_day'][0]['count'] == 1


@pytest.mark.django_db
class TestBalancesAndDashboardReports:
    """Tests for outstanding balances and the dashboard."""

    def test_outstanding_balances(self, accountant_client, checked_in_reservation):
        response = accountant_client.get(reverse('analytics:outstanding-balances'))

        assert len(response.data) == 1
        assert response.data[0]['reservation_number'] == checked_in_reservation.reservation_number

    def test_other_hotel_sees_nothing(self, other_manager_client, checked_in_reservation):
        response = other_manager_client.get(reverse('analytics:outstanding-balances'))
        assert response.data == []

    def test_dashboard(self, owner_client, checked_in_reservation):
        response = owner_client.get(reverse('analytics:dashboard'))

        assert response.data['in_house'] == 1
        assert response.data['occupancy']['occupied'] == 1
        assert Decimal(str(response.data['outstanding_balance'])) == Decimal('11825.00')
