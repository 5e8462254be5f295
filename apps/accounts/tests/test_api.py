import pytest
from datetime import timedelta
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from apps.accounts.models import User, Role
from apps.audit.models import AuditLog
from apps.tenants.models import SubscriptionStatus


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_hotel_success(self, api_client):
        """Signup creates a trial hotel and its owner."""
        url = reverse('users:register')
        data = {
            'hotel_name': 'Palm Suites',
            'email': 'owner@palmsuites.example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'Palm Owner',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['navigation']['default_route'] == '/owner-dashboard/dashboard'

        owner = User.objects.get(email='owner@palmsuites.example.com')
        assert owner.role == Role.OWNER
        assert owner.tenant.hotel_name == 'Palm Suites'
        assert owner.tenant.subscription_status == SubscriptionStatus.TRIALING
        assert owner.tenant.hotel_settings is not None

    def test_register_duplicate_email(self, api_client, owner):
        """Cannot register with an existing email."""
        url = reverse('users:register')
        data = {
            'hotel_name': 'Copy Hotel',
            'email': owner.email,
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('users:register')
        data = {
            'hotel_name': 'Mismatch Hotel',
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_requires_hotel_name(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'nohotel@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'hotel_name' in response.data


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, front_desk):
        """Login returns tokens, profile and navigation for the role."""
        url = reverse('users:login')
        response = api_client.post(url, {
            'email': front_desk.email,
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == front_desk.email
        assert response.data['user']['role'] == Role.FRONT_DESK
        assert response.data['navigation']['role'] == Role.FRONT_DESK

    def test_login_wrong_password(self, api_client, front_desk):
        url = reverse('users:login')
        response = api_client.post(url, {
            'email': front_desk.email,
            'password': 'WrongPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_unknown_email(self, api_client, db):
        url = reverse('users:login')
        response = api_client.post(url, {
            'email': 'nobody@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_suspended_hotel(self, api_client, hotel, front_desk):
        """Staff of a suspended hotel cannot log in."""
        hotel.subscription_status = SubscriptionStatus.SUSPENDED
        hotel.save()

        url = reverse('users:login')
        response = api_client.post(url, {
            'email': front_desk.email,
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_inactive_account(self, api_client, front_desk):
        front_desk.is_active = False
        front_desk.save()

        url = reverse('users:login')
        response = api_client.post(url, {
            'email': front_desk.email,
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Profile & Navigation Tests
# =============================================================================

@pytest.mark.django_db
class TestProfile:
    """Tests for /api/auth/user/ and /api/auth/navigation/"""

    def test_current_user(self, front_desk_client, front_desk):
        url = reverse('users:current-user')
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == front_desk.email
        assert response.data['hotel_name'] == front_desk.tenant.hotel_name

    def test_current_user_requires_auth(self, api_client):
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_profile_cannot_change_role(self, front_desk_client, front_desk):
        """Role is read-only on the profile endpoint."""
        url = reverse('users:update-profile')
        response = front_desk_client.patch(url, {
            'display_name': 'Desk Lead',
            'role': Role.OWNER,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.display_name == 'Desk Lead'
        assert front_desk.role == Role.FRONT_DESK

    def test_navigation_for_housekeeping(self, housekeeper_client):
        url = reverse('users:navigation')
        response = housekeeper_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['header_badge'] == 'Housekeeping'
        assert response.data['uses_unified_dashboard'] is True
        assert len(response.data['navigation']) > 0

    def test_navigation_for_front_desk(self, front_desk_client):
        url = reverse('users:navigation')
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['uses_unified_dashboard'] is False

    def test_change_password_clears_temporary_flag(self, client_for, front_desk):
        front_desk.must_change_password = True
        front_desk.save()

        url = reverse('users:change-password')
        response = client_for(front_desk).post(url, {
            'current_password': 'TestPass123!',
            'new_password': 'BrandNewPass456!',
        })

        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.check_password('BrandNewPass456!')
        assert front_desk.must_change_password is False

    def test_change_password_wrong_current(self, front_desk_client):
        url = reverse('users:change-password')
        response = front_desk_client.post(url, {
            'current_password': 'NotMyPass123!',
            'new_password': 'BrandNewPass456!',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Password Reset Tests
# =============================================================================

@pytest.mark.django_db
class TestPasswordReset:
    """Tests for /api/auth/password-reset/ and /confirm/"""

    def test_request_reset_unknown_email_still_succeeds(self, api_client, db):
        url = reverse('users:password-reset')
        response = api_client.post(url, {'email': 'ghost@example.com'})

        assert response.status_code == status.HTTP_200_OK

    def test_confirm_reset(self, api_client, front_desk):
        front_desk.verification_token = 'reset-token-123'
        front_desk.reset_requested_at = timezone.now()
        front_desk.save()

        url = reverse('users:password-reset-confirm')
        response = api_client.post(url, {
            'token': 'reset-token-123',
            'new_password': 'ResetPass789!',
            'new_password_confirm': 'ResetPass789!',
        })

        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.check_password('ResetPass789!')

    def test_confirm_reset_invalid_token(self, api_client, db):
        url = reverse('users:password-reset-confirm')
        response = api_client.post(url, {
            'token': 'bogus',
            'new_password': 'ResetPass789!',
            'new_password_confirm': 'ResetPass789!',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_confirm_reset_expired_token(self, api_client, front_desk):
        front_desk.verification_token = 'reset-token-old'
        front_desk.reset_requested_at = timezone.now() - timedelta(days=2)
        front_desk.save()

        url = reverse('users:password-reset-confirm')
        response = api_client.post(url, {
            'token': 'reset-token-old',
            'new_password': 'ResetPass789!',
            'new_password_confirm': 'ResetPass789!',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        front_desk.refresh_from_db()
        assert front_desk.check_password('TestPass123!')


# =============================================================================
# Staff Management Tests
# =============================================================================

@pytest.mark.django_db
class TestStaffManagement:
    """Tests for /api/auth/staff/"""

    def test_manager_invites_staff(self, manager_client, hotel):
        url = reverse('users:staff-list')
        response = manager_client.post(url, {
            'email': 'new.housekeeper@example.com',
            'role': Role.HOUSEKEEPING,
            'display_name': 'New Housekeeper',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['temporary_password']
        user = User.objects.get(email='new.housekeeper@example.com')
        assert user.tenant_id == hotel.id
        assert user.must_change_password is True
        assert AuditLog.objects.filter(action='staff_invited', resource_id=str(user.id)).exists()

    def test_manager_cannot_invite_owner(self, manager_client):
        url = reverse('users:staff-list')
        response = manager_client.post(url, {
            'email': 'co-owner@example.com',
            'role': Role.OWNER,
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_front_desk_cannot_list_staff(self, front_desk_client):
        url = reverse('users:staff-list')
        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_only_own_hotel(self, manager_client, front_desk, other_manager):
        url = reverse('users:staff-list')
        response = manager_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        emails = [row['email'] for row in response.data['results']]
        assert front_desk.email in emails
        assert other_manager.email not in emails

    def test_change_role(self, manager_client, front_desk):
        url = reverse('users:staff-role', args=[front_desk.id])
        response = manager_client.post(url, {'role': Role.ACCOUNTANT})

        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.role == Role.ACCOUNTANT

    def test_manager_cannot_suspend_owner(self, manager_client, owner):
        url = reverse('users:staff-suspend', args=[owner.id])
        response = manager_client.post(url, {'reason': 'test'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cannot_touch_other_hotel_staff(self, manager_client, other_manager):
        url = reverse('users:staff-suspend', args=[other_manager.id])
        response = manager_client.post(url, {})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_suspend_and_reactivate(self, owner_client, front_desk):
        suspend_url = reverse('users:staff-suspend', args=[front_desk.id])
        response = owner_client.post(suspend_url, {'reason': 'Left the company'})
        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.is_active is False

        reactivate_url = reverse('users:staff-reactivate', args=[front_desk.id])
        response = owner_client.post(reactivate_url)
        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.is_active is True

    def test_reset_password_returns_temporary_password(self, owner_client, front_desk):
        url = reverse('users:staff-reset-password', args=[front_desk.id])
        response = owner_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        front_desk.refresh_from_db()
        assert front_desk.check_password(response.data['temporary_password'])
        assert front_desk.must_change_password is True
