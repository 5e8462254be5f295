import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from apps.billing.models import ChargeType, Folio, FolioCharge, PaymentMethod
from apps.billing.services import record_payment, recalculate_folio_balance, start_shift


@pytest.fixture
def folio(checked_in_reservation):
    return Folio.objects.get(reservation=checked_in_reservation)


# =============================================================================
# FOLIOS
# =============================================================================

@pytest.mark.django_db
class TestFolioEndpoints:
    """Tests for /api/billing/folios/"""

    def test_list_with_balance_filter(self, front_desk_client, folio):
        url = reverse('billing:folio-list')

        owing = front_desk_client.get(url, {'has_balance': 'true'})
        settled = front_desk_client.get(url, {'has_balance': 'false'})

        assert owing.data['count'] == 1
        assert settled.data['count'] == 0

    def test_detail_includes_charges(self, front_desk_client, folio):
        url = reverse('billing:folio-detail', kwargs={'pk': folio.id})

        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['charges']) == 1
        assert Decimal(str(response.data['charges'][0]['amount'])) == Decimal('11825.00')

    def test_other_hotel_folio_not_found(self, other_manager_client, folio):
        url = reverse('billing:folio-detail', kwargs={'pk': folio.id})

        response = other_manager_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_housekeeping_has_no_access(self, housekeeper_client, folio):
        response = housekeeper_client.get(reverse('billing:folio-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_post_charge(self, front_desk_client, folio):
        url = reverse('billing:folio-charges', kwargs={'pk': folio.id})
        data = {'charge_type': ChargeType.ROOM, 'amount': '10000.00', 'description': 'Late checkout'}

        response = front_desk_client.post(url, data, format='json')

        folio.refresh_from_db()
        assert response.status_code == status.HTTP_201_CREATED
        assert Decimal(str(response.data['vat_amount'])) == Decimal('825.00')
        assert folio.balance == Decimal('23650.00')

    def test_breakdown(self, front_desk_client, folio):
        url = reverse('billing:folio-breakdown', kwargs={'pk': folio.id})

        response = front_desk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.data['base_total'])) == Decimal('10000.00')
        assert Decimal(str(response.data['balance'])) == Decimal('11825.00')

    def test_close_with_balance_conflict(self, front_desk_client, folio):
        url = reverse('billing:folio-close', kwargs={'pk': folio.id})

        response = front_desk_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_close_settled_folio(self, hotel, front_desk, front_desk_client, folio):
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('11825'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        url = reverse('billing:folio-close', kwargs={'pk': folio.id})

        response = front_desk_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_number'] == 'INV-000001'


@pytest.mark.django_db
class TestFolioPayments:
    """Tests for POST /api/billing/folios/{id}/payments/"""

    def test_record_payment(self, front_desk_client, folio):
        url = reverse('billing:folio-payments', kwargs={'pk': folio.id})

        response = front_desk_client.post(
            url, {'amount': '5000.00', 'payment_method': PaymentMethod.CASH}, format='json'
        )

        folio.refresh_from_db()
        assert response.status_code == status.HTTP_201_CREATED
        assert folio.balance == Decimal('6825.00')

    def test_duplicate_returns_existing_payment(self, front_desk_client, folio):
        url = reverse('billing:folio-payments', kwargs={'pk': folio.id})
        data = {'amount': '5000.00', 'payment_method': PaymentMethod.CASH}
        first = front_desk_client.post(url, data, format='json')

        response = front_desk_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['duplicate_of']['id'] == first.data['id']

    def test_forced_duplicate(self, front_desk_client, folio):
        url = reverse('billing:folio-payments', kwargs={'pk': folio.id})
        data = {'amount': '5000.00', 'payment_method': PaymentMethod.CASH}
        front_desk_client.post(url, data, format='json')

        response = front_desk_client.post(url, {**data, 'force': True}, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_room_folio_method_rejected(self, front_desk_client, folio):
        url = reverse('billing:folio-payments', kwargs={'pk': folio.id})

        response = front_desk_client.post(
            url, {'amount': '5000.00', 'payment_method': PaymentMethod.ROOM_FOLIO}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'payment_method' in response.data


@pytest.mark.django_db
class TestRefunds:
    """Tests for POST /api/billing/payments/{id}/refund/"""

    def test_accountant_refunds(self, hotel, front_desk, accountant_client, folio):
        payment = record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        url = reverse('billing:payment-refund', kwargs={'pk': payment.id})

        response = accountant_client.post(url, {'reason': 'Charged twice'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'refunded'

    def test_front_desk_cannot_refund(self, hotel, front_desk, front_desk_client, folio):
        payment = record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        url = reverse('billing:payment-refund', kwargs={'pk': payment.id})

        response = front_desk_client.post(url, {'reason': 'Charged twice'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# SHIFTS
# =============================================================================

@pytest.mark.django_db
class TestShiftEndpoints:
    """Tests for /api/billing/shifts/"""

    def test_start_and_current(self, front_desk_client):
        start = front_desk_client.post(reverse('billing:shift-start'), {'opening_cash': '5000.00'}, format='json')
        current = front_desk_client.get(reverse('billing:shift-current'))

        assert start.status_code == status.HTTP_201_CREATED
        assert current.status_code == status.HTTP_200_OK
        assert Decimal(str(current.data['expected_cash'])) == Decimal('5000.00')

    def test_second_start_conflict(self, front_desk_client):
        front_desk_client.post(reverse('billing:shift-start'), {}, format='json')

        response = front_desk_client.post(reverse('billing:shift-start'), {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_no_current_shift(self, front_desk_client):
        response = front_desk_client.get(reverse('billing:shift-current'))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_close_with_variance_needs_authorizer(self, front_desk, front_desk_client):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))
        url = reverse('billing:shift-close', kwargs={'pk': shift.id})

        response = front_desk_client.post(url, {'counted_cash': '4000.00'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_close_with_manager_authorization(self, front_desk, manager, front_desk_client):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))
        url = reverse('billing:shift-close', kwargs={'pk': shift.id})
        data = {
            'counted_cash': '4000.00',
            'authorized_by': str(manager.id),
            'handover_notes': 'Drawer short, receipts in envelope',
        }

        response = front_desk_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.data['cash_variance'])) == Decimal('-1000.00')
        assert response.data['authorized_by_email'] == manager.email

    def test_staff_see_only_own_shifts(self, front_desk, pos_staff, pos_client, manager_client):
        start_shift(staff=front_desk)
        start_shift(staff=pos_staff)

        own = pos_client.get(reverse('billing:shift-list'))
        everyone = manager_client.get(reverse('billing:shift-list'))

        assert own.data['count'] == 1
        assert everyone.data['count'] == 2

    def test_cannot_close_someone_elses_shift(self, front_desk, pos_client):
        shift = start_shift(staff=front_desk)
        url = reverse('billing:shift-close', kwargs={'pk': shift.id})

        response = pos_client.post(url, {'counted_cash': '0.00'}, format='json')

        # Not visible to other cashiers
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# TAX TOOLS
# =============================================================================

@pytest.mark.django_db
class TestTaxPreview:
    """Tests for POST /api/billing/tax-preview/"""

    def test_preview_room_rate(self, front_desk_client):
        response = front_desk_client.post(
            reverse('billing:tax-preview'), {'amount': '10000.00'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.data['total_amount'])) == Decimal('11825.00')
        assert Decimal(str(response.data['vat_rate'])) == Decimal('7.50')

    def test_preview_exempt_guest(self, front_desk_client):
        response = front_desk_client.post(
            reverse('billing:tax-preview'),
            {'amount': '10000.00', 'guest_tax_exempt': True},
            format='json',
        )

        assert Decimal(str(response.data['total_amount'])) == Decimal('11000.00')


@pytest.mark.django_db
class TestDoubleTaxEndpoints:
    """Tests for /api/billing/double-tax/"""

    @pytest.fixture
    def double_taxed_charge(self, folio):
        charge = FolioCharge.objects.create(
            folio=folio,
            charge_type=ChargeType.ROOM,
            description='Room 101 - 1 night(s) @ 11825.00',
            amount=Decimal('13983.06'),
        )
        recalculate_folio_balance(folio)
        return charge

    def test_scan(self, manager_client, double_taxed_charge):
        response = manager_client.get(reverse('billing:double-tax-scan'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 1
        assert Decimal(str(response.data['charges'][0]['calculated_total_amount'])) == Decimal('11825.00')

    def test_fix(self, manager_client, double_taxed_charge):
        response = manager_client.post(reverse('billing:double-tax-fix'))

        double_taxed_charge.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert response.data['charges_fixed'] == 1
        assert Decimal(response.data['total_adjustment']) == Decimal('2158.06')
        assert double_taxed_charge.amount == Decimal('11825.00')

    def test_front_desk_forbidden(self, front_desk_client, double_taxed_charge):
        response = front_desk_client.get(reverse('billing:double-tax-scan'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
