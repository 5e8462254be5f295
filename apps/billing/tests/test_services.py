"""
Service layer unit tests for billing app.

Tests cover:
- Tax calculator (exclusive, VAT-inclusive and fully inclusive pricing, exemptions)
- Folio posting, breakdown and closing with invoice numbers
- Payments: duplicate detection and its time window, refunds, reservation payment status
- Shift reconciliation and variance authorization
- Double-tax scan and repair
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone

from apps.billing.models import (
    ChargeType,
    Folio,
    FolioCharge,
    FolioStatus,
    Payment,
    PaymentMethod,
    PaymentRecordStatus,
    ShiftStatus,
)
from apps.billing.services import (
    calculate_charge,
    post_charge,
    folio_breakdown,
    close_folio,
    get_room_open_folio,
    record_payment,
    void_payment,
    start_shift,
    shift_summary,
    close_shift,
    scan_double_tax_charges,
    fix_double_tax_charges,
    recalculate_folio_balance,
    FolioClosedError,
    OutstandingBalanceError,
    InvalidAmountError,
    DuplicatePaymentError,
    InvalidPaymentStateError,
    ShiftAlreadyActiveError,
    ShiftAuthorizationRequiredError,
    NoOpenFolioError,
)
from apps.reservations.models import PaymentStatus
from apps.tenants.models import HotelSettings


@pytest.fixture
def folio(checked_in_reservation):
    return Folio.objects.get(reservation=checked_in_reservation)


def _settings(**overrides):
    values = {'vat_rate': Decimal('7.50'), 'service_charge_rate': Decimal('10.00')}
    values.update(overrides)
    return HotelSettings(**values)


class TestTaxCalculator:

    def test_exclusive_room_rate(self):
        result = calculate_charge(base_amount=Decimal('10000'), charge_type=ChargeType.ROOM, hotel_settings=_settings())

        assert result['base_amount'] == Decimal('10000.00')
        assert result['service_charge_amount'] == Decimal('1000.00')
        assert result['vat_amount'] == Decimal('825.00')
        assert result['total_amount'] == Decimal('11825.00')

    def test_fully_inclusive_price(self):
        result = calculate_charge(
            base_amount=Decimal('11825'),
            charge_type=ChargeType.ROOM,
            hotel_settings=_settings(tax_inclusive=True, service_charge_inclusive=True),
        )

        assert result['base_amount'] == Decimal('10000.00')
        assert result['service_charge_amount'] == Decimal('1000.00')
        assert result['vat_amount'] == Decimal('825.00')
        assert result['total_amount'] == Decimal('11825.00')

    def test_service_inclusive_price(self):
        result = calculate_charge(
            base_amount=Decimal('11000'),
            charge_type=ChargeType.ROOM,
            hotel_settings=_settings(service_charge_inclusive=True),
        )

        assert result['base_amount'] == Decimal('10000.00')
        assert result['service_charge_amount'] == Decimal('1000.00')
        assert result['total_amount'] == Decimal('11825.00')

    def test_vat_inclusive_service_exclusive_price(self):
        result = calculate_charge(
            base_amount=Decimal('10750'),
            charge_type=ChargeType.ROOM,
            hotel_settings=_settings(tax_inclusive=True),
        )

        assert result['base_amount'] == Decimal('10000.00')
        assert result['service_charge_amount'] == Decimal('1000.00')
        assert result['vat_amount'] == Decimal('825.00')
        assert result['total_amount'] == Decimal('11825.00')
        parts = result['base_amount'] + result['service_charge_amount'] + result['vat_amount']
        assert parts == result['total_amount']

    def test_charge_type_outside_applicable_list(self):
        result = calculate_charge(base_amount=Decimal('5000'), charge_type=ChargeType.LAUNDRY, hotel_settings=_settings())

        assert result['total_amount'] == Decimal('5000.00')
        assert result['vat_rate'] == Decimal('0')

    def test_tax_exempt_guest_still_pays_service(self):
        result = calculate_charge(
            base_amount=Decimal('10000'),
            charge_type=ChargeType.ROOM,
            hotel_settings=_settings(),
            guest_tax_exempt=True,
        )

        assert result['vat_amount'] == Decimal('0.00')
        assert result['total_amount'] == Decimal('11000.00')

    def test_components_sum_to_total(self):
        result = calculate_charge(
            base_amount=Decimal('9999.99'),
            charge_type=ChargeType.ROOM,
            hotel_settings=_settings(tax_inclusive=True, service_charge_inclusive=True),
        )

        parts = result['base_amount'] + result['service_charge_amount'] + result['vat_amount']
        assert parts == result['total_amount'] == Decimal('9999.99')


@pytest.mark.django_db
class TestFolios:

    def test_post_charge_updates_balance(self, folio, front_desk):
        post_charge(
            folio=folio,
            charge_type=ChargeType.MINIBAR,
            amount=Decimal('2500'),
            description='Minibar',
            posted_by=front_desk,
        )

        folio.refresh_from_db()
        assert folio.total_charges == Decimal('14325.00')
        assert folio.balance == Decimal('14325.00')

    def test_non_positive_charge_rejected(self, folio):
        with pytest.raises(InvalidAmountError):
            post_charge(folio=folio, charge_type=ChargeType.OTHER, amount=0, description='Nothing')

    def test_breakdown_groups_by_type(self, hotel, folio, front_desk):
        post_charge(folio=folio, charge_type=ChargeType.LAUNDRY, amount=Decimal('1500'), description='Laundry')
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )

        breakdown = folio_breakdown(folio)

        types = {row['charge_type']: row['total'] for row in breakdown['by_charge_type']}
        assert types == {'laundry': Decimal('1500.00'), 'room': Decimal('11825.00')}
        assert breakdown['vat_total'] == Decimal('825.00')
        assert breakdown['service_charge_total'] == Decimal('1000.00')
        assert breakdown['balance'] == Decimal('8325.00')

    def test_close_requires_settlement(self, folio):
        with pytest.raises(OutstandingBalanceError):
            close_folio(folio=folio)

    def test_close_assigns_sequential_invoice_numbers(self, hotel, folio, manager):
        closed = close_folio(folio=folio, actor=manager, force=True)

        assert closed.status == FolioStatus.CLOSED
        assert closed.invoice_number == 'INV-000001'
        with pytest.raises(FolioClosedError):
            close_folio(folio=closed, force=True)
        with pytest.raises(FolioClosedError):
            post_charge(folio=closed, charge_type=ChargeType.OTHER, amount=Decimal('10'), description='Late')

    def test_room_open_folio(self, folio, room, second_room):
        assert get_room_open_folio(room) == folio
        with pytest.raises(NoOpenFolioError):
            get_room_open_folio(second_room)


@pytest.mark.django_db
class TestPayments:

    def test_partial_then_full_payment_status(self, hotel, folio, front_desk, checked_in_reservation):
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        checked_in_reservation.refresh_from_db()
        assert checked_in_reservation.payment_status == PaymentStatus.PARTIAL

        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('6825'), payment_method=PaymentMethod.TRANSFER,
            processed_by=front_desk, reference='TRF-7781',
        )
        checked_in_reservation.refresh_from_db()
        folio.refresh_from_db()
        assert checked_in_reservation.payment_status == PaymentStatus.PAID
        assert folio.balance == Decimal('0.00')

    def test_same_amount_and_method_is_duplicate(self, hotel, folio, front_desk):
        first = record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )

        with pytest.raises(DuplicatePaymentError) as exc_info:
            record_payment(
                tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
                processed_by=front_desk,
            )
        assert exc_info.value.existing_payment == first

    def test_same_payment_after_window_is_accepted(self, hotel, folio, front_desk, settings):
        first = record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        window = timedelta(seconds=settings.HOTEL_DUPLICATE_PAYMENT_WINDOW_SECONDS)
        Payment.objects.filter(id=first.id).update(created_at=timezone.now() - window - timedelta(seconds=1))

        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )

        assert folio.payments.count() == 2

    def test_forced_duplicate_is_recorded(self, hotel, folio, front_desk):
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk, force=True,
        )

        folio.refresh_from_db()
        assert folio.total_payments == Decimal('10000.00')

    def test_reused_reference_is_duplicate(self, hotel, folio, front_desk):
        record_payment(
            tenant=hotel, amount=Decimal('3000'), payment_method=PaymentMethod.CARD,
            processed_by=front_desk, reference='AUTH-123456',
        )

        with pytest.raises(DuplicatePaymentError):
            record_payment(
                tenant=hotel, folio=folio, amount=Decimal('4000'), payment_method=PaymentMethod.CARD,
                processed_by=front_desk, reference='AUTH-123456',
            )

    def test_different_method_is_not_duplicate(self, hotel, folio, front_desk):
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5000'), payment_method=PaymentMethod.POS,
            processed_by=front_desk,
        )

        assert folio.payments.count() == 2

    def test_refund_reopens_balance(self, hotel, folio, front_desk, accountant, checked_in_reservation):
        payment = record_payment(
            tenant=hotel, folio=folio, amount=Decimal('11825'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )

        refunded = void_payment(tenant=hotel, payment_id=payment.id, actor=accountant, reason='Card used instead')

        folio.refresh_from_db()
        checked_in_reservation.refresh_from_db()
        assert refunded.status == PaymentRecordStatus.REFUNDED
        assert folio.balance == Decimal('11825.00')
        assert checked_in_reservation.payment_status == PaymentStatus.UNPAID
        with pytest.raises(InvalidPaymentStateError):
            void_payment(tenant=hotel, payment_id=payment.id, actor=accountant)

    def test_zero_payment_rejected(self, hotel, folio):
        with pytest.raises(InvalidAmountError):
            record_payment(tenant=hotel, folio=folio, amount=Decimal('0'), payment_method=PaymentMethod.CASH)


@pytest.mark.django_db
class TestShifts:

    def test_one_active_shift_per_staff(self, front_desk):
        start_shift(staff=front_desk, opening_cash=Decimal('5000'))

        with pytest.raises(ShiftAlreadyActiveError):
            start_shift(staff=front_desk)

    def test_payments_attach_to_active_shift(self, hotel, folio, front_desk):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('6000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('5825'), payment_method=PaymentMethod.CARD,
            processed_by=front_desk, reference='AUTH-1',
        )

        summary = shift_summary(shift)

        assert summary['cash_collected'] == Decimal('6000.00')
        assert summary['expected_cash'] == Decimal('11000.00')
        assert summary['pos_total'] == Decimal('5825.00')
        assert summary['payment_count'] == 2

    def test_balanced_close(self, hotel, folio, front_desk):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))
        record_payment(
            tenant=hotel, folio=folio, amount=Decimal('6000'), payment_method=PaymentMethod.CASH,
            processed_by=front_desk,
        )

        closed = close_shift(shift=shift, counted_cash=Decimal('11000'), closed_by=front_desk)

        assert closed.status == ShiftStatus.COMPLETED
        assert closed.cash_variance == Decimal('0.00')
        assert closed.authorized_by is None
        # The folio still owes 5825 and is handed over
        assert [item['type'] for item in closed.unresolved_items] == ['open_folio']

    def test_variance_needs_manager(self, front_desk, housekeeper):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))

        with pytest.raises(ShiftAuthorizationRequiredError):
            close_shift(shift=shift, counted_cash=Decimal('4500'), closed_by=front_desk)
        with pytest.raises(ShiftAuthorizationRequiredError):
            close_shift(shift=shift, counted_cash=Decimal('4500'), closed_by=front_desk, authorized_by=housekeeper)

    def test_variance_authorized_by_manager(self, front_desk, manager):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))

        closed = close_shift(
            shift=shift, counted_cash=Decimal('4500'), closed_by=front_desk, authorized_by=manager,
        )

        assert closed.cash_variance == Decimal('-500.00')
        assert closed.authorized_by == manager

    def test_other_hotel_manager_cannot_authorize(self, front_desk, other_manager):
        shift = start_shift(staff=front_desk, opening_cash=Decimal('5000'))

        with pytest.raises(ShiftAuthorizationRequiredError):
            close_shift(
                shift=shift, counted_cash=Decimal('4500'), closed_by=front_desk, authorized_by=other_manager,
            )

    def test_manager_closing_own_variance(self, manager):
        shift = start_shift(staff=manager, opening_cash=Decimal('1000'))

        closed = close_shift(shift=shift, counted_cash=Decimal('1200'), closed_by=manager)

        assert closed.cash_variance == Decimal('200.00')
        assert closed.authorized_by == manager


@pytest.mark.django_db
class TestDoubleTaxRepair:

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

    def test_scan_flags_double_taxed_room_charge(self, hotel, double_taxed_charge):
        items = scan_double_tax_charges(tenant=hotel)

        assert len(items) == 1
        item = items[0]
        assert item['charge_id'] == double_taxed_charge.id
        assert item['nights'] == 1
        assert item['calculated_base_amount'] == Decimal('10000.00')
        assert item['calculated_total_amount'] == Decimal('11825.00')
        assert item['difference'] == Decimal('2158.06')

    def test_scan_ignores_charges_with_components(self, hotel, folio):
        assert scan_double_tax_charges(tenant=hotel) == []

    def test_scan_ignores_charge_without_nights(self, hotel, folio):
        FolioCharge.objects.create(
            folio=folio,
            charge_type=ChargeType.ROOM,
            description='Room upgrade',
            amount=Decimal('13983.06'),
        )

        assert scan_double_tax_charges(tenant=hotel) == []

    def test_fix_rewrites_charge_and_balance(self, hotel, folio, double_taxed_charge):
        result = fix_double_tax_charges(tenant=hotel)

        double_taxed_charge.refresh_from_db()
        folio.refresh_from_db()
        assert result == {
            'charges_fixed': 1,
            'folios_recalculated': 1,
            'total_adjustment': Decimal('2158.06'),
        }
        assert double_taxed_charge.amount == Decimal('11825.00')
        assert double_taxed_charge.vat_amount == Decimal('825.00')
        assert folio.balance == Decimal('23650.00')
        assert scan_double_tax_charges(tenant=hotel) == []

    def test_scan_is_per_hotel(self, other_hotel, double_taxed_charge):
        assert scan_double_tax_charges(tenant=other_hotel) == []
