"""Folio lifecycle: opening, posting charges, balances and closing."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.audit.services import record_audit
from apps.billing.models import Folio, FolioCharge, FolioStatus, PaymentRecordStatus
from apps.reservations.models import ReservationStatus
from apps.tenants.services import get_hotel_settings, next_invoice_number

from .exceptions import (
    FolioNotFoundError,
    FolioClosedError,
    OutstandingBalanceError,
    InvalidAmountError,
    NoOpenFolioError,
)
from .tax_calculator import calculate_charge, ZERO

logger = logging.getLogger(__name__)


def get_folio(*, tenant, folio_id: UUID, lock: bool = False) -> Folio:
    queryset = Folio.objects.select_for_update() if lock else Folio.objects.all()
    try:
        return queryset.get(id=folio_id, tenant=tenant)
    except Folio.DoesNotExist:
        raise FolioNotFoundError(f"Folio with ID {folio_id} not found")


def get_open_folio(reservation):
    """The open folio of a reservation, or None."""
    return (
        Folio.objects.select_for_update()
        .filter(reservation=reservation, status=FolioStatus.OPEN)
        .first()
    )


def get_room_open_folio(room) -> Folio:
    """
    Open folio of the guest currently checked into ``room``.

    Raises:
        NoOpenFolioError: If nobody is checked in or the folio is closed
    """
    folio = (
        Folio.objects.select_for_update(of=('self',))
        .select_related('reservation')
        .filter(
            tenant_id=room.tenant_id,
            status=FolioStatus.OPEN,
            reservation__room=room,
            reservation__status=ReservationStatus.CHECKED_IN,
        )
        .order_by('-created_at')
        .first()
    )
    if folio is None:
        raise NoOpenFolioError(f"Room {room.room_number} has no checked-in guest with an open folio")
    return folio


@transaction.atomic
def get_or_create_open_folio(*, reservation, actor=None) -> Folio:
    """
    Return the reservation's open folio, opening one if needed.

    The first folio is numbered ``FOL-<reservation_number>``; later ones get
    a numeric suffix.
    """
    folio = get_open_folio(reservation)
    if folio:
        return folio

    folio_number = f"FOL-{reservation.reservation_number}"
    previous = Folio.objects.filter(reservation=reservation).count()
    if previous:
        folio_number = f"{folio_number}-{previous + 1}"

    folio = Folio.objects.create(
        tenant=reservation.tenant,
        reservation=reservation,
        folio_number=folio_number,
    )
    record_audit(
        tenant=reservation.tenant,
        actor=actor,
        action='folio_opened',
        resource_type='folio',
        resource_id=folio.id,
        description=f"Folio {folio_number} opened for {reservation.guest_name}",
    )
    logger.info("Opened folio %s", folio_number)
    return folio


def recalculate_folio_balance(folio: Folio) -> Folio:
    """
    Recompute denormalised totals from charges and completed payments.

    balance = sum(charge.amount) - sum(completed payment.amount)
    """
    total_charges = folio.charges.aggregate(total=Sum('amount'))['total'] or ZERO
    total_payments = (
        folio.payments.filter(status=PaymentRecordStatus.COMPLETED)
        .aggregate(total=Sum('amount'))['total'] or ZERO
    )

    folio.total_charges = total_charges
    folio.total_payments = total_payments
    folio.balance = total_charges - total_payments
    folio.save(update_fields=['total_charges', 'total_payments', 'balance', 'updated_at'])
    return folio


def guest_is_tax_exempt(folio: Folio) -> bool:
    reservation = folio.reservation
    return bool(reservation and reservation.guest and reservation.guest.tax_exempt)


@transaction.atomic
def post_charge(
    *,
    folio: Folio,
    charge_type: str,
    amount,
    description: str,
    posted_by=None,
    is_taxable: bool = True,
    is_service_chargeable: bool = True,
    reference_type: str = '',
    reference_id: str = '',
    breakdown: Optional[dict] = None,
) -> FolioCharge:
    """
    Post a charge to an open folio.

    ``amount`` is the price as entered; VAT and service charge are derived by
    the tax calculator from the hotel's settings. Pass ``breakdown`` (the
    output of calculate_charge) to post components already computed
    elsewhere, e.g. a restaurant bill, without taxing them again.

    Raises:
        InvalidAmountError: If amount is not positive
        FolioClosedError: If folio is closed
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Charge amount must be greater than zero")

    folio = Folio.objects.select_for_update().get(id=folio.id)
    if not folio.is_open:
        raise FolioClosedError(f"Folio {folio.folio_number} is closed")

    if breakdown is None:
        breakdown = calculate_charge(
            base_amount=amount,
            charge_type=charge_type,
            hotel_settings=get_hotel_settings(tenant=folio.tenant),
            is_taxable=is_taxable,
            is_service_chargeable=is_service_chargeable,
            guest_tax_exempt=guest_is_tax_exempt(folio),
        )

    charge = FolioCharge.objects.create(
        folio=folio,
        charge_type=charge_type,
        description=description,
        base_amount=breakdown['base_amount'],
        service_charge_amount=breakdown['service_charge_amount'],
        vat_amount=breakdown['vat_amount'],
        amount=breakdown['total_amount'],
        is_taxable=is_taxable,
        is_service_chargeable=is_service_chargeable,
        reference_type=reference_type,
        reference_id=str(reference_id) if reference_id else '',
        posted_by=posted_by,
    )
    recalculate_folio_balance(folio)

    record_audit(
        tenant=folio.tenant,
        actor=posted_by,
        action='charge_posted',
        resource_type='folio',
        resource_id=folio.id,
        description=f"{description}: {charge.amount}",
        metadata={
            'charge_id': str(charge.id),
            'charge_type': charge_type,
            'amount': str(charge.amount),
        },
    )
    logger.info("Posted %s charge %s to folio %s", charge_type, charge.amount, folio.folio_number)
    return charge


def folio_breakdown(folio: Folio) -> dict:
    """
    Totals of a folio grouped by charge type, with tax components.

    Returns:
        dict: folio_number, status, by_charge_type (list), base_total,
        service_charge_total, vat_total, total_charges, total_payments,
        payments_by_method (list), balance
    """
    by_type = (
        folio.charges.values('charge_type')
        .annotate(
            base=Sum('base_amount'),
            service_charge=Sum('service_charge_amount'),
            vat=Sum('vat_amount'),
            total=Sum('amount'),
        )
        .order_by('charge_type')
    )
    totals = folio.charges.aggregate(
        base=Sum('base_amount'),
        service_charge=Sum('service_charge_amount'),
        vat=Sum('vat_amount'),
        total=Sum('amount'),
    )
    payments = (
        folio.payments.filter(status=PaymentRecordStatus.COMPLETED)
        .values('payment_method')
        .annotate(total=Sum('amount'))
        .order_by('payment_method')
    )
    total_payments = sum((p['total'] for p in payments), ZERO)
    total_charges = totals['total'] or ZERO

    return {
        'folio_id': folio.id,
        'folio_number': folio.folio_number,
        'status': folio.status,
        'by_charge_type': list(by_type),
        'base_total': totals['base'] or ZERO,
        'service_charge_total': totals['service_charge'] or ZERO,
        'vat_total': totals['vat'] or ZERO,
        'total_charges': total_charges,
        'total_payments': total_payments,
        'payments_by_method': list(payments),
        'balance': total_charges - total_payments,
    }


@transaction.atomic
def close_folio(*, folio: Folio, actor=None, force: bool = False) -> Folio:
    """
    Close a folio once it is settled.

    Raises:
        FolioClosedError: If folio already closed
        OutstandingBalanceError: If balance > 0 and not forced
    """
    folio = Folio.objects.select_for_update().get(id=folio.id)
    if not folio.is_open:
        raise FolioClosedError(f"Folio {folio.folio_number} is already closed")

    recalculate_folio_balance(folio)
    if folio.balance > 0 and not force:
        raise OutstandingBalanceError(
            f"Folio {folio.folio_number} has an outstanding balance of {folio.balance}"
        )

    folio.status = FolioStatus.CLOSED
    folio.closed_at = timezone.now()
    folio.closed_by = actor
    folio.invoice_number = next_invoice_number(tenant=folio.tenant)
    folio.save(update_fields=['status', 'closed_at', 'closed_by', 'invoice_number', 'updated_at'])

    record_audit(
        tenant=folio.tenant,
        actor=actor,
        action='folio_closed',
        resource_type='folio',
        resource_id=folio.id,
        description=f"Folio {folio.folio_number} closed as {folio.invoice_number}",
        metadata={'balance': str(folio.balance), 'forced': force and folio.balance > 0},
    )
    logger.info("Closed folio %s (balance %s)", folio.folio_number, folio.balance)
    return folio
