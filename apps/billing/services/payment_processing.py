"""Recording payments against folios, with duplicate detection."""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.audit.services import record_audit
from apps.billing.models import (
    Folio,
    Payment,
    PaymentRecordStatus,
    ShiftSession,
    ShiftStatus,
)
from apps.reservations.models import PaymentStatus

from .exceptions import (
    FolioClosedError,
    InvalidAmountError,
    DuplicatePaymentError,
    PaymentNotFoundError,
    InvalidPaymentStateError,
)
from .folio_management import recalculate_folio_balance

logger = logging.getLogger(__name__)


def get_active_shift(staff) -> Optional[ShiftSession]:
    if staff is None:
        return None
    return ShiftSession.objects.filter(staff=staff, status=ShiftStatus.ACTIVE).first()


def find_duplicate_payment(*, tenant, folio, amount: Decimal, payment_method: str, reference: str = ''):
    """
    A completed payment this one appears to repeat, or None.

    Matches either the same non-empty reference (ever, within the hotel) or the
    same folio, amount and method inside the duplicate-payment window.
    """
    completed = Payment.objects.filter(tenant=tenant, status=PaymentRecordStatus.COMPLETED)

    if reference:
        same_reference = completed.filter(reference=reference).first()
        if same_reference:
            return same_reference

    if folio is None:
        return None

    window = timedelta(seconds=settings.HOTEL_DUPLICATE_PAYMENT_WINDOW_SECONDS)
    return (
        completed.filter(
            folio=folio,
            amount=amount,
            payment_method=payment_method,
            created_at__gte=timezone.now() - window,
        )
        .order_by('-created_at')
        .first()
    )


def sync_reservation_payment_status(folio: Folio) -> None:
    """Mirror the folio balance into the reservation's payment_status."""
    reservation = folio.reservation
    if reservation is None:
        return

    if folio.total_payments > 0 and folio.balance <= 0:
        payment_status = PaymentStatus.PAID
    elif folio.total_payments > 0:
        payment_status = PaymentStatus.PARTIAL
    else:
        payment_status = PaymentStatus.UNPAID

    if reservation.payment_status != payment_status:
        reservation.payment_status = payment_status
        reservation.save(update_fields=['payment_status', 'updated_at'])


@transaction.atomic
def record_payment(
    *,
    tenant,
    amount,
    payment_method: str,
    processed_by=None,
    folio: Optional[Folio] = None,
    reference: str = '',
    notes: str = '',
    force: bool = False,
) -> Payment:
    """
    Record a completed payment, optionally against a folio.

    The payment is attached to the processing staff member's active shift so
    that it counts towards the shift's cash reconciliation.

    Args:
        tenant: Hotel receiving the payment
        amount: Amount paid (> 0)
        payment_method: PaymentMethod value
        processed_by: Staff member taking the payment
        folio: Folio being settled, None for walk-in sales
        reference: Card/transfer reference
        notes: Free text
        force: Record even if it looks like a duplicate

    Raises:
        InvalidAmountError: If amount <= 0
        FolioClosedError: If folio is closed
        DuplicatePaymentError: If a matching payment exists and not forced
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Payment amount must be greater than zero")

    if folio is not None:
        folio = Folio.objects.select_for_update().get(id=folio.id)
        if not folio.is_open:
            raise FolioClosedError(f"Folio {folio.folio_number} is closed")

    if not force:
        duplicate = find_duplicate_payment(
            tenant=tenant,
            folio=folio,
            amount=amount,
            payment_method=payment_method,
            reference=reference,
        )
        if duplicate:
            logger.warning(
                "Possible duplicate payment of %s via %s (matches %s)",
                amount, payment_method, duplicate.id,
            )
            raise DuplicatePaymentError(
                f"A {duplicate.payment_method} payment of {duplicate.amount} was already "
                f"recorded at {duplicate.created_at:%H:%M:%S}",
                existing_payment=duplicate,
            )

    payment = Payment.objects.create(
        tenant=tenant,
        folio=folio,
        amount=amount,
        payment_method=payment_method,
        reference=reference,
        notes=notes,
        processed_by=processed_by,
        shift=get_active_shift(processed_by),
    )

    if folio is not None:
        recalculate_folio_balance(folio)
        sync_reservation_payment_status(folio)

    record_audit(
        tenant=tenant,
        actor=processed_by,
        action='payment_recorded',
        resource_type='payment',
        resource_id=payment.id,
        description=f"{payment_method} payment of {amount}",
        metadata={
            'folio_id': str(folio.id) if folio else None,
            'amount': str(amount),
            'method': payment_method,
            'forced': force,
        },
    )
    logger.info("Recorded %s payment %s (folio %s)", payment_method, amount, folio.folio_number if folio else '-')
    return payment


@transaction.atomic
def void_payment(*, tenant, payment_id: UUID, actor, reason: str = '') -> Payment:
    """
    Refund a completed payment and reopen the amount on its folio.

    Raises:
        PaymentNotFoundError: If payment doesn't exist in the hotel
        InvalidPaymentStateError: If payment is not completed
    """
    try:
        payment = Payment.objects.select_for_update().get(id=payment_id, tenant=tenant)
    except Payment.DoesNotExist:
        raise PaymentNotFoundError(f"Payment with ID {payment_id} not found")

    if payment.status != PaymentRecordStatus.COMPLETED:
        raise InvalidPaymentStateError(f"Cannot refund a payment that is {payment.status}")

    payment.status = PaymentRecordStatus.REFUNDED
    if reason:
        payment.notes = f"{payment.notes}\nRefunded: {reason}".strip()
    payment.save(update_fields=['status', 'notes', 'updated_at'])

    if payment.folio_id:
        folio = Folio.objects.select_for_update().get(id=payment.folio_id)
        recalculate_folio_balance(folio)
        sync_reservation_payment_status(folio)

    record_audit(
        tenant=tenant,
        actor=actor,
        action='payment_refunded',
        resource_type='payment',
        resource_id=payment.id,
        description=reason or f"Refunded {payment.amount}",
        metadata={'amount': str(payment.amount), 'method': payment.payment_method},
    )
    logger.info("Refunded payment %s (%s)", payment.id, payment.amount)
    return payment
