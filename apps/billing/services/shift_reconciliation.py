"""
Shift cash reconciliation.

A shift opens with a float (opening_cash). Every payment a staff member takes
while the shift is active is attached to it. At close, the counted cash is
compared with the expected cash and the difference recorded as variance; any
open work the next shift inherits is snapshotted into ``unresolved_items``.
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import MANAGEMENT_ROLES
from apps.audit.services import record_audit
from apps.billing.models import (
    Folio,
    FolioStatus,
    PaymentMethod,
    PaymentRecordStatus,
    ShiftSession,
    ShiftStatus,
)
from apps.housekeeping.models import HousekeepingTask, OPEN_TASK_STATUSES
from apps.maintenance.models import WorkOrder, OPEN_WORK_ORDER_STATUSES
from apps.qr.models import ServiceRequest, OPEN_REQUEST_STATUSES

from .exceptions import (
    ShiftNotFoundError,
    ShiftAlreadyActiveError,
    ShiftClosedError,
    ShiftAuthorizationRequiredError,
    InvalidAmountError,
)
from .tax_calculator import ZERO

logger = logging.getLogger(__name__)

# Collected outside the cash drawer
NON_CASH_METHODS = (
    PaymentMethod.CARD,
    PaymentMethod.POS,
    PaymentMethod.TRANSFER,
    PaymentMethod.WALLET,
)


def get_shift(*, tenant, shift_id: UUID, lock: bool = False) -> ShiftSession:
    queryset = ShiftSession.objects.select_for_update() if lock else ShiftSession.objects.all()
    try:
        return queryset.get(id=shift_id, tenant=tenant)
    except ShiftSession.DoesNotExist:
        raise ShiftNotFoundError(f"Shift with ID {shift_id} not found")


@transaction.atomic
def start_shift(*, staff, opening_cash=ZERO) -> ShiftSession:
    """
    Open a shift for a staff member.

    Raises:
        ShiftAlreadyActiveError: If the staff member already has one open
        InvalidAmountError: If opening_cash is negative
    """
    opening_cash = Decimal(opening_cash)
    if opening_cash < 0:
        raise InvalidAmountError("Opening cash cannot be negative")

    if ShiftSession.objects.select_for_update().filter(staff=staff, status=ShiftStatus.ACTIVE).exists():
        raise ShiftAlreadyActiveError(f"{staff.email} already has an active shift")

    shift = ShiftSession.objects.create(
        tenant=staff.tenant,
        staff=staff,
        role=staff.role,
        opening_cash=opening_cash,
    )
    record_audit(
        tenant=staff.tenant,
        actor=staff,
        action='shift_started',
        resource_type='shift',
        resource_id=shift.id,
        description=f"Shift started with opening cash {opening_cash}",
    )
    logger.info("Shift %s started by %s", shift.id, staff.email)
    return shift


def shift_summary(shift: ShiftSession) -> dict:
    """
    Running totals of a shift.

    expected_cash = opening_cash + completed cash payments of the shift.
    pos_total covers card, terminal, transfer and wallet collections.
    """
    completed = shift.payments.filter(status=PaymentRecordStatus.COMPLETED)
    by_method = list(
        completed.values('payment_method')
        .annotate(total=Sum('amount'))
        .order_by('payment_method')
    )
    totals = {row['payment_method']: row['total'] for row in by_method}

    cash_collected = totals.get(PaymentMethod.CASH, ZERO)
    pos_total = sum((totals.get(method, ZERO) for method in NON_CASH_METHODS), ZERO)

    return {
        'shift_id': shift.id,
        'staff_email': shift.staff.email,
        'status': shift.status,
        'start_time': shift.start_time,
        'end_time': shift.end_time,
        'opening_cash': shift.opening_cash,
        'cash_collected': cash_collected,
        'expected_cash': shift.opening_cash + cash_collected,
        'pos_total': pos_total,
        'total_collected': cash_collected + pos_total,
        'payment_count': completed.count(),
        'totals_by_method': by_method,
    }


def collect_unresolved_items(tenant) -> list:
    """Open work handed over to the next shift."""
    items = []

    requests = ServiceRequest.objects.filter(
        tenant=tenant,
        status__in=OPEN_REQUEST_STATUSES,
    ).select_related('room')
    for request in requests:
        items.append({
            'type': 'service_request',
            'id': str(request.id),
            'label': f"{request.get_service_type_display()} ({request.status})",
            'room': request.room.room_number if request.room else None,
        })

    tasks = HousekeepingTask.objects.filter(
        tenant=tenant,
        status__in=OPEN_TASK_STATUSES,
    ).select_related('room')
    for task in tasks:
        items.append({
            'type': 'housekeeping_task',
            'id': str(task.id),
            'label': f"{task.title} ({task.status})",
            'room': task.room.room_number if task.room else None,
        })

    work_orders = WorkOrder.objects.filter(
        tenant=tenant,
        status__in=OPEN_WORK_ORDER_STATUSES,
    ).select_related('room')
    for work_order in work_orders:
        items.append({
            'type': 'work_order',
            'id': str(work_order.id),
            'label': f"{work_order.work_order_number}: {work_order.title} ({work_order.status})",
            'room': work_order.room.room_number if work_order.room else None,
        })

    folios = Folio.objects.filter(tenant=tenant, status=FolioStatus.OPEN, balance__gt=0)
    for folio in folios:
        items.append({
            'type': 'open_folio',
            'id': str(folio.id),
            'label': f"{folio.folio_number} balance {folio.balance}",
            'room': None,
        })

    return items


def _check_authorizer(shift: ShiftSession, authorized_by) -> None:
    if authorized_by is None:
        raise ShiftAuthorizationRequiredError(
            "A manager or owner must authorize closing a shift with a cash variance"
        )
    if (
        authorized_by.tenant_id != shift.tenant_id
        or authorized_by.role not in MANAGEMENT_ROLES
        or not authorized_by.is_active
    ):
        raise ShiftAuthorizationRequiredError(
            "Variance can only be authorized by an active manager or owner of this hotel"
        )


@transaction.atomic
def close_shift(
    *,
    shift: ShiftSession,
    counted_cash,
    closed_by,
    handover_notes: str = '',
    authorized_by=None,
) -> ShiftSession:
    """
    Close a shift and record its cash variance.

    Args:
        shift: Shift to close
        counted_cash: Cash physically counted in the drawer
        closed_by: User closing the shift
        handover_notes: Notes for the next shift
        authorized_by: Manager/owner signing off a non-zero variance; not
            needed when closed_by is management

    Raises:
        ShiftClosedError: If shift already completed
        InvalidAmountError: If counted_cash is negative
        ShiftAuthorizationRequiredError: If variance is non-zero and not
            authorized by management
    """
    shift = ShiftSession.objects.select_for_update().get(id=shift.id)
    if shift.status != ShiftStatus.ACTIVE:
        raise ShiftClosedError("Shift is already closed")

    counted_cash = Decimal(counted_cash)
    if counted_cash < 0:
        raise InvalidAmountError("Counted cash cannot be negative")

    summary = shift_summary(shift)
    variance = counted_cash - summary['expected_cash']

    if variance != 0:
        if closed_by.role in MANAGEMENT_ROLES:
            authorized_by = authorized_by or closed_by
        else:
            _check_authorizer(shift, authorized_by)
        logger.warning("Shift %s closing with cash variance %s", shift.id, variance)

    shift.status = ShiftStatus.COMPLETED
    shift.end_time = timezone.now()
    shift.cash_total = counted_cash
    shift.expected_cash = summary['expected_cash']
    shift.cash_variance = variance
    shift.pos_total = summary['pos_total']
    shift.handover_notes = handover_notes
    shift.unresolved_items = collect_unresolved_items(shift.tenant)
    shift.authorized_by = authorized_by if variance != 0 else None
    shift.save()

    record_audit(
        tenant=shift.tenant,
        actor=closed_by,
        action='shift_closed',
        resource_type='shift',
        resource_id=shift.id,
        description=f"Shift closed, variance {variance}",
        metadata={
            'expected_cash': str(summary['expected_cash']),
            'counted_cash': str(counted_cash),
            'variance': str(variance),
            'authorized_by': str(authorized_by.id) if variance != 0 and authorized_by else None,
            'unresolved_items': len(shift.unresolved_items),
        },
    )
    logger.info("Shift %s closed (variance %s)", shift.id, variance)
    return shift
