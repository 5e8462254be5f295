"""
Room / reservation consistency checks and repairs.

A room's status should agree with its active (confirmed or checked-in)
reservations. This module reports disagreements and repairs them:

* no active reservation but room occupied -> room becomes available
* active reservation(s) but room available -> occupied if a guest is
  checked in, otherwise reserved
* more than one active reservation -> the earliest booking is kept and the
  others are cancelled

Each room is repaired in its own savepoint so one failure does not stop the
rest of the run.
"""

import logging
from typing import Optional

from django.db import transaction, DatabaseError
from django.db.models import Prefetch
from django.utils import timezone

from apps.audit.services import record_audit
from apps.reservations.models import Reservation, ReservationStatus, ACTIVE_RESERVATION_STATUSES
from apps.rooms.models import Room, RoomStatus

logger = logging.getLogger(__name__)

# Statuses the sync job is allowed to overwrite
SYNCABLE_STATUSES = (RoomStatus.AVAILABLE, RoomStatus.OCCUPIED, RoomStatus.RESERVED)

DUPLICATE_CANCELLATION_REASON = 'Duplicate active reservation'


class FixAction:
    MARKED_AVAILABLE = 'marked_available'
    UPDATED_STATUS = 'updated_status'
    CANCELLED_EXTRAS = 'cancelled_extras'
    NO_ACTION_NEEDED = 'no_action_needed'
    FAILED = 'failed'


def _rooms_with_active_reservations(tenant):
    active = Reservation.objects.filter(status__in=ACTIVE_RESERVATION_STATUSES).order_by('created_at')
    return (
        Room.objects
        .filter(tenant=tenant)
        .prefetch_related(Prefetch('reservations', queryset=active, to_attr='active_reservations'))
        .order_by('room_number')
    )


def _evaluate(room: Room) -> dict:
    active = room.active_reservations
    expected_status = room.status
    inconsistent = False

    if not active and room.status == RoomStatus.OCCUPIED:
        expected_status = RoomStatus.AVAILABLE
        inconsistent = True
    elif active and room.status == RoomStatus.AVAILABLE:
        if any(r.status == ReservationStatus.CHECKED_IN for r in active):
            expected_status = RoomStatus.OCCUPIED
        else:
            expected_status = RoomStatus.RESERVED
        inconsistent = True
    elif len(active) > 1:
        inconsistent = True

    return {
        'room_id': room.id,
        'room_number': room.room_number,
        'room_status': room.status,
        'active_reservations': len(active),
        'expected_status': expected_status,
        'inconsistent': inconsistent,
        'reservation_ids': [r.id for r in active],
    }


def detect_inconsistencies(*, tenant) -> list[dict]:
    """
    Report rooms whose status disagrees with their active reservations.

    Returns:
        List of dicts (room_id, room_number, room_status,
        active_reservations, expected_status, inconsistent, reservation_ids)
        for inconsistent rooms only.
    """
    report = [_evaluate(room) for room in _rooms_with_active_reservations(tenant)]
    return [item for item in report if item['inconsistent']]


def _fix_one(item: dict, *, tenant, actor) -> str:
    room = Room.objects.select_for_update().get(id=item['room_id'], tenant=tenant)

    if item['active_reservations'] == 0 and item['room_status'] == RoomStatus.OCCUPIED:
        room.status = RoomStatus.AVAILABLE
        room.save(update_fields=['status', 'updated_at'])
        return FixAction.MARKED_AVAILABLE

    if item['active_reservations'] > 0 and item['room_status'] == RoomStatus.AVAILABLE:
        room.status = item['expected_status']
        room.save(update_fields=['status', 'updated_at'])
        return FixAction.UPDATED_STATUS

    if item['active_reservations'] > 1:
        extras = item['reservation_ids'][1:]
        Reservation.objects.filter(id__in=extras).update(
            status=ReservationStatus.CANCELLED,
            cancelled_at=timezone.now(),
            cancellation_reason=DUPLICATE_CANCELLATION_REASON,
            updated_at=timezone.now(),
        )
        return FixAction.CANCELLED_EXTRAS

    return FixAction.NO_ACTION_NEEDED


def fix_inconsistencies(*, tenant, actor=None, items: Optional[list[dict]] = None) -> list[dict]:
    """
    Repair inconsistent rooms.

    Args:
        tenant: Hotel to repair
        actor: User triggering the repair, None for scheduled runs
        items: Output of detect_inconsistencies(); detected fresh when omitted

    Returns:
        One ``{room_id, room_number, action, success}`` dict per room
    """
    if items is None:
        items = detect_inconsistencies(tenant=tenant)

    results = []
    for item in items:
        if not item['inconsistent']:
            continue
        try:
            with transaction.atomic():
                action = _fix_one(item, tenant=tenant, actor=actor)
                record_audit(
                    tenant=tenant,
                    actor=actor,
                    action='room_consistency_fixed',
                    resource_type='room',
                    resource_id=item['room_id'],
                    description=f"Room {item['room_number']}: {action}",
                    metadata={
                        'fix': action,
                        'room_status': item['room_status'],
                        'expected_status': item['expected_status'],
                        'reservation_ids': [str(r) for r in item['reservation_ids']],
                    },
                )
        except (DatabaseError, Room.DoesNotExist):
            logger.exception("Failed to fix inconsistency for room %s", item['room_number'])
            results.append({
                'room_id': item['room_id'],
                'room_number': item['room_number'],
                'action': FixAction.FAILED,
                'success': False,
            })
            continue

        results.append({
            'room_id': item['room_id'],
            'room_number': item['room_number'],
            'action': action,
            'success': True,
        })

    fixed = sum(1 for r in results if r['success'])
    logger.info(
        "Room consistency repair for tenant %s: %d fixed, %d failed",
        tenant.id, fixed, len(results) - fixed,
    )
    return results


def correct_room_status(room: Room) -> str:
    """Status a room should have given its active reservations."""
    statuses = {r.status for r in room.active_reservations}
    if ReservationStatus.CHECKED_IN in statuses:
        return RoomStatus.OCCUPIED
    if ReservationStatus.CONFIRMED in statuses:
        return RoomStatus.RESERVED
    return RoomStatus.AVAILABLE


@transaction.atomic
def sync_room_statuses(*, tenant, actor=None, dry_run: bool = False) -> list[dict]:
    """
    Recompute occupancy status of every room from its reservations.

    Only rooms currently available, occupied or reserved are touched; rooms
    in a housekeeping or maintenance state keep their status.

    Returns:
        List of ``{room_id, room_number, current_status, correct_status}``
        for rooms whose status differed
    """
    updates = []
    for room in _rooms_with_active_reservations(tenant):
        if room.status not in SYNCABLE_STATUSES:
            continue
        correct = correct_room_status(room)
        if room.status != correct:
            updates.append({
                'room_id': room.id,
                'room_number': room.room_number,
                'current_status': room.status,
                'correct_status': correct,
            })

    if dry_run or not updates:
        return updates

    for update in updates:
        Room.objects.filter(id=update['room_id']).update(
            status=update['correct_status'],
            updated_at=timezone.now(),
        )

    record_audit(
        tenant=tenant,
        actor=actor,
        action='room_status_synced',
        resource_type='room',
        description=f"Synchronised {len(updates)} room status(es)",
        metadata={'rooms': [u['room_number'] for u in updates]},
    )
    logger.info("Synchronised %d room statuses for tenant %s", len(updates), tenant.id)
    return updates
