"""Room status changes guarded by the transition map."""

import logging
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import record_audit
from apps.rooms.models import Room, RoomStatus

from .exceptions import RoomNotFoundError, InvalidStatusTransitionError

logger = logging.getLogger(__name__)


def get_locked_room(*, tenant, room_id: UUID) -> Room:
    """Fetch a room of the hotel with a row lock."""
    try:
        return Room.objects.select_for_update().get(id=room_id, tenant=tenant)
    except Room.DoesNotExist:
        raise RoomNotFoundError(f"Room with ID {room_id} not found")


def apply_room_status(room: Room, new_status: str, *, actor=None, reason: str = "", enforce: bool = True) -> Room:
    """
    Move a room (already locked by the caller) to a new status.

    Args:
        room: Room instance fetched with select_for_update
        new_status: Target RoomStatus value
        actor: User making the change, None for system jobs
        reason: Free-text reason kept in the audit trail
        enforce: Reject transitions outside ROOM_STATUS_TRANSITIONS

    Raises:
        InvalidStatusTransitionError: If enforce and transition not allowed
    """
    if room.status == new_status:
        return room

    if enforce and not room.can_transition_to(new_status):
        logger.warning(
            "Rejected room %s status change %s -> %s", room.room_number, room.status, new_status
        )
        raise InvalidStatusTransitionError(
            f"Room {room.room_number} cannot change from {room.status} to {new_status}"
        )

    previous = room.status
    room.status = new_status
    update_fields = ['status', 'updated_at']
    if new_status == RoomStatus.CLEAN:
        room.last_cleaned = timezone.now()
        update_fields.append('last_cleaned')
    room.save(update_fields=update_fields)

    record_audit(
        tenant=room.tenant,
        actor=actor,
        action='room_status_changed',
        resource_type='room',
        resource_id=room.id,
        description=reason or f"Room {room.room_number}: {previous} -> {new_status}",
        metadata={'from': previous, 'to': new_status},
    )
    logger.info("Room %s status %s -> %s", room.room_number, previous, new_status)
    return room


@transaction.atomic
def change_room_status(*, tenant, room_id: UUID, new_status: str, actor=None, reason: str = "") -> Room:
    """
    Change a room's status if the transition map allows it.

    Raises:
        RoomNotFoundError: If room doesn't exist in the hotel
        InvalidStatusTransitionError: If transition not allowed
    """
    room = get_locked_room(tenant=tenant, room_id=room_id)
    return apply_room_status(room, new_status, actor=actor, reason=reason)
