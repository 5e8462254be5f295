"""Room availability over a date range."""

from datetime import date
from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from apps.reservations.models import Reservation, ACTIVE_RESERVATION_STATUSES
from apps.rooms.models import Room, UNSELLABLE_STATUSES

from .exceptions import InvalidDateRangeError


def overlapping_reservations(
    *,
    room: Room,
    check_in: date,
    check_out: date,
    exclude_reservation_id: Optional[UUID] = None,
) -> QuerySet:
    """
    Active reservations on the room whose stay overlaps [check_in, check_out).

    Same-day turnover is allowed: a stay ending on ``check_in`` does not overlap.
    """
    queryset = Reservation.objects.filter(
        room=room,
        status__in=ACTIVE_RESERVATION_STATUSES,
        check_in_date__lt=check_out,
        check_out_date__gt=check_in,
    )
    if exclude_reservation_id:
        queryset = queryset.exclude(id=exclude_reservation_id)
    return queryset


def find_available_rooms(
    *,
    tenant,
    check_in: date,
    check_out: date,
    room_type_id: Optional[UUID] = None,
) -> QuerySet:
    """
    Sellable rooms with no overlapping active reservation.

    Raises:
        InvalidDateRangeError: If check_out is not after check_in
    """
    if check_out <= check_in:
        raise InvalidDateRangeError("Check-out date must be after check-in date")

    busy_room_ids = Reservation.objects.filter(
        tenant=tenant,
        room__isnull=False,
        status__in=ACTIVE_RESERVATION_STATUSES,
        check_in_date__lt=check_out,
        check_out_date__gt=check_in,
    ).values('room_id')

    rooms = (
        Room.objects
        .filter(tenant=tenant)
        .exclude(status__in=UNSELLABLE_STATUSES)
        .exclude(id__in=busy_room_ids)
        .select_related('room_type')
    )
    if room_type_id:
        rooms = rooms.filter(room_type_id=room_type_id)
    return rooms
