"""
Reservation lifecycle: booking, room assignment, check-in, check-out,
cancellation, stay extension and no-shows.

Every transition keeps room status, folio and audit trail in step inside one
transaction. Rooms and reservations are locked with select_for_update so two
front desk terminals cannot sell the same room.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import record_audit
from apps.billing.models import ChargeType
from apps.billing.services import get_or_create_open_folio, get_open_folio, post_charge, close_folio
from apps.housekeeping.models import TaskType, TaskPriority
from apps.housekeeping.services import create_task
from apps.reservations.models import Guest, Reservation, ReservationStatus, ACTIVE_RESERVATION_STATUSES
from apps.rooms.models import Room, RoomStatus, RoomType
from apps.rooms.services import apply_room_status, get_locked_room, overlapping_reservations, RoomNotFoundError
from apps.tenants.services import generate_document_number

from .exceptions import (
    ReservationNotFoundError,
    GuestNotFoundError,
    InvalidReservationError,
    GuestBlacklistedError,
    ReservationConflictError,
    InvalidReservationStateError,
    RoomNotReadyError,
    UnsettledBalanceError,
)

logger = logging.getLogger(__name__)

# Rooms that cannot receive a guest
NOT_READY_STATUSES = (RoomStatus.DIRTY, RoomStatus.MAINTENANCE, RoomStatus.OUT_OF_SERVICE)

# An inspected clean room can be held for an arriving guest like an available one
HOLDABLE_STATUSES = (RoomStatus.AVAILABLE, RoomStatus.CLEAN)


def get_reservation(*, tenant, reservation_id: UUID, lock: bool = True) -> Reservation:
    queryset = Reservation.objects.select_related('room', 'guest', 'tenant')
    if lock:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(id=reservation_id, tenant=tenant)
    except Reservation.DoesNotExist:
        raise ReservationNotFoundError(f"Reservation with ID {reservation_id} not found")


def _ensure_room_free(room: Room, check_in: date, check_out: date, exclude_reservation_id=None) -> None:
    conflicts = overlapping_reservations(
        room=room,
        check_in=check_in,
        check_out=check_out,
        exclude_reservation_id=exclude_reservation_id,
    )
    conflict = conflicts.first()
    if conflict:
        logger.warning(
            "Room %s conflict with %s for %s..%s",
            room.room_number, conflict.reservation_number, check_in, check_out,
        )
        raise ReservationConflictError(
            f"Room {room.room_number} is already booked by {conflict.reservation_number} "
            f"({conflict.check_in_date} to {conflict.check_out_date})"
        )


def _lock_room(tenant, room_id) -> Room:
    try:
        return get_locked_room(tenant=tenant, room_id=room_id)
    except RoomNotFoundError as e:
        raise InvalidReservationError(str(e))


def _hold_room(room: Room, reservation: Reservation, actor) -> None:
    """Mark a free room reserved when the stay starts today or earlier."""
    if reservation.check_in_date <= timezone.localdate() and room.status in HOLDABLE_STATUSES:
        apply_room_status(
            room,
            RoomStatus.RESERVED,
            actor=actor,
            reason=f"Reserved for {reservation.reservation_number}",
            enforce=False,
        )


def _release_room(room: Optional[Room], reservation: Reservation, actor, reason: str) -> None:
    """Free a reserved room unless another active booking already holds it."""
    if room is None:
        return
    room = Room.objects.select_for_update().get(id=room.id)
    if room.status != RoomStatus.RESERVED:
        return
    still_held = (
        Reservation.objects
        .filter(room=room, status__in=ACTIVE_RESERVATION_STATUSES, check_in_date__lte=timezone.localdate())
        .exclude(id=reservation.id)
        .exists()
    )
    if still_held:
        return
    apply_room_status(room, RoomStatus.AVAILABLE, actor=actor, reason=reason)


@transaction.atomic
def create_reservation(
    *,
    tenant,
    actor,
    check_in_date: date,
    check_out_date: date,
    guest_name: str = '',
    guest_email: str = '',
    guest_phone: str = '',
    guest_id: Optional[UUID] = None,
    room_id: Optional[UUID] = None,
    room_type_id: Optional[UUID] = None,
    adults: int = 1,
    children: int = 0,
    room_rate: Optional[Decimal] = None,
    deposit_amount: Decimal = Decimal('0.00'),
    booking_source: str = 'front_desk',
    special_requests: str = '',
) -> Reservation:
    """
    Book a stay.

    The reservation is ``confirmed`` when a room is assigned, ``pending``
    otherwise. room_rate defaults to the room type's base rate and
    total_amount is rate x nights.

    Raises:
        InvalidReservationError: Bad dates, unknown room/type or no rate
        GuestNotFoundError: If guest_id is not a guest of the hotel
        GuestBlacklistedError: If the guest is blacklisted
        ReservationConflictError: If the room is taken for the dates
    """
    if check_out_date <= check_in_date:
        raise InvalidReservationError("Check-out date must be after check-in date")

    guest = None
    if guest_id:
        try:
            guest = Guest.objects.get(id=guest_id, tenant=tenant)
        except Guest.DoesNotExist:
            raise GuestNotFoundError(f"Guest with ID {guest_id} not found")
        if guest.is_blacklisted:
            logger.warning("Booking refused for blacklisted guest %s", guest.id)
            raise GuestBlacklistedError(f"{guest.full_name} is blacklisted: {guest.blacklist_reason}")
        guest_name = guest_name or guest.full_name
        guest_email = guest_email or guest.email
        guest_phone = guest_phone or guest.phone

    if not guest_name:
        raise InvalidReservationError("Guest name is required")

    room = None
    room_type = None
    if room_id:
        room = _lock_room(tenant, room_id)
        if not room.is_sellable:
            raise RoomNotReadyError(f"Room {room.room_number} is {room.get_status_display().lower()}")
        _ensure_room_free(room, check_in_date, check_out_date)
        room_type = room.room_type
    if room_type_id and room_type is None:
        room_type = RoomType.objects.filter(id=room_type_id, tenant=tenant).first()
        if room_type is None:
            raise InvalidReservationError(f"Room type with ID {room_type_id} not found")

    if room_rate is None:
        if room_type is None:
            raise InvalidReservationError("A room rate is required when no room type is given")
        room_rate = room_type.base_rate

    reservation = Reservation(
        tenant=tenant,
        reservation_number=generate_document_number('RES', model=Reservation, field='reservation_number'),
        guest=guest,
        guest_name=guest_name,
        guest_email=guest_email,
        guest_phone=guest_phone,
        room=room,
        room_type=room_type,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
        adults=adults,
        children=children,
        room_rate=room_rate,
        deposit_amount=deposit_amount,
        booking_source=booking_source,
        special_requests=special_requests,
        status=ReservationStatus.CONFIRMED if room else ReservationStatus.PENDING,
        created_by=actor,
    )
    reservation.total_amount = reservation.room_rate * reservation.nights
    reservation.save()

    if room:
        _hold_room(room, reservation, actor)

    record_audit(
        tenant=tenant,
        actor=actor,
        action='reservation_created',
        resource_type='reservation',
        resource_id=reservation.id,
        description=f"{reservation.reservation_number} for {guest_name}",
        metadata={
            'room': room.room_number if room else None,
            'check_in': str(check_in_date),
            'check_out': str(check_out_date),
            'total_amount': str(reservation.total_amount),
        },
    )
    logger.info("Created reservation %s", reservation.reservation_number)
    return reservation


@transaction.atomic
def assign_room(*, tenant, reservation_id: UUID, room_id: UUID, actor) -> Reservation:
    """
    Assign (or change) the room of a pending or confirmed reservation.

    Raises:
        ReservationNotFoundError, InvalidReservationStateError,
        InvalidReservationError, RoomNotReadyError, ReservationConflictError
    """
    reservation = get_reservation(tenant=tenant, reservation_id=reservation_id)
    if reservation.status not in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED):
        raise InvalidReservationStateError(
            f"Cannot assign a room to a {reservation.get_status_display().lower()} reservation"
        )

    room = _lock_room(tenant, room_id)
    if not room.is_sellable:
        raise RoomNotReadyError(f"Room {room.room_number} is {room.get_status_display().lower()}")
    _ensure_room_free(room, reservation.check_in_date, reservation.check_out_date, reservation.id)

    previous_room = reservation.room
    reservation.room = room
    reservation.room_type = room.room_type or reservation.room_type
    reservation.status = ReservationStatus.CONFIRMED
    reservation.save(update_fields=['room', 'room_type', 'status', 'updated_at'])

    if previous_room and previous_room.id != room.id:
        _release_room(previous_room, reservation, actor, f"Moved {reservation.reservation_number}")
    _hold_room(room, reservation, actor)

    record_audit(
        tenant=tenant,
        actor=actor,
        action='room_assigned',
        resource_type='reservation',
        resource_id=reservation.id,
        description=f"Room {room.room_number} assigned to {reservation.reservation_number}",
        metadata={'room': room.room_number, 'previous_room': previous_room.room_number if previous_room else None},
    )
    logger.info("Assigned room %s to %s", room.room_number, reservation.reservation_number)
    return reservation


def _room_charge_description(room: Room, nights: int, rate) -> str:
    return f"Room {room.room_number} - {nights} night(s) @ {rate}"


@transaction.atomic
def check_in(*, tenant, reservation_id: UUID, actor) -> Reservation:
    """
    Check a guest in.

    Opens the folio and posts the room charge (nights x net rate, taxed by the
    calculator). Room becomes occupied.

    Raises:
        ReservationNotFoundError: Unknown reservation
        InvalidReservationStateError: Not confirmed or no room assigned
        RoomNotReadyError: Room dirty or out of order
    """
    reservation = get_reservation(tenant=tenant, reservation_id=reservation_id)
    if reservation.status != ReservationStatus.CONFIRMED:
        raise InvalidReservationStateError(
            f"Only confirmed reservations can check in (status: {reservation.status})"
        )
    if reservation.room_id is None:
        raise InvalidReservationStateError("Assign a room before checking in")

    room = get_locked_room(tenant=tenant, room_id=reservation.room_id)
    if room.status in NOT_READY_STATUSES:
        raise RoomNotReadyError(f"Room {room.room_number} is {room.get_status_display().lower()}")

    reservation.status = ReservationStatus.CHECKED_IN
    reservation.checked_in_at = timezone.now()
    reservation.checked_in_by = actor
    reservation.save(update_fields=['status', 'checked_in_at', 'checked_in_by', 'updated_at'])

    # Readiness was checked above; a clean room goes straight to occupied
    apply_room_status(
        room, RoomStatus.OCCUPIED, actor=actor,
        reason=f"Check-in {reservation.reservation_number}", enforce=False,
    )

    folio = get_or_create_open_folio(reservation=reservation, actor=actor)
    post_charge(
        folio=folio,
        charge_type=ChargeType.ROOM,
        amount=reservation.room_rate * reservation.nights,
        description=_room_charge_description(room, reservation.nights, reservation.room_rate),
        posted_by=actor,
        reference_type='reservation',
        reference_id=reservation.id,
    )

    record_audit(
        tenant=tenant,
        actor=actor,
        action='guest_checked_in',
        resource_type='reservation',
        resource_id=reservation.id,
        description=f"{reservation.guest_name} checked into room {room.room_number}",
        metadata={'room': room.room_number, 'folio': folio.folio_number},
    )
    logger.info("Checked in %s to room %s", reservation.reservation_number, room.room_number)
    return reservation


@transaction.atomic
def check_out(*, tenant, reservation_id: UUID, actor, force: bool = False) -> Reservation:
    """
    Check a guest out.

    The folio must be settled unless ``force`` (a manager override, recorded
    in the audit trail). The room goes dirty and a checkout cleaning task is
    queued for housekeeping.

    Raises:
        ReservationNotFoundError: Unknown reservation
        InvalidReservationStateError: Guest not checked in
        UnsettledBalanceError: Outstanding balance and not forced
    """
    reservation = get_reservation(tenant=tenant, reservation_id=reservation_id)
    if reservation.status != ReservationStatus.CHECKED_IN:
        raise InvalidReservationStateError(
            f"Only checked-in guests can check out (status: {reservation.status})"
        )

    folio = get_open_folio(reservation)
    balance = folio.balance if folio else Decimal('0.00')
    if balance > 0 and not force:
        raise UnsettledBalanceError(
            f"Outstanding balance of {balance} must be settled before checkout",
            balance=balance,
        )

    spent = Decimal('0.00')
    if folio:
        folio = close_folio(folio=folio, actor=actor, force=force)
        spent = folio.total_charges

    reservation.status = ReservationStatus.CHECKED_OUT
    reservation.checked_out_at = timezone.now()
    reservation.checked_out_by = actor
    reservation.save(update_fields=['status', 'checked_out_at', 'checked_out_by', 'updated_at'])

    room = get_locked_room(tenant=tenant, room_id=reservation.room_id)
    apply_room_status(room, RoomStatus.DIRTY, actor=actor, reason=f"Check-out {reservation.reservation_number}")
    create_task(
        tenant=tenant,
        room=room,
        task_type=TaskType.CHECKOUT_CLEANING,
        title=f"Checkout cleaning - Room {room.room_number}",
        priority=TaskPriority.HIGH,
        actor=actor,
    )

    if reservation.guest_id:
        guest = Guest.objects.select_for_update().get(id=reservation.guest_id)
        guest.total_stays += 1
        guest.total_spent += spent
        guest.last_stay_date = timezone.localdate()
        guest.save(update_fields=['total_stays', 'total_spent', 'last_stay_date', 'updated_at'])

    record_audit(
        tenant=tenant,
        actor=actor,
        action='guest_checked_out',
        resource_type='reservation',
        resource_id=reservation.id,
        description=f"{reservation.guest_name} checked out of room {room.room_number}",
        metadata={
            'room': room.room_number,
            'balance': str(balance),
            'forced': force and balance > 0,
        },
    )
    logger.info("Checked out %s from room %s", reservation.reservation_number, room.room_number)
    return reservation


@transaction.atomic
def cancel_reservation(*, tenant, reservation_id: UUID, actor, reason: str) -> Reservation:
    """
    Cancel a pending or confirmed reservation and release its room.

    Raises:
        InvalidReservationError: If no reason given
        InvalidReservationStateError: If already checked in, out or cancelled
    """
    if not reason or not reason.strip():
        raise InvalidReservationError("A cancellation reason is required")

    reservation = get_reservation(tenant=tenant, reservation_id=reservation_id)
    if reservation.status not in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED):
        raise InvalidReservationStateError(
            f"Cannot cancel a {reservation.get_status_display().lower()} reservation"
        )

    reservation.status = ReservationStatus.CANCELLED
    reservation.cancelled_at = timezone.now()
    reservation.cancelled_by = actor
    reservation.cancellation_reason = reason
    reservation.save(update_fields=[
        'status', 'cancelled_at', 'cancelled_by', 'cancellation_reason', 'updated_at',
    ])

    _release_room(reservation.room, reservation, actor, f"Cancelled {reservation.reservation_number}")

    record_audit(
        tenant=tenant,
        actor=actor,
        action='reservation_cancelled',
        resource_type='reservation',
        resource_id=reservation.id,
        description=reason,
    )
    logger.info("Cancelled reservation %s", reservation.reservation_number)
    return reservation


@transaction.atomic
def extend_stay(*, tenant, reservation_id: UUID, new_check_out: date, actor) -> Reservation:
    """
    Move the check-out date later.

    For in-house guests the extra nights are posted to the open folio.

    Raises:
        InvalidReservationError: If new date is not later
        InvalidReservationStateError: If the stay is over or cancelled
        ReservationConflictError: If the room is booked for the extra nights
    """
    reservation = get_reservation(tenant=tenant, reservation_id=reservation_id)
    if reservation.status not in (
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
    ):
        raise InvalidReservationStateError(
            f"Cannot extend a {reservation.get_status_display().lower()} reservation"
        )
    if new_check_out <= reservation.check_out_date:
        raise InvalidReservationError("New check-out date must be after the current one")

    if reservation.room_id:
        room = get_locked_room(tenant=tenant, room_id=reservation.room_id)
        _ensure_room_free(room, reservation.check_out_date, new_check_out, reservation.id)

    previous_check_out = reservation.check_out_date
    extra_nights = (new_check_out - previous_check_out).days
    reservation.check_out_date = new_check_out
    reservation.total_amount = reservation.room_rate * reservation.nights
    reservation.save(update_fields=['check_out_date', 'total_amount', 'updated_at'])

    if reservation.status == ReservationStatus.CHECKED_IN:
        folio = get_or_create_open_folio(reservation=reservation, actor=actor)
        post_charge(
            folio=folio,
            charge_type=ChargeType.ROOM,
            amount=reservation.room_rate * extra_nights,
            description=_room_charge_description(reservation.room, extra_nights, reservation.room_rate),
            posted_by=actor,
            reference_type='reservation',
            reference_id=reservation.id,
        )

    record_audit(
        tenant=tenant,
        actor=actor,
        action='stay_extended',
        resource_type='reservation',
        resource_id=reservation.id,
        description=f"Extended to {new_check_out} (+{extra_nights} night(s))",
        metadata={'previous_check_out': str(previous_check_out), 'new_check_out': str(new_check_out)},
    )
    logger.info("Extended %s by %d night(s)", reservation.reservation_number, extra_nights)
    return reservation


@transaction.atomic
def mark_no_show(*, tenant, reservation_id: UUID, actor) -> Reservation:
    """
    Mark a confirmed reservation whose arrival date has passed as no-show.

    Raises:
        InvalidReservationStateError: If not confirmed or arrival not yet passed
    """
    reservation = get_reservation(tenant=tenant, reservation_id=reservation_id)
    if reservation.status != ReservationStatus.CONFIRMED:
        raise InvalidReservationStateError("Only confirmed reservations can be marked as no-show")
    if reservation.check_in_date >= timezone.localdate():
        raise InvalidReservationStateError("The guest's arrival date has not passed yet")

    reservation.status = ReservationStatus.NO_SHOW
    reservation.save(update_fields=['status', 'updated_at'])
    _release_room(reservation.room, reservation, actor, f"No-show {reservation.reservation_number}")

    record_audit(
        tenant=tenant,
        actor=actor,
        action='reservation_no_show',
        resource_type='reservation',
        resource_id=reservation.id,
        description=f"{reservation.guest_name} did not arrive on {reservation.check_in_date}",
    )
    logger.info("Marked %s as no-show", reservation.reservation_number)
    return reservation
