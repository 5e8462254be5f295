"""Services for reservations business logic."""

from .exceptions import (
    ReservationsServiceError,
    ReservationNotFoundError,
    GuestNotFoundError,
    InvalidReservationError,
    GuestBlacklistedError,
    ReservationConflictError,
    InvalidReservationStateError,
    RoomNotReadyError,
    UnsettledBalanceError,
)
from .reservation_lifecycle import (
    get_reservation,
    create_reservation,
    assign_room,
    check_in,
    check_out,
    cancel_reservation,
    extend_stay,
    mark_no_show,
)
from .front_desk import arrivals, departures, in_house

__all__ = [
    # Exceptions
    'ReservationsServiceError',
    'ReservationNotFoundError',
    'GuestNotFoundError',
    'InvalidReservationError',
    'GuestBlacklistedError',
    'ReservationConflictError',
    'InvalidReservationStateError',
    'RoomNotReadyError',
    'UnsettledBalanceError',
    # Services
    'get_reservation',
    'create_reservation',
    'assign_room',
    'check_in',
    'check_out',
    'cancel_reservation',
    'extend_stay',
    'mark_no_show',
    'arrivals',
    'departures',
    'in_house',
]
