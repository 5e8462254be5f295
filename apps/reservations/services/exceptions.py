"""Domain-specific exceptions for reservations services."""


class ReservationsServiceError(Exception):
    """Base exception for reservations services."""
    pass


class ReservationNotFoundError(ReservationsServiceError):
    """Raised when a reservation does not exist in the caller's hotel."""
    pass


class GuestNotFoundError(ReservationsServiceError):
    """Raised when a guest profile does not exist in the caller's hotel."""
    pass


class InvalidReservationError(ReservationsServiceError):
    """Raised when reservation input is inconsistent (dates, rate)."""
    pass


class GuestBlacklistedError(ReservationsServiceError):
    """Raised when booking for a blacklisted guest."""
    pass


class ReservationConflictError(ReservationsServiceError):
    """Raised when the room is already booked for overlapping dates."""
    pass


class InvalidReservationStateError(ReservationsServiceError):
    """Raised when an operation is not allowed in the reservation's status."""
    pass


class RoomNotReadyError(ReservationsServiceError):
    """Raised when checking into a room that is dirty or out of order."""
    pass


class UnsettledBalanceError(ReservationsServiceError):
    """Raised when checking out with an outstanding folio balance."""

    def __init__(self, message, balance=None):
        super().__init__(message)
        self.balance = balance
