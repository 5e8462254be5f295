"""Domain-specific exceptions for rooms services."""


class RoomsServiceError(Exception):
    """Base exception for rooms services."""
    pass


class RoomNotFoundError(RoomsServiceError):
    """Raised when a room does not exist in the caller's hotel."""
    pass


class InvalidStatusTransitionError(RoomsServiceError):
    """Raised when a room status change is not allowed from its current state."""
    pass


class InvalidDateRangeError(RoomsServiceError):
    """Raised when check-out is not after check-in."""
    pass
