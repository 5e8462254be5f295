"""Services for rooms business logic."""

from .exceptions import (
    RoomsServiceError,
    RoomNotFoundError,
    InvalidStatusTransitionError,
    InvalidDateRangeError,
)
from .room_status import change_room_status, apply_room_status, get_locked_room
from .availability import find_available_rooms, overlapping_reservations
from .data_consistency import (
    FixAction,
    detect_inconsistencies,
    fix_inconsistencies,
    sync_room_statuses,
)

__all__ = [
    # Exceptions
    'RoomsServiceError',
    'RoomNotFoundError',
    'InvalidStatusTransitionError',
    'InvalidDateRangeError',
    # Services
    'change_room_status',
    'apply_room_status',
    'get_locked_room',
    'find_available_rooms',
    'overlapping_reservations',
    'FixAction',
    'detect_inconsistencies',
    'fix_inconsistencies',
    'sync_room_statuses',
]
