"""Domain-specific exceptions for housekeeping services."""


class HousekeepingServiceError(Exception):
    """Base exception for housekeeping services."""
    pass


class TaskNotFoundError(HousekeepingServiceError):
    """Raised when a task does not exist in the caller's hotel."""
    pass


class InvalidTaskTransitionError(HousekeepingServiceError):
    """Raised when a task cannot move to the requested status."""
    pass


class InvalidAssigneeError(HousekeepingServiceError):
    """Raised when assigning a task to someone outside the housekeeping team."""
    pass


class SupplyNotFoundError(HousekeepingServiceError):
    """Raised when a supply does not exist in the caller's hotel."""
    pass


class InsufficientStockError(HousekeepingServiceError):
    """Raised when recording usage larger than the stock on hand."""
    pass


class InvalidQuantityError(HousekeepingServiceError):
    """Raised when a usage quantity is not positive."""
    pass
