"""Domain-specific exceptions for maintenance services."""


class MaintenanceServiceError(Exception):
    """Base exception for maintenance services."""
    pass


class WorkOrderNotFoundError(MaintenanceServiceError):
    """Raised when a work order does not exist in the caller's hotel."""
    pass


class InvalidWorkOrderTransitionError(MaintenanceServiceError):
    """Raised when a work order cannot move to the requested status."""
    pass
