"""Domain-specific exceptions for POS services."""


class PosServiceError(Exception):
    """Base exception for POS services."""
    pass


class OrderNotFoundError(PosServiceError):
    """Raised when an order does not exist in the caller's hotel."""
    pass


class InvalidOrderError(PosServiceError):
    """Raised when an order cannot be built from the submitted items."""
    pass


class MenuItemUnavailableError(PosServiceError):
    """Raised when ordering an item that is unknown or switched off."""
    pass


class InvalidOrderTransitionError(PosServiceError):
    """Raised when an order cannot move to the requested status."""
    pass


class OrderAlreadyPaidError(PosServiceError):
    """Raised when paying an order twice."""
    pass
