"""Domain-specific exceptions for QR services."""


class QRServiceError(Exception):
    """Base exception for QR services."""
    pass


class QRCodeNotFoundError(QRServiceError):
    """Raised when a token is unknown or its code is inactive."""
    pass


class ServiceNotEnabledError(QRServiceError):
    """Raised when a guest calls a service the code does not offer."""
    pass


class ServiceRequestNotFoundError(QRServiceError):
    """Raised when a request does not exist or the guest session does not match."""
    pass


class InvalidRequestTransitionError(QRServiceError):
    """Raised when a request cannot move to the requested status."""
    pass


class InvalidRequestError(QRServiceError):
    """Raised when a guest request is missing required details."""
    pass
