"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when hotel signup fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when the account or its hotel is deactivated."""
    pass


class InvalidTokenError(AccountsServiceError):
    """Raised when a reset token is invalid."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class StaffManagementError(AccountsServiceError):
    """Raised when a staff operation breaks a hotel rule."""
    pass


class InsufficientPermissionsError(AccountsServiceError):
    """Raised when the caller's role cannot manage the target account."""
    pass
