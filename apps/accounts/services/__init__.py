"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
    StaffManagementError,
    InsufficientPermissionsError,
)
from .user_registration import register_hotel
from .user_authentication import authenticate_user
from .password_reset import request_password_reset, confirm_password_reset, change_password
from .staff_management import (
    invite_staff,
    change_role,
    suspend_staff,
    reactivate_staff,
    reset_staff_password,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidTokenError',
    'UserNotFoundError',
    'StaffManagementError',
    'InsufficientPermissionsError',
    # Services
    'register_hotel',
    'authenticate_user',
    'request_password_reset',
    'confirm_password_reset',
    'change_password',
    'invite_staff',
    'change_role',
    'suspend_staff',
    'reactivate_staff',
    'reset_staff_password',
]
