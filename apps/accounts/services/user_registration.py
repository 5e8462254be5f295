"""Public hotel signup (trial)."""

from django.contrib.auth import get_user_model

from apps.tenants.services import create_tenant_with_owner, TenantSignupError

from .exceptions import UserRegistrationError

User = get_user_model()


def register_hotel(
    *,
    email: str,
    password: str,
    hotel_name: str,
    display_name: str = "",
    phone: str = "",
    city: str = "",
) -> User:
    """
    Sign up a new hotel on a trial subscription and return its owner.

    Raises:
        UserRegistrationError: If the email is already registered
    """
    try:
        _, owner = create_tenant_with_owner(
            hotel_name=hotel_name,
            owner_email=email,
            owner_password=password,
            owner_name=display_name,
            phone=phone,
            city=city,
            trial=True,
        )
    except TenantSignupError as e:
        raise UserRegistrationError(str(e))
    return owner
