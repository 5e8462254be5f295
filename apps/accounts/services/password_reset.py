"""Password reset and password change for staff accounts."""

import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.audit.services import record_audit

from .exceptions import UserNotFoundError, InvalidTokenError, InvalidCredentialsError

logger = logging.getLogger(__name__)
User = get_user_model()


def _audit_password_event(user, action: str) -> None:
    record_audit(
        tenant=user.tenant,
        actor=user,
        action=action,
        resource_type='user',
        resource_id=user.id,
        description=user.email,
    )


@transaction.atomic
def request_password_reset(*, email: str) -> str:
    """
    Issue a single-use reset token, valid for ``PASSWORD_RESET_TIMEOUT`` seconds.

    Staff of a hotel that is no longer operational cannot reset.

    Raises:
        UserNotFoundError: If no active staff member has this email
    """
    user = (
        User.objects
        .select_for_update()
        .select_related('tenant')
        .filter(email__iexact=email, is_active=True)
        .first()
    )
    if user is None or (user.tenant is not None and not user.tenant.is_operational):
        raise UserNotFoundError(f"No active user with email: {email}")

    reset_token = secrets.token_urlsafe(32)
    user.verification_token = reset_token
    user.reset_requested_at = timezone.now()
    user.save(update_fields=['verification_token', 'reset_requested_at'])

    _audit_password_event(user, 'password_reset_requested')
    logger.info("Password reset requested for %s", user.email)
    return reset_token


@transaction.atomic
def confirm_password_reset(*, token: str, new_password: str) -> User:
    """
    Set a new password from a reset token.

    Also clears the temporary-password flag set by staff invitations.

    Raises:
        InvalidTokenError: If the token is unknown or older than the reset timeout
    """
    user = (
        User.objects
        .select_for_update()
        .filter(verification_token=token, is_active=True)
        .first()
    )
    expires_after = timedelta(seconds=settings.PASSWORD_RESET_TIMEOUT)
    if (
        user is None
        or user.reset_requested_at is None
        or timezone.now() - user.reset_requested_at > expires_after
    ):
        raise InvalidTokenError("Invalid or expired reset token")

    user.set_password(new_password)
    user.verification_token = None
    user.reset_requested_at = None
    user.must_change_password = False
    user.save(update_fields=['password', 'verification_token', 'reset_requested_at', 'must_change_password'])

    _audit_password_event(user, 'password_reset_completed')
    return user


@transaction.atomic
def change_password(*, user: User, current_password: str, new_password: str) -> User:
    """
    Replace the caller's password (used after logging in with a temporary one).

    Raises:
        InvalidCredentialsError: If the current password is wrong
    """
    if not user.check_password(current_password):
        raise InvalidCredentialsError("Current password is incorrect")

    user.set_password(new_password)
    user.must_change_password = False
    user.save(update_fields=['password', 'must_change_password'])
    _audit_password_event(user, 'password_changed')
    return user
