"""
Staff management service.

Owners and managers invite, re-role, suspend and reset staff of their own
hotel. Managers cannot touch owner or platform accounts, nobody changes their
own standing, and a hotel has exactly one active owner.
"""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.utils.crypto import get_random_string

from apps.accounts.models import Role
from apps.audit.services import record_audit

from .exceptions import (
    UserNotFoundError,
    StaffManagementError,
    InsufficientPermissionsError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

PROTECTED_ROLES = (Role.OWNER, Role.SUPER_ADMIN)
TEMP_PASSWORD_LENGTH = 12


def _generate_temporary_password() -> str:
    return get_random_string(TEMP_PASSWORD_LENGTH)


def _get_staff_member(*, actor: User, user_id: UUID) -> User:
    try:
        return (
            User.objects
            .select_for_update()
            .get(id=user_id, tenant_id=actor.tenant_id)
        )
    except User.DoesNotExist:
        raise UserNotFoundError(f"Staff member with ID {user_id} not found")


def _check_can_manage(*, actor: User, target: Optional[User] = None, role: Optional[str] = None):
    if actor.role not in (Role.OWNER, Role.MANAGER):
        raise InsufficientPermissionsError("Only owners and managers can manage staff")

    if role == Role.SUPER_ADMIN:
        raise InsufficientPermissionsError("Platform administrator accounts cannot be assigned")

    if actor.role == Role.MANAGER:
        if role == Role.OWNER:
            raise InsufficientPermissionsError("Managers cannot assign the owner role")
        if target is not None and target.role in PROTECTED_ROLES:
            raise InsufficientPermissionsError("Managers cannot modify the owner account")


def _ensure_single_owner(*, tenant_id, exclude_id=None):
    owners = User.objects.filter(tenant_id=tenant_id, role=Role.OWNER, is_active=True)
    if exclude_id is not None:
        owners = owners.exclude(id=exclude_id)
    if owners.exists():
        raise StaffManagementError("This hotel already has an active owner")


@transaction.atomic
def invite_staff(
    *,
    actor: User,
    email: str,
    role: str,
    display_name: str = "",
    phone: str = "",
    department: str = "",
) -> tuple[User, str]:
    """
    Create a staff account with a one-time temporary password.

    The temporary password is returned once and never stored in clear text.
    The new account must change it on first login.

    Args:
        actor: Owner or manager performing the invitation
        email: Staff login email
        role: One of Role values (not SUPER_ADMIN)

    Returns:
        Tuple of (created User, temporary password)

    Raises:
        InsufficientPermissionsError: If actor cannot assign the role
        StaffManagementError: If email exists or a second owner is requested
    """
    _check_can_manage(actor=actor, role=role)
    if role == Role.OWNER:
        _ensure_single_owner(tenant_id=actor.tenant_id)

    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise StaffManagementError(f"An account with email {email} already exists")

    temporary_password = _generate_temporary_password()
    try:
        user = User.objects.create_user(
            email=email,
            password=temporary_password,
            display_name=display_name,
            phone=phone,
            department=department,
            tenant_id=actor.tenant_id,
            role=role,
            must_change_password=True,
        )
    except IntegrityError:
        raise StaffManagementError(f"An account with email {email} already exists")

    record_audit(
        tenant=actor.tenant,
        actor=actor,
        action='staff_invited',
        resource_type='user',
        resource_id=user.id,
        description=f"Invited {email} as {role}",
        metadata={'role': role},
    )
    logger.info("Staff %s invited to tenant %s as %s", email, actor.tenant_id, role)
    return user, temporary_password


@transaction.atomic
def change_role(*, actor: User, user_id: UUID, role: str) -> User:
    """
    Change a staff member's role.

    Raises:
        UserNotFoundError: If the user is not staff of the actor's hotel
        InsufficientPermissionsError: If actor cannot manage target/role
        StaffManagementError: On self-change or a second owner
    """
    target = _get_staff_member(actor=actor, user_id=user_id)
    if target.id == actor.id:
        raise StaffManagementError("You cannot change your own role")

    _check_can_manage(actor=actor, target=target, role=role)
    if role == Role.OWNER:
        _ensure_single_owner(tenant_id=actor.tenant_id, exclude_id=target.id)

    previous = target.role
    target.role = role
    target.save(update_fields=['role'])

    record_audit(
        tenant=actor.tenant,
        actor=actor,
        action='staff_role_changed',
        resource_type='user',
        resource_id=target.id,
        description=f"Role changed from {previous} to {role}",
        metadata={'previous_role': previous, 'new_role': role},
    )
    return target


@transaction.atomic
def suspend_staff(*, actor: User, user_id: UUID, reason: str = "") -> User:
    """
    Deactivate a staff account.

    Raises:
        UserNotFoundError, InsufficientPermissionsError, StaffManagementError
    """
    target = _get_staff_member(actor=actor, user_id=user_id)
    if target.id == actor.id:
        raise StaffManagementError("You cannot suspend yourself")
    _check_can_manage(actor=actor, target=target)

    if not target.is_active:
        raise StaffManagementError("Account is already suspended")

    target.is_active = False
    target.save(update_fields=['is_active'])

    record_audit(
        tenant=actor.tenant,
        actor=actor,
        action='staff_suspended',
        resource_type='user',
        resource_id=target.id,
        description=reason or f"Suspended {target.email}",
    )
    logger.info("Staff %s suspended by %s", target.email, actor.email)
    return target


@transaction.atomic
def reactivate_staff(*, actor: User, user_id: UUID) -> User:
    """Re-enable a suspended staff account."""
    target = _get_staff_member(actor=actor, user_id=user_id)
    _check_can_manage(actor=actor, target=target)

    if target.is_active:
        raise StaffManagementError("Account is already active")
    if target.role == Role.OWNER:
        _ensure_single_owner(tenant_id=actor.tenant_id, exclude_id=target.id)

    target.is_active = True
    target.save(update_fields=['is_active'])

    record_audit(
        tenant=actor.tenant,
        actor=actor,
        action='staff_reactivated',
        resource_type='user',
        resource_id=target.id,
        description=f"Reactivated {target.email}",
    )
    return target


@transaction.atomic
def reset_staff_password(*, actor: User, user_id: UUID) -> str:
    """
    Issue a new temporary password for a staff member.

    Returns:
        The temporary password (shown once to the actor)
    """
    target = _get_staff_member(actor=actor, user_id=user_id)
    _check_can_manage(actor=actor, target=target)

    temporary_password = _generate_temporary_password()
    target.set_password(temporary_password)
    target.must_change_password = True
    target.save(update_fields=['password', 'must_change_password'])

    record_audit(
        tenant=actor.tenant,
        actor=actor,
        action='staff_password_reset',
        resource_type='user',
        resource_id=target.id,
        description=f"Temporary password issued for {target.email}",
    )
    return temporary_password
