"""
Platform administration: hotel creation and subscription state.
"""

import logging
from datetime import timedelta
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.utils import timezone
from django.utils.text import slugify

from apps.accounts.models import Role
from apps.audit.services import record_audit
from apps.tenants.models import Tenant, HotelSettings, SubscriptionStatus

from .exceptions import (
    TenantNotFoundError,
    TenantSignupError,
    InvalidSubscriptionTransitionError,
)

User = get_user_model()
logger = logging.getLogger(__name__)


def _unique_slug(hotel_name: str) -> str:
    base = slugify(hotel_name)[:100] or 'hotel'
    slug = base
    suffix = 2
    while Tenant.objects.filter(hotel_slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


@transaction.atomic
def create_tenant_with_owner(
    *,
    hotel_name: str,
    owner_email: str,
    owner_password: str,
    owner_name: str = "",
    phone: str = "",
    city: str = "",
    country: str = "",
    currency: str = "",
    trial: bool = True,
    created_by: User = None,
) -> tuple[Tenant, User]:
    """
    Create a hotel, its default settings and its OWNER account.

    Args:
        hotel_name: Display name of the hotel
        owner_email: Login email of the owner
        owner_password: Initial owner password
        owner_name: Owner display name
        trial: Start on a trial (True) or directly active (False)
        created_by: Platform administrator, None for public signup

    Returns:
        Tuple of (Tenant, owner User)

    Raises:
        TenantSignupError: If the owner email is already registered
    """
    email = User.objects.normalize_email(owner_email)
    if User.objects.filter(email__iexact=email).exists():
        raise TenantSignupError(f"An account with email {email} already exists")

    today = timezone.localdate()
    tenant = Tenant.objects.create(
        hotel_name=hotel_name,
        hotel_slug=_unique_slug(hotel_name),
        email=email,
        phone=phone,
        city=city,
        country=country or 'Nigeria',
        currency=currency or settings.HOTEL_DEFAULT_CURRENCY,
        subscription_status=SubscriptionStatus.TRIALING if trial else SubscriptionStatus.ACTIVE,
        trial_start=today if trial else None,
        trial_end=today + timedelta(days=settings.HOTEL_TRIAL_DAYS) if trial else None,
    )
    HotelSettings.objects.create(tenant=tenant, **HotelSettings.defaults())

    try:
        owner = User.objects.create_user(
            email=email,
            password=owner_password,
            display_name=owner_name,
            tenant=tenant,
            role=Role.OWNER,
        )
    except IntegrityError:
        raise TenantSignupError(f"An account with email {email} already exists")

    record_audit(
        tenant=tenant,
        actor=created_by or owner,
        action='tenant_created',
        resource_type='tenant',
        resource_id=tenant.id,
        description=f"Hotel {hotel_name} created",
        metadata={'trial': trial},
    )
    logger.info("Created tenant %s (%s) trial=%s", tenant.hotel_slug, tenant.id, trial)
    return tenant, owner


def _get_locked_tenant(tenant_id: UUID) -> Tenant:
    try:
        return Tenant.objects.select_for_update().get(id=tenant_id)
    except Tenant.DoesNotExist:
        raise TenantNotFoundError(f"Hotel with ID {tenant_id} not found")


@transaction.atomic
def suspend_tenant(*, tenant_id: UUID, actor: User, reason: str = "") -> Tenant:
    """
    Suspend a hotel. Its staff lose API access until reactivated.

    Raises:
        TenantNotFoundError: If hotel doesn't exist
        InvalidSubscriptionTransitionError: If already suspended or cancelled
    """
    tenant = _get_locked_tenant(tenant_id)
    if tenant.subscription_status in (SubscriptionStatus.SUSPENDED, SubscriptionStatus.CANCELLED):
        raise InvalidSubscriptionTransitionError(
            f"Hotel is already {tenant.subscription_status}"
        )

    previous = tenant.subscription_status
    tenant.subscription_status = SubscriptionStatus.SUSPENDED
    tenant.save(update_fields=['subscription_status', 'updated_at'])

    record_audit(
        tenant=tenant,
        actor=actor,
        action='tenant_suspended',
        resource_type='tenant',
        resource_id=tenant.id,
        description=reason or 'Hotel suspended',
        metadata={'previous_status': previous},
    )
    logger.warning("Suspended tenant %s: %s", tenant.hotel_slug, reason)
    return tenant


@transaction.atomic
def reactivate_tenant(*, tenant_id: UUID, actor: User) -> Tenant:
    """
    Reactivate a suspended hotel on a paid (active) subscription.

    Raises:
        TenantNotFoundError: If hotel doesn't exist
        InvalidSubscriptionTransitionError: If hotel is not suspended
    """
    tenant = _get_locked_tenant(tenant_id)
    if tenant.subscription_status != SubscriptionStatus.SUSPENDED:
        raise InvalidSubscriptionTransitionError("Only suspended hotels can be reactivated")

    tenant.subscription_status = SubscriptionStatus.ACTIVE
    tenant.save(update_fields=['subscription_status', 'updated_at'])

    record_audit(
        tenant=tenant,
        actor=actor,
        action='tenant_reactivated',
        resource_type='tenant',
        resource_id=tenant.id,
        description='Hotel reactivated',
    )
    logger.info("Reactivated tenant %s", tenant.hotel_slug)
    return tenant
