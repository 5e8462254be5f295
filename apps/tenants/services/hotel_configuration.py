"""Hotel settings and document numbering."""

from decimal import Decimal

from django.db import transaction

from apps.audit.services import record_audit
from apps.tenants.models import Tenant, HotelSettings

from .exceptions import InvalidHotelSettingsError

RATE_FIELDS = ('vat_rate', 'service_charge_rate')


def get_hotel_settings(*, tenant: Tenant) -> HotelSettings:
    """Return the hotel's settings, creating defaults on first access."""
    hotel_settings, _ = HotelSettings.objects.get_or_create(
        tenant=tenant,
        defaults=HotelSettings.defaults(),
    )
    return hotel_settings


@transaction.atomic
def update_hotel_settings(*, tenant: Tenant, actor, **changes) -> HotelSettings:
    """
    Apply a partial update to the hotel's settings.

    Raises:
        InvalidHotelSettingsError: If a rate is outside 0..100
    """
    for field in RATE_FIELDS:
        if field in changes:
            value = Decimal(str(changes[field]))
            if value < 0 or value > 100:
                raise InvalidHotelSettingsError(f"{field} must be between 0 and 100")

    hotel_settings = get_hotel_settings(tenant=tenant)
    hotel_settings = HotelSettings.objects.select_for_update().get(pk=hotel_settings.pk)

    for field, value in changes.items():
        setattr(hotel_settings, field, value)
    hotel_settings.save()

    record_audit(
        tenant=tenant,
        actor=actor,
        action='settings_updated',
        resource_type='hotel_settings',
        resource_id=tenant.id,
        description='Hotel settings updated',
        metadata={'fields': sorted(changes)},
    )
    return hotel_settings


@transaction.atomic
def next_invoice_number(*, tenant: Tenant) -> str:
    """
    Allocate the next invoice number, e.g. ``INV-000042``.

    The settings row is locked so concurrent allocations never collide.
    """
    get_hotel_settings(tenant=tenant)
    hotel_settings = HotelSettings.objects.select_for_update().get(tenant=tenant)
    seq = hotel_settings.next_invoice_seq
    hotel_settings.next_invoice_seq = seq + 1
    hotel_settings.save(update_fields=['next_invoice_seq', 'updated_at'])
    return f"{hotel_settings.invoice_prefix}-{seq:06d}"
