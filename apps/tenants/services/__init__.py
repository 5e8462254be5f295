"""Services for tenants business logic."""

from .exceptions import (
    TenantsServiceError,
    TenantNotFoundError,
    TenantSignupError,
    InvalidSubscriptionTransitionError,
    InvalidHotelSettingsError,
)
from .tenant_management import (
    create_tenant_with_owner,
    suspend_tenant,
    reactivate_tenant,
)
from .hotel_configuration import (
    get_hotel_settings,
    update_hotel_settings,
    next_invoice_number,
)
from .document_numbers import generate_document_number

__all__ = [
    # Exceptions
    'TenantsServiceError',
    'TenantNotFoundError',
    'TenantSignupError',
    'InvalidSubscriptionTransitionError',
    'InvalidHotelSettingsError',
    # Services
    'create_tenant_with_owner',
    'suspend_tenant',
    'reactivate_tenant',
    'get_hotel_settings',
    'update_hotel_settings',
    'next_invoice_number',
    'generate_document_number',
]
