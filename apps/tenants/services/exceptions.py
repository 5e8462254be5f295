"""Domain-specific exceptions for tenant services."""


class TenantsServiceError(Exception):
    """Base exception for tenant services."""
    pass


class TenantNotFoundError(TenantsServiceError):
    """Raised when a hotel does not exist."""
    pass


class TenantSignupError(TenantsServiceError):
    """Raised when a hotel or its owner account cannot be created."""
    pass


class InvalidSubscriptionTransitionError(TenantsServiceError):
    """Raised when suspending/reactivating from an incompatible state."""
    pass


class InvalidHotelSettingsError(TenantsServiceError):
    """Raised when hotel settings values are out of range."""
    pass
