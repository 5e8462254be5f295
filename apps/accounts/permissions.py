"""
Permission classes shared by every hotel-facing app.

Tenant isolation:
    IsTenantStaff - caller belongs to an operational hotel; objects must
    belong to the same hotel.

Role checks:
    HasTenantRole(*roles) - builds a permission class admitting the given
    roles only.
    IsSuperAdmin - platform administration endpoints.

Usage:
    permission_classes = [
        IsAuthenticated,
        IsTenantStaff,
        HasTenantRole(Role.OWNER, Role.MANAGER),
    ]
"""
from rest_framework.permissions import BasePermission

from .models import Role


class IsTenantStaff(BasePermission):
    """Permission: user must be staff of an operational hotel."""

    message = 'You must belong to an active hotel to access this resource.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated or user.tenant_id is None:
            return False

        if not user.tenant.is_operational:
            self.message = 'Hotel subscription is not active.'
            return False
        return True

    def has_object_permission(self, request, view, obj):
        return getattr(obj, 'tenant_id', None) == request.user.tenant_id


def HasTenantRole(*roles):
    """
    Build a permission class admitting only the given roles.

    The generated class carries a readable name so DRF error messages and
    schema output stay meaningful.
    """
    allowed = frozenset(roles)

    class _HasTenantRole(BasePermission):
        message = 'Your role does not allow this action.'

        def has_permission(self, request, view):
            user = request.user
            return bool(user and user.is_authenticated and user.role in allowed)

    _HasTenantRole.__name__ = 'HasTenantRole_' + '_'.join(sorted(allowed))
    return _HasTenantRole


class IsSuperAdmin(BasePermission):
    """Permission: platform administrator."""

    message = 'Platform administrator access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == Role.SUPER_ADMIN)


IsManagement = HasTenantRole(Role.OWNER, Role.MANAGER)
IsFinance = HasTenantRole(Role.OWNER, Role.MANAGER, Role.ACCOUNTANT)
IsFrontDesk = HasTenantRole(Role.OWNER, Role.MANAGER, Role.FRONT_DESK)
IsCashier = HasTenantRole(Role.OWNER, Role.MANAGER, Role.ACCOUNTANT, Role.FRONT_DESK, Role.POS)
