from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.accounts.permissions import IsTenantStaff, IsManagement
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import AuditLog
from .serializers import AuditLogSerializer, AuditLogFilterSerializer


@extend_schema_view(
    list=extend_schema(
        parameters=[AuditLogFilterSerializer],
        description="Audit trail for the caller's hotel, newest first.",
        tags=['audit'],
    ),
    retrieve=extend_schema(tags=['audit']),
)
class AuditLogViewSet(TenantScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    Read-only access to the hotel's audit trail.

    list: GET /api/audit/?resource_type=&action=&actor=&date_from=&date_to=
    retrieve: GET /api/audit/{id}/
    """

    queryset = AuditLog.objects.all()
    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsManagement]
    pagination_class = HotelPagination

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = AuditLogFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'resource_type' in params:
            queryset = queryset.filter(resource_type=params['resource_type'])
        if 'resource_id' in params:
            queryset = queryset.filter(resource_id=params['resource_id'])
        if 'action' in params:
            queryset = queryset.filter(action=params['action'])
        if 'actor' in params:
            queryset = queryset.filter(actor_id=params['actor'])
        if 'date_from' in params:
            queryset = queryset.filter(created_at__date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(created_at__date__lte=params['date_to'])

        return queryset
