from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Role
from apps.accounts.permissions import IsTenantStaff, IsSuperAdmin, HasTenantRole
from apps.accounts.serializers import UserSerializer
from .models import Tenant
from .mixins import HotelPagination
from .serializers import (
    TenantSerializer,
    TenantCreateSerializer,
    SuspendTenantSerializer,
    HotelSettingsSerializer,
)
from .services import (
    create_tenant_with_owner,
    suspend_tenant,
    reactivate_tenant,
    get_hotel_settings,
    update_hotel_settings,
    TenantSignupError,
    TenantNotFoundError,
    InvalidSubscriptionTransitionError,
    InvalidHotelSettingsError,
)


class TenantViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Platform administration of hotels.

    list: All hotels
    create: New hotel with owner account
    retrieve/update: Hotel profile
    suspend / reactivate: Subscription state
    """

    queryset = Tenant.objects.all()
    serializer_class = TenantSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]
    pagination_class = HotelPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        status_filter = self.request.query_params.get('subscription_status')
        if status_filter:
            queryset = queryset.filter(subscription_status=status_filter)
        return queryset

    @extend_schema(request=TenantCreateSerializer, responses={201: TenantSerializer}, tags=['tenants'])
    def create(self, request):
        serializer = TenantCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            tenant, owner = create_tenant_with_owner(
                created_by=request.user,
                **serializer.validated_data,
            )
        except TenantSignupError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'tenant': TenantSerializer(tenant).data,
            'owner': UserSerializer(owner).data,
        }, status=status.HTTP_201_CREATED)

    @extend_schema(request=SuspendTenantSerializer, responses={200: TenantSerializer}, tags=['tenants'])
    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        """
        Suspend a hotel.

        POST /api/tenants/{id}/suspend/
        """
        serializer = SuspendTenantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            tenant = suspend_tenant(
                tenant_id=pk,
                actor=request.user,
                reason=serializer.validated_data['reason'],
            )
        except TenantNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidSubscriptionTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(TenantSerializer(tenant).data)

    @extend_schema(request=None, responses={200: TenantSerializer}, tags=['tenants'])
    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        """
        Reactivate a suspended hotel.

        POST /api/tenants/{id}/reactivate/
        """
        try:
            tenant = reactivate_tenant(tenant_id=pk, actor=request.user)
        except TenantNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidSubscriptionTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(TenantSerializer(tenant).data)


@extend_schema(
    responses={200: TenantSerializer},
    description="Profile of the caller's hotel.",
    tags=['tenants'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsTenantStaff])
def my_hotel(request):
    """Get or (owner only) update the caller's hotel profile."""
    tenant = request.user.tenant

    if request.method == 'PATCH':
        if request.user.role != Role.OWNER:
            return Response(
                {'error': 'Only the hotel owner can edit the hotel profile'},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = TenantSerializer(tenant, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    return Response(TenantSerializer(tenant).data)


@extend_schema(
    request=HotelSettingsSerializer,
    responses={200: HotelSettingsSerializer},
    description="Tax, front desk and numbering settings of the caller's hotel.",
    tags=['tenants'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsTenantStaff, HasTenantRole(Role.OWNER, Role.MANAGER)])
def hotel_settings(request):
    """Managers read hotel settings; only the owner changes them."""
    tenant = request.user.tenant

    if request.method == 'PATCH':
        if request.user.role != Role.OWNER:
            return Response(
                {'error': 'Only the hotel owner can change hotel settings'},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = HotelSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            updated = update_hotel_settings(
                tenant=tenant,
                actor=request.user,
                **serializer.validated_data,
            )
        except InvalidHotelSettingsError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(HotelSettingsSerializer(updated).data)

    return Response(HotelSettingsSerializer(get_hotel_settings(tenant=tenant)).data)
