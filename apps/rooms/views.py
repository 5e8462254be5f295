from django.db.models import Count
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsTenantStaff, IsManagement
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import Room, RoomType
from .serializers import (
    RoomSerializer,
    RoomTypeSerializer,
    RoomFilterSerializer,
    RoomStatusChangeSerializer,
    AvailabilityQuerySerializer,
    InconsistencySerializer,
    FixResultSerializer,
    SyncResultSerializer,
)
from .services import (
    change_room_status,
    find_available_rooms,
    detect_inconsistencies,
    fix_inconsistencies,
    sync_room_statuses,
    RoomNotFoundError,
    InvalidStatusTransitionError,
)


MANAGEMENT_ACTIONS = ('create', 'update', 'partial_update', 'destroy')


class RoomTypeViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    """
    Room types and base rates.

    Every staff member can read; owners and managers write.
    """

    queryset = RoomType.objects.annotate(room_count=Count('rooms'))
    serializer_class = RoomTypeSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff]

    def get_permissions(self):
        if self.action in MANAGEMENT_ACTIONS:
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()


class RoomViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    """
    Room inventory.

    list: GET /api/rooms/rooms/?status=&room_type=&floor=
    status: POST /api/rooms/rooms/{id}/status/  (transition-checked)
    available: GET /api/rooms/rooms/available/?check_in=&check_out=&room_type=
    """

    queryset = Room.objects.select_related('room_type')
    serializer_class = RoomSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action in MANAGEMENT_ACTIONS:
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = RoomFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'room_type' in params:
            queryset = queryset.filter(room_type_id=params['room_type'])
        if 'floor' in params:
            queryset = queryset.filter(floor=params['floor'])
        return queryset

    @extend_schema(request=RoomStatusChangeSerializer, responses={200: RoomSerializer}, tags=['rooms'])
    @action(detail=True, methods=['post'], url_path='status')
    def change_status(self, request, pk=None):
        """
        Change room status following the allowed transition map.

        POST /api/rooms/rooms/{id}/status/
        Body: {"status": "clean", "reason": "optional"}
        """
        serializer = RoomStatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            room = change_room_status(
                tenant=request.user.tenant,
                room_id=pk,
                new_status=serializer.validated_data['status'],
                actor=request.user,
                reason=serializer.validated_data['reason'],
            )
        except RoomNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidStatusTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(RoomSerializer(room, context={'request': request}).data)

    @extend_schema(parameters=[AvailabilityQuerySerializer], responses={200: RoomSerializer(many=True)}, tags=['rooms'])
    @action(detail=False, methods=['get'])
    def available(self, request):
        """
        Rooms free for a stay.

        GET /api/rooms/rooms/available/?check_in=2025-01-10&check_out=2025-01-12
        """
        query_serializer = AvailabilityQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        rooms = find_available_rooms(
            tenant=request.user.tenant,
            check_in=params['check_in'],
            check_out=params['check_out'],
            room_type_id=params.get('room_type'),
        )
        return Response(RoomSerializer(rooms, many=True, context={'request': request}).data)


@extend_schema(
    responses={200: InconsistencySerializer(many=True)},
    description="Rooms whose status disagrees with their active reservations.",
    tags=['rooms'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsManagement])
def consistency_report(request):
    items = detect_inconsistencies(tenant=request.user.tenant)
    return Response({
        'total_inconsistencies': len(items),
        'inconsistencies': InconsistencySerializer(items, many=True).data,
    })


@extend_schema(
    request=None,
    responses={200: FixResultSerializer(many=True)},
    description="Repair every inconsistent room. Each room is repaired independently.",
    tags=['rooms'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsManagement])
def consistency_fix(request):
    results = fix_inconsistencies(tenant=request.user.tenant, actor=request.user)
    return Response({
        'fixed': sum(1 for r in results if r['success']),
        'failed': sum(1 for r in results if not r['success']),
        'results': FixResultSerializer(results, many=True).data,
    })


@extend_schema(
    request=None,
    responses={200: SyncResultSerializer(many=True)},
    description="Recompute available/reserved/occupied status of every room from reservations.",
    tags=['rooms'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsManagement])
def consistency_sync(request):
    updates = sync_room_statuses(tenant=request.user.tenant, actor=request.user)
    return Response({
        'updated': len(updates),
        'updates': SyncResultSerializer(updates, many=True).data,
    })
