from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Role
from apps.accounts.permissions import IsTenantStaff, IsManagement, HasTenantRole
from apps.rooms.models import Room
from apps.rooms.services import InvalidStatusTransitionError
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import WorkOrder, OPEN_WORK_ORDER_STATUSES
from .serializers import (
    WorkOrderSerializer,
    WorkOrderCreateSerializer,
    WorkOrderCompleteSerializer,
    WorkOrderEscalateSerializer,
    WorkOrderCancelSerializer,
    WorkOrderFilterSerializer,
    MaintenanceStatsSerializer,
)
from .services import (
    create_work_order,
    accept_work_order,
    complete_work_order,
    escalate_work_order,
    cancel_work_order,
    maintenance_stats,
    WorkOrderNotFoundError,
    InvalidWorkOrderTransitionError,
)

# Anyone on the floor can report an issue
CanReportIssues = HasTenantRole(
    Role.OWNER, Role.MANAGER, Role.MAINTENANCE, Role.FRONT_DESK, Role.HOUSEKEEPING
)
IsMaintenanceTeam = HasTenantRole(Role.OWNER, Role.MANAGER, Role.MAINTENANCE)

WORK_ORDER_ERRORS = (WorkOrderNotFoundError, InvalidWorkOrderTransitionError, InvalidStatusTransitionError)


def _error_response(e):
    if isinstance(e, WorkOrderNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)


class WorkOrderViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Maintenance work orders.

    list: GET /api/maintenance/work-orders/?status=&priority=&category=&room=&open=&mine=
    create: POST /api/maintenance/work-orders/
    accept / complete / escalate: POST /api/maintenance/work-orders/{id}/<action>/
    cancel: POST /api/maintenance/work-orders/{id}/cancel/ (owner, manager)
    """

    queryset = WorkOrder.objects.select_related('room', 'assigned_to')
    serializer_class = WorkOrderSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, CanReportIssues]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action in ('accept', 'complete', 'escalate'):
            return [IsAuthenticated(), IsTenantStaff(), IsMaintenanceTeam()]
        if self.action == 'cancel':
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = WorkOrderFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        for field in ('status', 'priority', 'category'):
            if field in params:
                queryset = queryset.filter(**{field: params[field]})
        if 'room' in params:
            queryset = queryset.filter(room_id=params['room'])
        if params['open']:
            queryset = queryset.filter(status__in=OPEN_WORK_ORDER_STATUSES)
        if params['mine']:
            queryset = queryset.filter(assigned_to=self.request.user)
        return queryset

    @extend_schema(request=WorkOrderCreateSerializer, responses={201: WorkOrderSerializer}, tags=['maintenance'])
    def create(self, request):
        serializer = WorkOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = dict(serializer.validated_data)

        room = None
        room_id = params.pop('room')
        if room_id:
            room = Room.objects.filter(id=room_id, tenant=request.user.tenant).first()
            if room is None:
                return Response({'error': 'Room not found'}, status=status.HTTP_404_NOT_FOUND)

        work_order = create_work_order(
            tenant=request.user.tenant,
            actor=request.user,
            room=room,
            **params,
        )

        return Response(WorkOrderSerializer(work_order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: WorkOrderSerializer}, tags=['maintenance'])
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        try:
            work_order = accept_work_order(tenant=request.user.tenant, work_order_id=pk, actor=request.user)
        except WORK_ORDER_ERRORS as e:
            return _error_response(e)
        return Response(WorkOrderSerializer(work_order).data)

    @extend_schema(request=WorkOrderCompleteSerializer, responses={200: WorkOrderSerializer}, tags=['maintenance'])
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        serializer = WorkOrderCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            work_order = complete_work_order(
                tenant=request.user.tenant,
                work_order_id=pk,
                actor=request.user,
                **serializer.validated_data,
            )
        except WORK_ORDER_ERRORS as e:
            return _error_response(e)
        return Response(WorkOrderSerializer(work_order).data)

    @extend_schema(request=WorkOrderEscalateSerializer, responses={200: WorkOrderSerializer}, tags=['maintenance'])
    @action(detail=True, methods=['post'])
    def escalate(self, request, pk=None):
        serializer = WorkOrderEscalateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            work_order = escalate_work_order(
                tenant=request.user.tenant,
                work_order_id=pk,
                actor=request.user,
                reason=serializer.validated_data['reason'],
            )
        except WORK_ORDER_ERRORS as e:
            return _error_response(e)
        return Response(WorkOrderSerializer(work_order).data)

    @extend_schema(request=WorkOrderCancelSerializer, responses={200: WorkOrderSerializer}, tags=['maintenance'])
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = WorkOrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            work_order = cancel_work_order(
                tenant=request.user.tenant,
                work_order_id=pk,
                actor=request.user,
                reason=serializer.validated_data['reason'],
            )
        except WORK_ORDER_ERRORS as e:
            return _error_response(e)
        return Response(WorkOrderSerializer(work_order).data)


@extend_schema(responses={200: MaintenanceStatsSerializer}, tags=['maintenance'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTenantStaff, CanReportIssues])
def stats(request):
    return Response(MaintenanceStatsSerializer(maintenance_stats(tenant=request.user.tenant)).data)
