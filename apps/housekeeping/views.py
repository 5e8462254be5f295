from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Role
from apps.accounts.permissions import IsTenantStaff, IsManagement, HasTenantRole
from apps.rooms.models import Room
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import HousekeepingTask, Supply
from .serializers import (
    HousekeepingTaskSerializer,
    TaskCreateSerializer,
    TaskAssignSerializer,
    TaskNoteSerializer,
    TaskFilterSerializer,
    SupplySerializer,
    SupplyUsageSerializer,
    RecordUsageSerializer,
    LowStockQuerySerializer,
    HousekeepingStatsSerializer,
)
from .services import (
    create_task,
    assign_task,
    accept_task,
    complete_task,
    delay_task,
    cancel_task,
    record_supply_usage,
    low_stock_supplies,
    housekeeping_stats,
    TaskNotFoundError,
    InvalidTaskTransitionError,
    InvalidAssigneeError,
    SupplyNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
)

IsHousekeepingStaff = HasTenantRole(Role.OWNER, Role.MANAGER, Role.HOUSEKEEPING, Role.FRONT_DESK)

TASK_ERRORS = (TaskNotFoundError, InvalidTaskTransitionError, InvalidAssigneeError)


def _task_error_response(e):
    if isinstance(e, TaskNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(e, InvalidTaskTransitionError):
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class HousekeepingTaskViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Housekeeping tasks.

    list: GET /api/housekeeping/tasks/?status=&task_type=&priority=&room=&assigned_to=&mine=
    create: POST /api/housekeeping/tasks/
    assign: POST /api/housekeeping/tasks/{id}/assign/ (owner, manager)
    accept / complete / delay: POST /api/housekeeping/tasks/{id}/<action>/
    cancel: POST /api/housekeeping/tasks/{id}/cancel/ (owner, manager)
    """

    queryset = HousekeepingTask.objects.select_related('room', 'assigned_to')
    serializer_class = HousekeepingTaskSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsHousekeepingStaff]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action in ('assign', 'cancel'):
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = TaskFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        for field in ('status', 'task_type', 'priority'):
            if field in params:
                queryset = queryset.filter(**{field: params[field]})
        if 'room' in params:
            queryset = queryset.filter(room_id=params['room'])
        if 'assigned_to' in params:
            queryset = queryset.filter(assigned_to_id=params['assigned_to'])
        if params['mine']:
            queryset = queryset.filter(assigned_to=self.request.user)
        return queryset

    @extend_schema(request=TaskCreateSerializer, responses={201: HousekeepingTaskSerializer}, tags=['housekeeping'])
    def create(self, request):
        serializer = TaskCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = dict(serializer.validated_data)

        room = None
        room_id = params.pop('room')
        if room_id:
            room = Room.objects.filter(id=room_id, tenant=request.user.tenant).first()
            if room is None:
                return Response({'error': 'Room not found'}, status=status.HTTP_404_NOT_FOUND)

        task = create_task(tenant=request.user.tenant, actor=request.user, room=room, **params)
        return Response(HousekeepingTaskSerializer(task).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=TaskAssignSerializer, responses={200: HousekeepingTaskSerializer}, tags=['housekeeping'])
    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        serializer = TaskAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            task = assign_task(
                tenant=request.user.tenant,
                task_id=pk,
                assignee_id=serializer.validated_data['assignee'],
                actor=request.user,
            )
        except TASK_ERRORS as e:
            return _task_error_response(e)
        return Response(HousekeepingTaskSerializer(task).data)

    @extend_schema(request=None, responses={200: HousekeepingTaskSerializer}, tags=['housekeeping'])
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        try:
            task = accept_task(tenant=request.user.tenant, task_id=pk, actor=request.user)
        except TASK_ERRORS as e:
            return _task_error_response(e)
        return Response(HousekeepingTaskSerializer(task).data)

    @extend_schema(request=TaskNoteSerializer, responses={200: HousekeepingTaskSerializer}, tags=['housekeeping'])
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        serializer = TaskNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            task = complete_task(
                tenant=request.user.tenant,
                task_id=pk,
                actor=request.user,
                notes=serializer.validated_data['notes'],
            )
        except TASK_ERRORS as e:
            return _task_error_response(e)
        return Response(HousekeepingTaskSerializer(task).data)

    @extend_schema(request=TaskNoteSerializer, responses={200: HousekeepingTaskSerializer}, tags=['housekeeping'])
    @action(detail=True, methods=['post'])
    def delay(self, request, pk=None):
        serializer = TaskNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            task = delay_task(
                tenant=request.user.tenant,
                task_id=pk,
                actor=request.user,
                reason=serializer.validated_data['notes'],
            )
        except TASK_ERRORS as e:
            return _task_error_response(e)
        return Response(HousekeepingTaskSerializer(task).data)

    @extend_schema(request=TaskNoteSerializer, responses={200: HousekeepingTaskSerializer}, tags=['housekeeping'])
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = TaskNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            task = cancel_task(
                tenant=request.user.tenant,
                task_id=pk,
                actor=request.user,
                reason=serializer.validated_data['notes'],
            )
        except TASK_ERRORS as e:
            return _task_error_response(e)
        return Response(HousekeepingTaskSerializer(task).data)


class SupplyViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    """
    Housekeeping supplies.

    use: POST /api/housekeeping/supplies/{id}/use/
    low_stock: GET /api/housekeeping/supplies/low_stock/?category=
    """

    queryset = Supply.objects.all()
    serializer_class = SupplySerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsHousekeepingStaff]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action in ('create', 'update', 'partial_update', 'destroy'):
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()

    @extend_schema(request=RecordUsageSerializer, responses={201: SupplyUsageSerializer}, tags=['housekeeping'])
    @action(detail=True, methods=['post'])
    def use(self, request, pk=None):
        serializer = RecordUsageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        tenant = request.user.tenant

        room = Room.objects.filter(id=params['room'], tenant=tenant).first() if params['room'] else None
        task = HousekeepingTask.objects.filter(id=params['task'], tenant=tenant).first() if params['task'] else None

        try:
            usage = record_supply_usage(
                tenant=tenant,
                supply_id=pk,
                quantity=params['quantity'],
                used_by=request.user,
                room=room,
                task=task,
                notes=params['notes'],
            )
        except SupplyNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (InsufficientStockError, InvalidQuantityError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SupplyUsageSerializer(usage).data, status=status.HTTP_201_CREATED)

    @extend_schema(parameters=[LowStockQuerySerializer], responses={200: SupplySerializer(many=True)}, tags=['housekeeping'])
    @action(detail=False, methods=['get'])
    def low_stock(self, request):
        query_serializer = LowStockQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        supplies = low_stock_supplies(
            tenant=request.user.tenant,
            category=query_serializer.validated_data.get('category'),
        )
        return Response(SupplySerializer(supplies, many=True).data)


@extend_schema(
    responses={200: HousekeepingStatsSerializer},
    description="Task and room counters for the housekeeping board.",
    tags=['housekeeping'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsHousekeepingStaff])
def stats(request):
    return Response(HousekeepingStatsSerializer(housekeeping_stats(tenant=request.user.tenant)).data)
