from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, SAFE_METHODS
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Role
from apps.accounts.permissions import IsTenantStaff, HasTenantRole
from apps.billing.services import (
    NoOpenFolioError,
    FolioClosedError,
    DuplicatePaymentError,
    InvalidAmountError,
)
from apps.rooms.models import Room
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import MenuCategory, MenuItem, PosOrder
from .serializers import (
    MenuCategorySerializer,
    MenuItemSerializer,
    PosOrderSerializer,
    OrderCreateSerializer,
    OrderStatusSerializer,
    OrderPaymentSerializer,
    OrderFilterSerializer,
    KitchenTicketSerializer,
    PosStatsSerializer,
)
from .services import (
    create_order,
    update_order_status,
    cancel_order,
    process_payment,
    kitchen_tickets,
    pos_stats,
    OrderNotFoundError,
    InvalidOrderError,
    MenuItemUnavailableError,
    InvalidOrderTransitionError,
    OrderAlreadyPaidError,
)

IsPosStaff = HasTenantRole(Role.OWNER, Role.MANAGER, Role.POS)
# Front desk takes room service orders and charges them to rooms
CanTakeOrders = HasTenantRole(Role.OWNER, Role.MANAGER, Role.POS, Role.FRONT_DESK)

ORDER_ERRORS = (
    OrderNotFoundError,
    InvalidOrderError,
    MenuItemUnavailableError,
    InvalidOrderTransitionError,
    OrderAlreadyPaidError,
    NoOpenFolioError,
    FolioClosedError,
    DuplicatePaymentError,
    InvalidAmountError,
)


def _error_response(e):
    if isinstance(e, OrderNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(e, (InvalidOrderTransitionError, OrderAlreadyPaidError, NoOpenFolioError, FolioClosedError)):
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    if isinstance(e, DuplicatePaymentError):
        return Response(
            {'error': str(e), 'duplicate_of': str(e.existing_payment.id) if e.existing_payment else None},
            status=status.HTTP_409_CONFLICT,
        )
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class MenuCategoryViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    """Menu categories. Reads for order takers, writes for POS leads and managers."""

    queryset = MenuCategory.objects.all()
    serializer_class = MenuCategorySerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, CanTakeOrders]

    def get_permissions(self):
        if self.request.method not in SAFE_METHODS:
            return [IsAuthenticated(), IsTenantStaff(), IsPosStaff()]
        return super().get_permissions()


class MenuItemViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    """
    Menu items.

    list: GET /api/pos/menu-items/?category=&available=true
    """

    queryset = MenuItem.objects.select_related('category')
    serializer_class = MenuItemSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, CanTakeOrders]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.request.method not in SAFE_METHODS:
            return [IsAuthenticated(), IsTenantStaff(), IsPosStaff()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset
        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category_id=category)
        if self.request.query_params.get('available') == 'true':
            queryset = queryset.filter(is_available=True)
        return queryset


class PosOrderViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Restaurant orders.

    list: GET /api/pos/orders/?status=&order_type=&is_paid=&date=&room=
    create: POST /api/pos/orders/
    update_status / cancel / pay: POST /api/pos/orders/{id}/<action>/
    kitchen: GET /api/pos/orders/kitchen/
    """

    queryset = PosOrder.objects.select_related('room').prefetch_related('items')
    serializer_class = PosOrderSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, CanTakeOrders]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action == 'cancel':
            return [IsAuthenticated(), IsTenantStaff(), IsPosStaff()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = OrderFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'order_type' in params:
            queryset = queryset.filter(order_type=params['order_type'])
        if params['is_paid'] is not None:
            queryset = queryset.filter(is_paid=params['is_paid'])
        if 'date' in params:
            queryset = queryset.filter(order_time__date=params['date'])
        if 'room' in params:
            queryset = queryset.filter(room_id=params['room'])
        return queryset

    @extend_schema(request=OrderCreateSerializer, responses={201: PosOrderSerializer}, tags=['pos'])
    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = dict(serializer.validated_data)

        room = None
        room_id = params.pop('room')
        if room_id:
            room = Room.objects.filter(id=room_id, tenant=request.user.tenant).first()
            if room is None:
                return Response({'error': 'Room not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            order = create_order(tenant=request.user.tenant, actor=request.user, room=room, **params)
        except ORDER_ERRORS as e:
            return _error_response(e)

        return Response(PosOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OrderStatusSerializer, responses={200: PosOrderSerializer}, tags=['pos'])
    @action(detail=True, methods=['post'])
    def update_status(self, request, pk=None):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = update_order_status(
                tenant=request.user.tenant,
                order_id=pk,
                new_status=serializer.validated_data['status'],
                actor=request.user,
            )
        except ORDER_ERRORS as e:
            return _error_response(e)
        return Response(PosOrderSerializer(order).data)

    @extend_schema(request=None, responses={200: PosOrderSerializer}, tags=['pos'])
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        try:
            order = cancel_order(tenant=request.user.tenant, order_id=pk, actor=request.user)
        except ORDER_ERRORS as e:
            return _error_response(e)
        return Response(PosOrderSerializer(order).data)

    @extend_schema(request=OrderPaymentSerializer, responses={200: PosOrderSerializer}, tags=['pos'])
    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        serializer = OrderPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = process_payment(
                tenant=request.user.tenant,
                order_id=pk,
                payment_method=serializer.validated_data['payment_method'],
                actor=request.user,
                reference=serializer.validated_data['reference'],
            )
        except ORDER_ERRORS as e:
            return _error_response(e)
        return Response(PosOrderSerializer(order).data)

    @extend_schema(responses={200: KitchenTicketSerializer(many=True)}, tags=['pos'])
    @action(detail=False, methods=['get'])
    def kitchen(self, request):
        return Response(KitchenTicketSerializer(kitchen_tickets(tenant=request.user.tenant), many=True).data)


@extend_schema(responses={200: PosStatsSerializer}, tags=['pos'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsPosStaff])
def stats(request):
    return Response(PosStatsSerializer(pos_stats(tenant=request.user.tenant)).data)
