from django.db.models import Q
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsTenantStaff, IsFrontDesk, IsManagement
from apps.audit.services import record_audit
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import Guest, Reservation
from .serializers import (
    GuestSerializer,
    GuestBlacklistSerializer,
    ReservationSerializer,
    ReservationCreateSerializer,
    AssignRoomSerializer,
    CheckOutSerializer,
    CancelReservationSerializer,
    ExtendStaySerializer,
    ReservationFilterSerializer,
    BoardQuerySerializer,
)
from .services import (
    create_reservation,
    assign_room,
    check_in,
    check_out,
    cancel_reservation,
    extend_stay,
    mark_no_show,
    arrivals,
    departures,
    in_house,
    ReservationNotFoundError,
    GuestNotFoundError,
    InvalidReservationError,
    GuestBlacklistedError,
    ReservationConflictError,
    InvalidReservationStateError,
    RoomNotReadyError,
    UnsettledBalanceError,
)


def _error_response(e):
    if isinstance(e, (ReservationNotFoundError, GuestNotFoundError)):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(e, GuestBlacklistedError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, UnsettledBalanceError):
        return Response(
            {'error': str(e), 'balance': str(e.balance)},
            status=status.HTTP_409_CONFLICT,
        )
    if isinstance(e, (ReservationConflictError, InvalidReservationStateError, RoomNotReadyError)):
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


RESERVATION_ERRORS = (
    ReservationNotFoundError,
    GuestNotFoundError,
    InvalidReservationError,
    GuestBlacklistedError,
    ReservationConflictError,
    InvalidReservationStateError,
    RoomNotReadyError,
    UnsettledBalanceError,
)


class GuestViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    """
    Guest profiles.

    list: GET /api/reservations/guests/?search=
    blacklist: POST /api/reservations/guests/{id}/blacklist/ (owner, manager)
    """

    queryset = Guest.objects.all()
    serializer_class = GuestSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsFrontDesk]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action in ('blacklist', 'destroy'):
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        term = self.request.query_params.get('search')
        if term and self.action == 'list':
            queryset = queryset.filter(
                Q(first_name__icontains=term)
                | Q(last_name__icontains=term)
                | Q(email__icontains=term)
                | Q(phone__icontains=term)
            )
        return queryset

    @extend_schema(request=GuestBlacklistSerializer, responses={200: GuestSerializer}, tags=['guests'])
    @action(detail=True, methods=['post'])
    def blacklist(self, request, pk=None):
        guest = self.get_object()
        serializer = GuestBlacklistSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        guest.is_blacklisted = serializer.validated_data['is_blacklisted']
        guest.blacklist_reason = serializer.validated_data['reason'] if guest.is_blacklisted else ''
        guest.save(update_fields=['is_blacklisted', 'blacklist_reason', 'updated_at'])

        record_audit(
            tenant=request.user.tenant,
            actor=request.user,
            action='guest_blacklisted' if guest.is_blacklisted else 'guest_unblacklisted',
            resource_type='guest',
            resource_id=guest.id,
            description=guest.blacklist_reason or guest.full_name,
        )
        return Response(GuestSerializer(guest).data)


class ReservationViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Reservations and front desk operations.

    list: GET /api/reservations/bookings/?status=&date_from=&date_to=&guest=&room=&search=
    create: POST /api/reservations/bookings/
    assign_room / check_in / check_out / cancel / extend / no_show:
        POST /api/reservations/bookings/{id}/<action>/
    arrivals / departures / in_house: GET /api/reservations/bookings/<board>/?date=
    """

    queryset = Reservation.objects.select_related('room', 'room_type', 'guest')
    serializer_class = ReservationSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsFrontDesk]
    pagination_class = HotelPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = ReservationFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        # Stays overlapping the requested window
        if 'date_from' in params:
            queryset = queryset.filter(check_out_date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(check_in_date__lte=params['date_to'])
        if 'guest' in params:
            queryset = queryset.filter(guest_id=params['guest'])
        if 'room' in params:
            queryset = queryset.filter(room_id=params['room'])
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(
                Q(reservation_number__icontains=term)
                | Q(guest_name__icontains=term)
                | Q(guest_phone__icontains=term)
            )
        return queryset

    @extend_schema(request=ReservationCreateSerializer, responses={201: ReservationSerializer}, tags=['reservations'])
    def create(self, request):
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reservation = create_reservation(
                tenant=request.user.tenant,
                actor=request.user,
                **serializer.validated_data,
            )
        except RESERVATION_ERRORS as e:
            return _error_response(e)

        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AssignRoomSerializer, responses={200: ReservationSerializer}, tags=['reservations'])
    @action(detail=True, methods=['post'])
    def assign_room(self, request, pk=None):
        serializer = AssignRoomSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reservation = assign_room(
                tenant=request.user.tenant,
                reservation_id=pk,
                room_id=serializer.validated_data['room_id'],
                actor=request.user,
            )
        except RESERVATION_ERRORS as e:
            return _error_response(e)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=None, responses={200: ReservationSerializer}, tags=['reservations'])
    @action(detail=True, methods=['post'])
    def check_in(self, request, pk=None):
        try:
            reservation = check_in(tenant=request.user.tenant, reservation_id=pk, actor=request.user)
        except RESERVATION_ERRORS as e:
            return _error_response(e)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=CheckOutSerializer, responses={200: ReservationSerializer}, tags=['reservations'])
    @action(detail=True, methods=['post'])
    def check_out(self, request, pk=None):
        """
        Check out. "force": true skips the balance check and is reserved for
        owners and managers.
        """
        serializer = CheckOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        force = serializer.validated_data['force']

        if force and not request.user.is_management:
            return Response(
                {'error': 'Only managers can check out a guest with an outstanding balance'},
                status=status.HTTP_403_FORBIDDEN,
            )

        try:
            reservation = check_out(
                tenant=request.user.tenant,
                reservation_id=pk,
                actor=request.user,
                force=force,
            )
        except RESERVATION_ERRORS as e:
            return _error_response(e)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=CancelReservationSerializer, responses={200: ReservationSerializer}, tags=['reservations'])
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = CancelReservationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reservation = cancel_reservation(
                tenant=request.user.tenant,
                reservation_id=pk,
                actor=request.user,
                reason=serializer.validated_data['reason'],
            )
        except RESERVATION_ERRORS as e:
            return _error_response(e)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=ExtendStaySerializer, responses={200: ReservationSerializer}, tags=['reservations'])
    @action(detail=True, methods=['post'])
    def extend(self, request, pk=None):
        serializer = ExtendStaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reservation = extend_stay(
                tenant=request.user.tenant,
                reservation_id=pk,
                new_check_out=serializer.validated_data['new_check_out'],
                actor=request.user,
            )
        except RESERVATION_ERRORS as e:
            return _error_response(e)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=None, responses={200: ReservationSerializer}, tags=['reservations'])
    @action(detail=True, methods=['post'])
    def no_show(self, request, pk=None):
        try:
            reservation = mark_no_show(tenant=request.user.tenant, reservation_id=pk, actor=request.user)
        except RESERVATION_ERRORS as e:
            return _error_response(e)
        return Response(ReservationSerializer(reservation).data)

    def _board_date(self, request):
        query_serializer = BoardQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        return query_serializer.validated_data.get('date')

    @extend_schema(parameters=[BoardQuerySerializer], responses={200: ReservationSerializer(many=True)}, tags=['front-desk'])
    @action(detail=False, methods=['get'])
    def arrivals(self, request):
        reservations = arrivals(tenant=request.user.tenant, on_date=self._board_date(request))
        return Response(ReservationSerializer(reservations, many=True).data)

    @extend_schema(parameters=[BoardQuerySerializer], responses={200: ReservationSerializer(many=True)}, tags=['front-desk'])
    @action(detail=False, methods=['get'])
    def departures(self, request):
        reservations = departures(tenant=request.user.tenant, on_date=self._board_date(request))
        return Response(ReservationSerializer(reservations, many=True).data)

    @extend_schema(responses={200: ReservationSerializer(many=True)}, tags=['front-desk'])
    @action(detail=False, methods=['get'])
    def in_house(self, request):
        return Response(ReservationSerializer(in_house(tenant=request.user.tenant), many=True).data)
