from django.http import HttpResponse
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiResponse

from apps.accounts.permissions import IsTenantStaff, IsManagement
from apps.billing.services import BillingServiceError
from apps.rooms.models import Room
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from .models import QRCode, ServiceRequest, OPEN_REQUEST_STATUSES
from .serializers import (
    QRCodeSerializer,
    QRCodeCreateSerializer,
    ServiceRequestSerializer,
    ServiceRequestDetailSerializer,
    GuestRequestSerializer,
    GuestRequestCreateSerializer,
    GuestSessionSerializer,
    GuestMessageSerializer,
    StaffMessageSerializer,
    RequestMessageSerializer,
    RequestAssignSerializer,
    RequestStatusSerializer,
    RequestNoteSerializer,
    RequestFilterSerializer,
    RequestAnalyticsQuerySerializer,
    PortalInfoSerializer,
    RequestAnalyticsSerializer,
)
from .services import (
    create_qr_code,
    deactivate_qr_code,
    regenerate_qr_token,
    render_qr_png,
    portal_info,
    submit_guest_request,
    get_guest_request,
    add_guest_message,
    update_request_status,
    assign_request,
    accept_request,
    complete_request,
    cancel_request,
    add_staff_message,
    request_analytics,
    QRCodeNotFoundError,
    ServiceNotEnabledError,
    ServiceRequestNotFoundError,
    InvalidRequestTransitionError,
    InvalidRequestError,
)

REQUEST_ERRORS = (ServiceRequestNotFoundError, InvalidRequestTransitionError, InvalidRequestError)


def _request_error_response(e):
    if isinstance(e, ServiceRequestNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(e, InvalidRequestTransitionError):
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


# =============================================================================
# Public guest portal (no authentication, scoped by QR token)
# =============================================================================

@extend_schema(responses={200: PortalInfoSerializer}, tags=['guest-portal'])
@api_view(['GET'])
@permission_classes([AllowAny])
def guest_portal(request, token):
    """Hotel branding and services enabled on a scanned code."""
    try:
        data = portal_info(token=token)
    except QRCodeNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(PortalInfoSerializer(data).data)


@extend_schema(
    request=GuestRequestCreateSerializer,
    responses={201: GuestRequestSerializer},
    description=(
        "Create a guest request. service is one of wifi-request, room-service, "
        "housekeeping, maintenance, digital-menu, events, feedback, front-desk-call. "
        "Keep the returned guest_session_id to follow up on the request."
    ),
    tags=['guest-portal'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def guest_submit_request(request, token, service):
    serializer = GuestRequestCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        service_request = submit_guest_request(
            token=token,
            service=service,
            details=serializer.validated_data['details'],
            session_id=serializer.validated_data['session_id'],
            priority=serializer.validated_data['priority'],
        )
    except (QRCodeNotFoundError, ServiceNotEnabledError) as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InvalidRequestError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except BillingServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response(GuestRequestSerializer(service_request).data, status=status.HTTP_201_CREATED)


@extend_schema(parameters=[GuestSessionSerializer], responses={200: GuestRequestSerializer}, tags=['guest-portal'])
@api_view(['GET'])
@permission_classes([AllowAny])
def guest_request_detail(request, request_id):
    query_serializer = GuestSessionSerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    try:
        service_request = get_guest_request(
            request_id=request_id,
            session_id=query_serializer.validated_data['session'],
        )
    except ServiceRequestNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(GuestRequestSerializer(service_request).data)


@extend_schema(request=GuestMessageSerializer, responses={201: RequestMessageSerializer}, tags=['guest-portal'])
@api_view(['POST'])
@permission_classes([AllowAny])
def guest_request_message(request, request_id):
    serializer = GuestMessageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        message = add_guest_message(
            request_id=request_id,
            session_id=serializer.validated_data['session_id'],
            message=serializer.validated_data['message'],
        )
    except ServiceRequestNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(RequestMessageSerializer(message).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Staff: QR code management
# =============================================================================

class QRCodeViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    QR codes printed in rooms and public areas.

    create: POST /api/qr/codes/
    deactivate / regenerate: POST /api/qr/codes/{id}/<action>/
    image: GET /api/qr/codes/{id}/image/ (PNG)
    """

    queryset = QRCode.objects.select_related('room')
    serializer_class = QRCodeSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsManagement]
    pagination_class = HotelPagination

    @extend_schema(request=QRCodeCreateSerializer, responses={201: QRCodeSerializer}, tags=['qr'])
    def create(self, request):
        serializer = QRCodeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = dict(serializer.validated_data)

        room = None
        room_id = params.pop('room')
        if room_id:
            room = Room.objects.filter(id=room_id, tenant=request.user.tenant).first()
            if room is None:
                return Response({'error': 'Room not found'}, status=status.HTTP_404_NOT_FOUND)

        qr_code = create_qr_code(tenant=request.user.tenant, actor=request.user, room=room, **params)
        return Response(QRCodeSerializer(qr_code).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: QRCodeSerializer}, tags=['qr'])
    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        try:
            qr_code = deactivate_qr_code(tenant=request.user.tenant, qr_code_id=pk, actor=request.user)
        except QRCodeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(QRCodeSerializer(qr_code).data)

    @extend_schema(request=None, responses={200: QRCodeSerializer}, tags=['qr'])
    @action(detail=True, methods=['post'])
    def regenerate(self, request, pk=None):
        try:
            qr_code = regenerate_qr_token(tenant=request.user.tenant, qr_code_id=pk, actor=request.user)
        except QRCodeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(QRCodeSerializer(qr_code).data)

    @extend_schema(responses={200: OpenApiResponse(response=OpenApiTypes.BINARY, description='PNG image')}, tags=['qr'])
    @action(detail=True, methods=['get'])
    def image(self, request, pk=None):
        qr_code = self.get_object()
        response = HttpResponse(render_qr_png(qr_code), content_type='image/png')
        response['Content-Disposition'] = f'inline; filename="qr-{qr_code.qr_token}.png"'
        return response


# =============================================================================
# Staff: request dashboard
# =============================================================================

class ServiceRequestViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Guest requests for staff.

    list: GET /api/qr/requests/?status=&service_type=&team=&room=&open=&updated_since=
        Poll with updated_since (the latest updated_at seen) to pick up changes.
    assign / accept / update_status / complete / cancel / messages:
        POST /api/qr/requests/{id}/<action>/
    """

    queryset = ServiceRequest.objects.select_related('room', 'assigned_to')
    serializer_class = ServiceRequestSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff]
    pagination_class = HotelPagination

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ServiceRequestDetailSerializer
        return super().get_serializer_class()

    def get_permissions(self):
        if self.action == 'assign':
            return [IsAuthenticated(), IsTenantStaff(), IsManagement()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'retrieve':
            return queryset.prefetch_related('messages__staff_user')
        if self.action != 'list':
            return queryset

        filter_serializer = RequestFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'service_type' in params:
            queryset = queryset.filter(service_type=params['service_type'])
        if params.get('team'):
            queryset = queryset.filter(assigned_team__iexact=params['team'])
        if 'room' in params:
            queryset = queryset.filter(room_id=params['room'])
        if params['open']:
            queryset = queryset.filter(status__in=OPEN_REQUEST_STATUSES)
        if 'updated_since' in params:
            queryset = queryset.filter(updated_at__gt=params['updated_since'])
        return queryset

    @extend_schema(request=RequestAssignSerializer, responses={200: ServiceRequestSerializer}, tags=['qr-requests'])
    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        serializer = RequestAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            service_request = assign_request(
                tenant=request.user.tenant,
                request_id=pk,
                assignee_id=serializer.validated_data['assignee'],
                actor=request.user,
            )
        except REQUEST_ERRORS as e:
            return _request_error_response(e)
        return Response(ServiceRequestSerializer(service_request).data)

    @extend_schema(request=None, responses={200: ServiceRequestSerializer}, tags=['qr-requests'])
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        try:
            service_request = accept_request(tenant=request.user.tenant, request_id=pk, actor=request.user)
        except REQUEST_ERRORS as e:
            return _request_error_response(e)
        return Response(ServiceRequestSerializer(service_request).data)

    @extend_schema(request=RequestStatusSerializer, responses={200: ServiceRequestSerializer}, tags=['qr-requests'])
    @action(detail=True, methods=['post'])
    def update_status(self, request, pk=None):
        serializer = RequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            service_request = update_request_status(
                tenant=request.user.tenant,
                request_id=pk,
                new_status=serializer.validated_data['status'],
                actor=request.user,
                notes=serializer.validated_data['notes'],
            )
        except REQUEST_ERRORS as e:
            return _request_error_response(e)
        return Response(ServiceRequestSerializer(service_request).data)

    @extend_schema(request=RequestNoteSerializer, responses={200: ServiceRequestSerializer}, tags=['qr-requests'])
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        serializer = RequestNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            service_request = complete_request(
                tenant=request.user.tenant,
                request_id=pk,
                actor=request.user,
                notes=serializer.validated_data['notes'],
            )
        except REQUEST_ERRORS as e:
            return _request_error_response(e)
        return Response(ServiceRequestSerializer(service_request).data)

    @extend_schema(request=RequestNoteSerializer, responses={200: ServiceRequestSerializer}, tags=['qr-requests'])
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = RequestNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            service_request = cancel_request(
                tenant=request.user.tenant,
                request_id=pk,
                actor=request.user,
                reason=serializer.validated_data['notes'],
            )
        except REQUEST_ERRORS as e:
            return _request_error_response(e)
        return Response(ServiceRequestSerializer(service_request).data)

    @extend_schema(request=StaffMessageSerializer, responses={201: RequestMessageSerializer}, tags=['qr-requests'])
    @action(detail=True, methods=['post'])
    def messages(self, request, pk=None):
        serializer = StaffMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            message = add_staff_message(
                tenant=request.user.tenant,
                request_id=pk,
                actor=request.user,
                message=serializer.validated_data['message'],
            )
        except REQUEST_ERRORS as e:
            return _request_error_response(e)
        return Response(RequestMessageSerializer(message).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[RequestAnalyticsQuerySerializer],
    responses={200: RequestAnalyticsSerializer},
    tags=['qr-requests'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsManagement])
def analytics(request):
    query_serializer = RequestAnalyticsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    data = request_analytics(tenant=request.user.tenant, **query_serializer.validated_data)
    return Response(RequestAnalyticsSerializer(data).data)
