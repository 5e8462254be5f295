from django.contrib.auth import get_user_model
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Role
from apps.accounts.permissions import IsTenantStaff, IsManagement, IsFinance, IsCashier
from apps.tenants.mixins import TenantScopedMixin, HotelPagination
from apps.tenants.services import get_hotel_settings
from .models import Folio, Payment, ShiftSession, ShiftStatus
from .serializers import (
    FolioSerializer,
    FolioDetailSerializer,
    FolioFilterSerializer,
    FolioChargeSerializer,
    PaymentSerializer,
    PaymentFilterSerializer,
    PostChargeSerializer,
    RecordPaymentSerializer,
    CloseFolioSerializer,
    RefundSerializer,
    TaxPreviewSerializer,
    ShiftSessionSerializer,
    StartShiftSerializer,
    CloseShiftSerializer,
    ShiftFilterSerializer,
    ChargeBreakdownSerializer,
    FolioBreakdownSerializer,
    ShiftSummarySerializer,
    DoubleTaxChargeSerializer,
)
from .services import (
    calculate_charge,
    post_charge,
    folio_breakdown,
    close_folio,
    record_payment,
    void_payment,
    start_shift,
    shift_summary,
    close_shift,
    scan_double_tax_charges,
    fix_double_tax_charges,
    FolioClosedError,
    OutstandingBalanceError,
    InvalidAmountError,
    DuplicatePaymentError,
    PaymentNotFoundError,
    InvalidPaymentStateError,
    ShiftAlreadyActiveError,
    ShiftClosedError,
    ShiftAuthorizationRequiredError,
)

User = get_user_model()


class FolioViewSet(TenantScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    Guest folios.

    list: GET /api/billing/folios/?status=&reservation=&has_balance=
    retrieve: GET /api/billing/folios/{id}/ (with charges and payments)
    charges: POST /api/billing/folios/{id}/charges/
    payments: POST /api/billing/folios/{id}/payments/
    breakdown: GET /api/billing/folios/{id}/breakdown/
    close: POST /api/billing/folios/{id}/close/
    """

    queryset = Folio.objects.select_related('reservation')
    serializer_class = FolioSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsCashier]
    pagination_class = HotelPagination

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return FolioDetailSerializer
        return FolioSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'retrieve':
            return queryset.prefetch_related('charges__posted_by', 'payments__processed_by')
        if self.action != 'list':
            return queryset

        filter_serializer = FolioFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'reservation' in params:
            queryset = queryset.filter(reservation_id=params['reservation'])
        if params.get('has_balance') is True:
            queryset = queryset.filter(balance__gt=0)
        elif params.get('has_balance') is False:
            queryset = queryset.filter(balance__lte=0)
        return queryset

    @extend_schema(request=PostChargeSerializer, responses={201: FolioChargeSerializer}, tags=['billing'])
    @action(detail=True, methods=['post'])
    def charges(self, request, pk=None):
        folio = self.get_object()
        serializer = PostChargeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            charge = post_charge(folio=folio, posted_by=request.user, **serializer.validated_data)
        except InvalidAmountError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except FolioClosedError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(FolioChargeSerializer(charge).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RecordPaymentSerializer, responses={201: PaymentSerializer}, tags=['billing'])
    @action(detail=True, methods=['post'])
    def payments(self, request, pk=None):
        """
        Record a payment against the folio.

        Returns 409 with the matching payment when it looks like a duplicate;
        resend with "force": true to record it anyway.
        """
        folio = self.get_object()
        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = record_payment(
                tenant=request.user.tenant,
                folio=folio,
                processed_by=request.user,
                **serializer.validated_data,
            )
        except InvalidAmountError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except FolioClosedError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except DuplicatePaymentError as e:
            return Response({
                'error': str(e),
                'duplicate_of': PaymentSerializer(e.existing_payment).data,
            }, status=status.HTTP_409_CONFLICT)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: FolioBreakdownSerializer}, tags=['billing'])
    @action(detail=True, methods=['get'])
    def breakdown(self, request, pk=None):
        return Response(FolioBreakdownSerializer(folio_breakdown(self.get_object())).data)

    @extend_schema(request=CloseFolioSerializer, responses={200: FolioSerializer}, tags=['billing'])
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        folio = self.get_object()
        serializer = CloseFolioSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        force = serializer.validated_data['force']

        if force and not request.user.is_management:
            return Response(
                {'error': 'Only managers can close a folio with an outstanding balance'},
                status=status.HTTP_403_FORBIDDEN,
            )

        try:
            folio = close_folio(folio=folio, actor=request.user, force=force)
        except (FolioClosedError, OutstandingBalanceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(FolioSerializer(folio).data)


class PaymentViewSet(TenantScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    Payments received.

    list: GET /api/billing/payments/?status=&payment_method=&folio=&shift=&date_from=&date_to=
    refund: POST /api/billing/payments/{id}/refund/ (owner, manager, accountant)
    """

    queryset = Payment.objects.select_related('folio', 'processed_by')
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsCashier]
    pagination_class = HotelPagination

    def get_permissions(self):
        if self.action == 'refund':
            return [IsAuthenticated(), IsTenantStaff(), IsFinance()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = PaymentFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'payment_method' in params:
            queryset = queryset.filter(payment_method=params['payment_method'])
        if 'folio' in params:
            queryset = queryset.filter(folio_id=params['folio'])
        if 'shift' in params:
            queryset = queryset.filter(shift_id=params['shift'])
        if 'date_from' in params:
            queryset = queryset.filter(created_at__date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(created_at__date__lte=params['date_to'])
        return queryset

    @extend_schema(request=RefundSerializer, responses={200: PaymentSerializer}, tags=['billing'])
    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = void_payment(
                tenant=request.user.tenant,
                payment_id=pk,
                actor=request.user,
                reason=serializer.validated_data['reason'],
            )
        except PaymentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPaymentStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(PaymentSerializer(payment).data)


class ShiftViewSet(TenantScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    Cash drawer shifts.

    Staff see their own shifts; managers and accountants see every shift.

    start: POST /api/billing/shifts/start/
    current: GET /api/billing/shifts/current/
    summary: GET /api/billing/shifts/{id}/summary/
    close: POST /api/billing/shifts/{id}/close/
    """

    queryset = ShiftSession.objects.select_related('staff', 'authorized_by')
    serializer_class = ShiftSessionSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsCashier]
    pagination_class = HotelPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if not (user.is_management or user.role == Role.ACCOUNTANT):
            queryset = queryset.filter(staff=user)
        if self.action != 'list':
            return queryset

        filter_serializer = ShiftFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'staff' in params:
            queryset = queryset.filter(staff_id=params['staff'])
        return queryset

    @extend_schema(request=StartShiftSerializer, responses={201: ShiftSessionSerializer}, tags=['shifts'])
    @action(detail=False, methods=['post'])
    def start(self, request):
        serializer = StartShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            shift = start_shift(staff=request.user, opening_cash=serializer.validated_data['opening_cash'])
        except ShiftAlreadyActiveError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(ShiftSessionSerializer(shift).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ShiftSummarySerializer}, tags=['shifts'])
    @action(detail=False, methods=['get'])
    def current(self, request):
        shift = ShiftSession.objects.filter(staff=request.user, status=ShiftStatus.ACTIVE).first()
        if shift is None:
            return Response({'error': 'No active shift'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ShiftSummarySerializer(shift_summary(shift)).data)

    @extend_schema(responses={200: ShiftSummarySerializer}, tags=['shifts'])
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        return Response(ShiftSummarySerializer(shift_summary(self.get_object())).data)

    @extend_schema(request=CloseShiftSerializer, responses={200: ShiftSessionSerializer}, tags=['shifts'])
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """
        Close a shift with the counted cash.

        A cash variance needs "authorized_by" (a manager or owner) unless the
        caller is one.
        """
        shift = self.get_object()
        if shift.staff_id != request.user.id and not request.user.is_management:
            return Response(
                {'error': 'Only the shift owner or a manager can close this shift'},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = CloseShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        authorized_by = None
        if params['authorized_by']:
            authorized_by = User.objects.filter(id=params['authorized_by']).first()

        try:
            shift = close_shift(
                shift=shift,
                counted_cash=params['counted_cash'],
                closed_by=request.user,
                handover_notes=params['handover_notes'],
                authorized_by=authorized_by,
            )
        except ShiftClosedError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except ShiftAuthorizationRequiredError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(ShiftSessionSerializer(shift).data)


@extend_schema(
    request=TaxPreviewSerializer,
    responses={200: ChargeBreakdownSerializer},
    description="Preview VAT and service charge for an amount under the hotel's settings.",
    tags=['billing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTenantStaff])
def tax_preview(request):
    serializer = TaxPreviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    params = serializer.validated_data

    breakdown = calculate_charge(
        base_amount=params['amount'],
        charge_type=params['charge_type'],
        hotel_settings=get_hotel_settings(tenant=request.user.tenant),
        is_taxable=params['is_taxable'],
        is_service_chargeable=params['is_service_chargeable'],
        guest_tax_exempt=params['guest_tax_exempt'],
    )
    return Response(ChargeBreakdownSerializer(breakdown).data)


@extend_schema(
    responses={200: DoubleTaxChargeSerializer(many=True)},
    description="Room charges that appear to have been taxed twice.",
    tags=['billing'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsManagement])
def double_tax_scan(request):
    items = scan_double_tax_charges(tenant=request.user.tenant)
    return Response({
        'total': len(items),
        'charges': DoubleTaxChargeSerializer(items, many=True).data,
    })


@extend_schema(
    request=None,
    description="Rewrite double-taxed room charges and recalculate their folios.",
    tags=['billing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTenantStaff, IsManagement])
def double_tax_fix(request):
    result = fix_double_tax_charges(tenant=request.user.tenant, actor=request.user)
    return Response({
        'charges_fixed': result['charges_fixed'],
        'folios_recalculated': result['folios_recalculated'],
        'total_adjustment': str(result['total_adjustment']),
    })
