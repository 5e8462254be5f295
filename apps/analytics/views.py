from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsTenantStaff, IsFinance
from .analytics import HotelAnalytics
from .serializers import (
    # Input serializers
    OccupancyQuerySerializer,
    DateRangeQuerySerializer,
    # Response serializers
    OccupancySerializer,
    RevenueReportSerializer,
    DashboardResponseSerializer,
    OutstandingBalanceSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError

REPORT_PERMISSIONS = [IsAuthenticated, IsTenantStaff, IsFinance]


@extend_schema(
    parameters=[OccupancyQuerySerializer],
    responses={200: OccupancySerializer},
    description="Room counts and occupancy rate for a date (today by default).",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes(REPORT_PERMISSIONS)
def occupancy(request):
    query_serializer = OccupancyQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    data = HotelAnalytics.occupancy(
        tenant=request.user.tenant,
        on_date=query_serializer.validated_data.get('date'),
    )
    return Response(OccupancySerializer(data).data)


@extend_schema(
    parameters=[DateRangeQuerySerializer],
    responses={
        200: RevenueReportSerializer,
        400: ErrorSerializer,
    },
    description="Charges by day and type, payments by method, ADR and RevPAR.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes(REPORT_PERMISSIONS)
def revenue(request):
    """Revenue report - thin HTTP handler."""
    query_serializer = DateRangeQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = HotelAnalytics.revenue(
            tenant=request.user.tenant,
            start_date=params['start_date'],
            end_date=params['end_date'],
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(RevenueReportSerializer(data).data)


@extend_schema(
    responses={200: DashboardResponseSerializer},
    description="Today's arrivals, departures, occupancy, open work and outstanding balances.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes(REPORT_PERMISSIONS)
def dashboard(request):
    data = HotelAnalytics.dashboard(tenant=request.user.tenant)
    return Response(DashboardResponseSerializer(data).data)


@extend_schema(
    responses={200: OutstandingBalanceSerializer(many=True)},
    description="Open folios that still owe money, largest balance first.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes(REPORT_PERMISSIONS)
def outstanding_balances(request):
    data = HotelAnalytics.outstanding_balances(tenant=request.user.tenant)
    return Response(OutstandingBalanceSerializer(data, many=True).data)
