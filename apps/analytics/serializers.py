"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    OccupancyQuerySerializer - Optional report date
    DateRangeQuerySerializer - Validates start/end dates and period shortcuts

Response Serializers:
    OccupancySerializer - Room counts and occupancy rate
    RevenueReportSerializer - Revenue, ADR and RevPAR
    DashboardResponseSerializer - Today's operations summary
    OutstandingBalanceSerializer - Open folio owing money
"""

from datetime import datetime, timedelta

from django.utils import timezone
from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class OccupancyQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class DateRangeQuerySerializer(serializers.Serializer):
    """
    Validate a report range.

    Query Parameters:
        period (str): Month in YYYY-MM format (e.g., '2025-01')
        start_date (date): Start of range (defaults to 29 days before end)
        end_date (date): End of range (defaults to today)

    Note:
        If 'period' is provided it takes precedence and covers the whole month.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        period = attrs.pop('period', None)
        if period:
            year, month = (int(part) for part in period.split('-'))
            attrs['start_date'] = datetime(year, month, 1).date()
            if month == 12:
                attrs['end_date'] = datetime(year + 1, 1, 1).date() - timedelta(days=1)
            else:
                attrs['end_date'] = datetime(year, month + 1, 1).date() - timedelta(days=1)

        attrs.setdefault('end_date', timezone.localdate())
        attrs.setdefault('start_date', attrs['end_date'] - timedelta(days=29))

        if attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })
        return attrs


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class OccupancySerializer(serializers.Serializer):
    date = serializers.DateField()
    total_rooms = serializers.IntegerField()
    occupied = serializers.IntegerField()
    reserved = serializers.IntegerField()
    available = serializers.IntegerField()
    out_of_order = serializers.IntegerField()
    sellable_rooms = serializers.IntegerField()
    occupancy_rate = serializers.DecimalField(max_digits=6, decimal_places=2)


class RevenueDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    count = serializers.IntegerField()


class RevenueByChargeTypeSerializer(serializers.Serializer):
    charge_type = serializers.CharField()
    base = serializers.DecimalField(max_digits=14, decimal_places=2)
    service_charge = serializers.DecimalField(max_digits=14, decimal_places=2)
    vat = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class PaymentsByMethodSerializer(serializers.Serializer):
    payment_method = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    count = serializers.IntegerField()


class RevenueReportSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_vat = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_service_charge = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_payments = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_day = RevenueDaySerializer(many=True)
    by_charge_type = RevenueByChargeTypeSerializer(many=True)
    payments_by_method = PaymentsByMethodSerializer(many=True)
    room_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    occupied_room_nights = serializers.IntegerField()
    available_room_nights = serializers.IntegerField()
    adr = serializers.DecimalField(max_digits=14, decimal_places=2)
    revpar = serializers.DecimalField(max_digits=14, decimal_places=2)


class OutstandingBalanceSerializer(serializers.Serializer):
    folio_id = serializers.UUIDField()
    folio_number = serializers.CharField()
    reservation_number = serializers.CharField(allow_null=True)
    guest_name = serializers.CharField(allow_blank=True)
    room_number = serializers.CharField(allow_null=True)
    check_out_date = serializers.DateField(allow_null=True)
    total_charges = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_payments = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)


class DashboardResponseSerializer(serializers.Serializer):
    date = serializers.DateField()
    arrivals = serializers.IntegerField()
    departures = serializers.IntegerField()
    in_house = serializers.IntegerField()
    occupancy = OccupancySerializer()
    pending_requests = serializers.IntegerField()
    open_work_orders = serializers.IntegerField()
    housekeeping_backlog = serializers.IntegerField()
    outstanding_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    outstanding_folios = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
