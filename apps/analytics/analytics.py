"""
Analytics Module
=================

Read-only reporting queries for hotel dashboards: occupancy, revenue with
ADR and RevPAR, the operations dashboard and outstanding folio balances.

Classes:
    HotelAnalytics: Static methods for the reporting queries.

Example:
    Revenue for the last week::

        from apps.analytics.analytics import HotelAnalytics

        report = HotelAnalytics.revenue(
            tenant=hotel,
            start_date=date.today() - timedelta(days=6),
            end_date=date.today(),
        )
        print(report['adr'], report['revpar'])

Note:
    All methods return plain dictionaries or lists, ready for the response
    serializers.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.billing.models import ChargeType, Folio, FolioCharge, FolioStatus, Payment, PaymentRecordStatus
from apps.housekeeping.models import HousekeepingTask, OPEN_TASK_STATUSES
from apps.maintenance.models import WorkOrder, OPEN_WORK_ORDER_STATUSES
from apps.qr.models import ServiceRequest, OPEN_REQUEST_STATUSES
from apps.reservations.models import Reservation, ReservationStatus
from apps.reservations.services import arrivals, departures, in_house
from apps.rooms.models import Room, RoomStatus, UNSELLABLE_STATUSES

from .exceptions import InvalidDateRangeError

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

# Stays that consumed a room on the nights they cover
STAYED_STATUSES = (ReservationStatus.CHECKED_IN, ReservationStatus.CHECKED_OUT)
UPCOMING_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

MAX_REPORT_DAYS = 366


def _rate(part, whole) -> Decimal:
    """Percentage rounded to two places, 0 when whole is 0."""
    if not whole:
        return ZERO
    return (Decimal(part) * 100 / Decimal(whole)).quantize(CENT, rounding=ROUND_HALF_UP)


def _per_unit(amount, units) -> Decimal:
    if not units:
        return ZERO
    return (Decimal(amount) / Decimal(units)).quantize(CENT, rounding=ROUND_HALF_UP)


class HotelAnalytics:
    """
    Reporting queries scoped to one hotel.

    Methods:
        occupancy: Room counts and occupancy rate for a date.
        revenue: Charges, payments, ADR and RevPAR for a date range.
        dashboard: Today's operational summary.
        outstanding_balances: Open folios that still owe money.
    """

    @staticmethod
    def occupancy(*, tenant, on_date=None) -> dict:
        """
        Occupancy for a date.

        Today is read from live room statuses. Other dates are derived from
        the reservations covering that night; maintenance and out-of-service
        counts always reflect the rooms' current state.

        Returns:
            dict: date, total_rooms, occupied, reserved, available,
            out_of_order, sellable_rooms, occupancy_rate (percent)
        """
        on_date = on_date or timezone.localdate()
        rooms = Room.objects.filter(tenant=tenant)
        counts = rooms.aggregate(
            total=Count('id'),
            occupied=Count('id', filter=Q(status=RoomStatus.OCCUPIED)),
            reserved=Count('id', filter=Q(status=RoomStatus.RESERVED)),
            out_of_order=Count('id', filter=Q(status__in=UNSELLABLE_STATUSES)),
        )

        if on_date != timezone.localdate():
            covering = Reservation.objects.filter(
                tenant=tenant,
                room__isnull=False,
                check_in_date__lte=on_date,
                check_out_date__gt=on_date,
            )
            counts['occupied'] = (
                covering.filter(status__in=STAYED_STATUSES).order_by().values('room_id').distinct().count()
            )
            counts['reserved'] = (
                covering.filter(status__in=UPCOMING_STATUSES).order_by().values('room_id').distinct().count()
            )

        sellable = counts['total'] - counts['out_of_order']
        return {
            'date': on_date,
            'total_rooms': counts['total'],
            'occupied': counts['occupied'],
            'reserved': counts['reserved'],
            'available': max(sellable - counts['occupied'] - counts['reserved'], 0),
            'out_of_order': counts['out_of_order'],
            'sellable_rooms': sellable,
            'occupancy_rate': _rate(counts['occupied'], sellable),
        }

    @staticmethod
    def occupied_room_nights(*, tenant, start_date: date, end_date: date) -> int:
        """Nights inside [start_date, end_date] covered by stays that happened."""
        last_night = end_date + timedelta(days=1)
        stays = Reservation.objects.filter(
            tenant=tenant,
            status__in=STAYED_STATUSES,
            check_in_date__lt=last_night,
            check_out_date__gt=start_date,
        ).values_list('check_in_date', 'check_out_date')

        return sum(
            (min(check_out, last_night) - max(check_in, start_date)).days
            for check_in, check_out in stays
        )

    @staticmethod
    def revenue(*, tenant, start_date: date, end_date: date) -> dict:
        """
        Revenue for an inclusive date range.

        Charges are grouped by posting day and by charge type. Room revenue
        is the net (pre-tax) base of room and overstay charges:
            ADR    = room revenue / occupied room-nights
            RevPAR = room revenue / (sellable rooms x days)

        Raises:
            InvalidDateRangeError: If start_date is after end_date or the
            range is longer than a year
        """
        if start_date > end_date:
            raise InvalidDateRangeError("start_date must not be after end_date")
        days = (end_date - start_date).days + 1
        if days > MAX_REPORT_DAYS:
            raise InvalidDateRangeError(f"Reports cover at most {MAX_REPORT_DAYS} days")

        charges = FolioCharge.objects.filter(
            folio__tenant=tenant,
            created_at__date__gte=start_date,
            created_at__date__lte=end_date,
        )
        payments = Payment.objects.filter(
            tenant=tenant,
            status=PaymentRecordStatus.COMPLETED,
            created_at__date__gte=start_date,
            created_at__date__lte=end_date,
        )

        by_day = [
            {'date': row['day'], 'total': row['total'], 'count': row['count']}
            for row in (
                charges.annotate(day=TruncDate('created_at'))
                .values('day')
                .annotate(total=Sum('amount'), count=Count('id'))
                .order_by('day')
            )
        ]
        by_charge_type = list(
            charges.values('charge_type')
            .annotate(
                base=Sum('base_amount'),
                service_charge=Sum('service_charge_amount'),
                vat=Sum('vat_amount'),
                total=Sum('amount'),
            )
            .order_by('-total')
        )
        payments_by_method = list(
            payments.values('payment_method')
            .annotate(total=Sum('amount'), count=Count('id'))
            .order_by('-total')
        )

        totals = charges.aggregate(
            total=Sum('amount'),
            vat=Sum('vat_amount'),
            service_charge=Sum('service_charge_amount'),
        )
        room_revenue = (
            charges.filter(charge_type__in=(ChargeType.ROOM, ChargeType.OVERSTAY))
            .aggregate(total=Sum('base_amount'))['total'] or ZERO
        )
        room_nights = HotelAnalytics.occupied_room_nights(
            tenant=tenant, start_date=start_date, end_date=end_date
        )
        sellable = Room.objects.filter(tenant=tenant).exclude(status__in=UNSELLABLE_STATUSES).count()

        return {
            'start_date': start_date,
            'end_date': end_date,
            'total_revenue': totals['total'] or ZERO,
            'total_vat': totals['vat'] or ZERO,
            'total_service_charge': totals['service_charge'] or ZERO,
            'total_payments': payments.aggregate(total=Sum('amount'))['total'] or ZERO,
            'by_day': by_day,
            'by_charge_type': by_charge_type,
            'payments_by_method': payments_by_method,
            'room_revenue': room_revenue,
            'occupied_room_nights': room_nights,
            'available_room_nights': sellable * days,
            'adr': _per_unit(room_revenue, room_nights),
            'revpar': _per_unit(room_revenue, sellable * days),
        }

    @staticmethod
    def outstanding_balances(*, tenant) -> list:
        """Open folios with a positive balance, largest first."""
        folios = (
            Folio.objects
            .filter(tenant=tenant, status=FolioStatus.OPEN, balance__gt=0)
            .select_related('reservation__room')
            .order_by('-balance')
        )
        return [
            {
                'folio_id': folio.id,
                'folio_number': folio.folio_number,
                'reservation_number': folio.reservation.reservation_number if folio.reservation else None,
                'guest_name': folio.reservation.guest_name if folio.reservation else '',
                'room_number': (
                    folio.reservation.room.room_number
                    if folio.reservation and folio.reservation.room else None
                ),
                'check_out_date': folio.reservation.check_out_date if folio.reservation else None,
                'total_charges': folio.total_charges,
                'total_payments': folio.total_payments,
                'balance': folio.balance,
            }
            for folio in folios
        ]

    @staticmethod
    def dashboard(*, tenant) -> dict:
        """Today's front-of-house and back-of-house summary."""
        outstanding = (
            Folio.objects
            .filter(tenant=tenant, status=FolioStatus.OPEN, balance__gt=0)
            .aggregate(total=Sum('balance'), count=Count('id'))
        )
        return {
            'date': timezone.localdate(),
            'arrivals': arrivals(tenant=tenant).count(),
            'departures': departures(tenant=tenant).count(),
            'in_house': in_house(tenant=tenant).count(),
            'occupancy': HotelAnalytics.occupancy(tenant=tenant),
            'pending_requests': ServiceRequest.objects.filter(
                tenant=tenant, status__in=OPEN_REQUEST_STATUSES
            ).count(),
            'open_work_orders': WorkOrder.objects.filter(
                tenant=tenant, status__in=OPEN_WORK_ORDER_STATUSES
            ).count(),
            'housekeeping_backlog': HousekeepingTask.objects.filter(
                tenant=tenant, status__in=OPEN_TASK_STATUSES
            ).count(),
            'outstanding_balance': outstanding['total'] or ZERO,
            'outstanding_folios': outstanding['count'],
        }
