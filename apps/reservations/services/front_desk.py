"""Front desk board: arrivals, departures and in-house guests."""

from datetime import date
from typing import Optional

from django.db.models import QuerySet
from django.utils import timezone

from apps.reservations.models import Reservation, ReservationStatus


def _board(tenant) -> QuerySet:
    return Reservation.objects.filter(tenant=tenant).select_related('room', 'guest')


def arrivals(*, tenant, on_date: Optional[date] = None) -> QuerySet:
    """Bookings due to arrive on a date (today by default)."""
    on_date = on_date or timezone.localdate()
    return _board(tenant).filter(
        check_in_date=on_date,
        status__in=(ReservationStatus.PENDING, ReservationStatus.CONFIRMED),
    ).order_by('guest_name')


def departures(*, tenant, on_date: Optional[date] = None) -> QuerySet:
    """In-house guests due to leave on a date, including overdue ones for today."""
    on_date = on_date or timezone.localdate()
    queryset = _board(tenant).filter(status=ReservationStatus.CHECKED_IN)
    if on_date == timezone.localdate():
        return queryset.filter(check_out_date__lte=on_date).order_by('check_out_date', 'guest_name')
    return queryset.filter(check_out_date=on_date).order_by('guest_name')


def in_house(*, tenant) -> QuerySet:
    return _board(tenant).filter(status=ReservationStatus.CHECKED_IN).order_by('room__room_number')
