"""Housekeeping board counters."""

from django.db.models import Count, Q
from django.utils import timezone

from apps.housekeeping.models import HousekeepingTask, TaskStatus
from apps.rooms.models import Room, RoomStatus


def housekeeping_stats(*, tenant) -> dict:
    today = timezone.localdate()
    tasks = HousekeepingTask.objects.filter(tenant=tenant).aggregate(
        pending=Count('id', filter=Q(status=TaskStatus.PENDING)),
        in_progress=Count('id', filter=Q(status=TaskStatus.IN_PROGRESS)),
        delayed=Count('id', filter=Q(status=TaskStatus.DELAYED)),
        completed_today=Count('id', filter=Q(status=TaskStatus.COMPLETED, completed_at__date=today)),
    )
    rooms = Room.objects.filter(tenant=tenant).aggregate(
        dirty_rooms=Count('id', filter=Q(status=RoomStatus.DIRTY)),
        out_of_service_rooms=Count('id', filter=Q(status=RoomStatus.OUT_OF_SERVICE)),
        maintenance_rooms=Count('id', filter=Q(status=RoomStatus.MAINTENANCE)),
    )
    return {**tasks, **rooms}
