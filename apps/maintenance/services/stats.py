"""Maintenance board counters."""

from django.db.models import Avg, Count, DurationField, ExpressionWrapper, F, Q
from django.utils import timezone

from apps.maintenance.models import (
    WorkOrder,
    WorkOrderPriority,
    WorkOrderStatus,
    OPEN_WORK_ORDER_STATUSES,
)


def maintenance_stats(*, tenant) -> dict:
    """
    Open issues, completions today, pending critical orders and the average
    resolution time in minutes (None until an order has been completed).
    """
    today = timezone.localdate()
    work_orders = WorkOrder.objects.filter(tenant=tenant)

    counts = work_orders.aggregate(
        open_issues=Count('id', filter=Q(status__in=OPEN_WORK_ORDER_STATUSES)),
        completed_today=Count('id', filter=Q(status=WorkOrderStatus.COMPLETED, completed_at__date=today)),
        pending_critical=Count(
            'id',
            filter=Q(status__in=OPEN_WORK_ORDER_STATUSES, priority=WorkOrderPriority.CRITICAL),
        ),
    )

    resolution = (
        work_orders
        .filter(status=WorkOrderStatus.COMPLETED, completed_at__isnull=False)
        .annotate(duration=ExpressionWrapper(F('completed_at') - F('created_at'), output_field=DurationField()))
        .aggregate(average=Avg('duration'))
    )['average']

    counts['average_resolution_minutes'] = (
        round(resolution.total_seconds() / 60, 1) if resolution is not None else None
    )
    return counts
