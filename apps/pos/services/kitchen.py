"""Kitchen display tickets and daily restaurant figures."""

from decimal import Decimal

from django.db.models import Count, Prefetch, Sum
from django.utils import timezone

from apps.pos.models import PosOrder, PosOrderItem, OrderStatus, KITCHEN_STATUSES

from .orders import order_eta


def kitchen_tickets(*, tenant) -> list:
    """
    One ticket per order the kitchen is working on, oldest first.

    Orders for a room are high priority.
    """
    orders = (
        PosOrder.objects
        .filter(tenant=tenant, status__in=KITCHEN_STATUSES)
        .select_related('room')
        .prefetch_related(Prefetch('items', queryset=PosOrderItem.objects.select_related('menu_item')))
        .order_by('order_time')
    )

    tickets = []
    for order in orders:
        items = list(order.items.all())
        tickets.append({
            'ticket_id': f"{order.id}-kitchen",
            'order_id': order.id,
            'order_number': order.order_number,
            'station': 'kitchen',
            'items': [
                {
                    'name': line.item_name,
                    'quantity': line.quantity,
                    'special_requests': line.special_requests,
                }
                for line in items
            ],
            'status': order.status,
            'room': order.room.room_number if order.room else None,
            'table_number': order.table_number,
            'priority': 'high' if order.room_id else 'normal',
            'eta': order_eta(order, items),
        })
    return tickets


def pos_stats(*, tenant) -> dict:
    """
    Today's orders: count, delivered revenue, average order value and a
    count per status.
    """
    today_orders = PosOrder.objects.filter(tenant=tenant, order_time__date=timezone.localdate())
    delivered = today_orders.filter(status=OrderStatus.DELIVERED).aggregate(
        revenue=Sum('total_amount'),
        count=Count('id'),
    )

    revenue = delivered['revenue'] or Decimal('0.00')
    average = (revenue / delivered['count']).quantize(Decimal('0.01')) if delivered['count'] else Decimal('0.00')

    by_status = {choice: 0 for choice in OrderStatus.values}
    for row in today_orders.values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    return {
        'orders': today_orders.count(),
        'revenue': revenue,
        'average_order_value': average,
        'by_status': by_status,
    }
