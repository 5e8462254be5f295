"""Restaurant orders: creation, pricing and the kitchen workflow."""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import record_audit
from apps.billing.models import ChargeType
from apps.billing.services import calculate_charge
from apps.pos.models import MenuItem, OrderStatus, OrderType, PosOrder, PosOrderItem
from apps.tenants.services import generate_document_number, get_hotel_settings

from .exceptions import (
    OrderNotFoundError,
    InvalidOrderError,
    MenuItemUnavailableError,
    InvalidOrderTransitionError,
)

logger = logging.getLogger(__name__)

# Who gets stamped on the order at each step
STATUS_STAMPS = {
    OrderStatus.ACCEPTED: 'taken_by',
    OrderStatus.PREPARING: 'prepared_by',
    OrderStatus.DELIVERED: 'served_by',
}


def get_order(*, tenant, order_id: UUID) -> PosOrder:
    try:
        return (
            PosOrder.objects
            .select_for_update(of=('self',))
            .select_related('room')
            .get(id=order_id, tenant=tenant)
        )
    except PosOrder.DoesNotExist:
        raise OrderNotFoundError(f"Order with ID {order_id} not found")


def price_order(*, tenant, subtotal: Decimal) -> dict:
    """Service charge and VAT for a restaurant bill."""
    return calculate_charge(
        base_amount=subtotal,
        charge_type=ChargeType.RESTAURANT,
        hotel_settings=get_hotel_settings(tenant=tenant),
    )


@transaction.atomic
def create_order(
    *,
    tenant,
    items: list,
    actor=None,
    order_type: str = OrderType.DINE_IN,
    room=None,
    table_number: str = '',
    special_instructions: str = '',
) -> PosOrder:
    """
    Create an order from ``[{menu_item, quantity, special_requests?}, ...]``.

    Item names and prices are copied onto the order lines so later menu
    changes do not alter the bill.

    Raises:
        InvalidOrderError: If there are no items or room service has no room
        MenuItemUnavailableError: If an item is unknown or not available
    """
    if not items:
        raise InvalidOrderError("An order needs at least one item")
    if order_type == OrderType.ROOM_SERVICE and room is None:
        raise InvalidOrderError("Room service orders need a room")

    item_ids = [line['menu_item'] for line in items]
    menu = {
        item.id: item
        for item in MenuItem.objects.filter(tenant=tenant, id__in=item_ids)
    }

    lines = []
    subtotal = Decimal('0.00')
    for line in items:
        menu_item = menu.get(line['menu_item'])
        if menu_item is None:
            raise MenuItemUnavailableError(f"Menu item {line['menu_item']} not found")
        if not menu_item.is_available:
            raise MenuItemUnavailableError(f"{menu_item.name} is not available")

        quantity = int(line['quantity'])
        if quantity < 1:
            raise InvalidOrderError(f"Quantity for {menu_item.name} must be at least 1")

        line_total = menu_item.price * quantity
        subtotal += line_total
        lines.append((menu_item, quantity, line_total, line.get('special_requests', '')))

    pricing = price_order(tenant=tenant, subtotal=subtotal)

    order = PosOrder.objects.create(
        tenant=tenant,
        order_number=generate_document_number('POS', model=PosOrder, field='order_number'),
        order_type=order_type,
        room=room,
        table_number=table_number,
        subtotal=pricing['base_amount'],
        service_charge=pricing['service_charge_amount'],
        tax_amount=pricing['vat_amount'],
        total_amount=pricing['total_amount'],
        special_instructions=special_instructions,
        created_by=actor,
    )
    PosOrderItem.objects.bulk_create([
        PosOrderItem(
            order=order,
            menu_item=menu_item,
            item_name=menu_item.name,
            item_price=menu_item.price,
            quantity=quantity,
            line_total=line_total,
            special_requests=special_requests,
        )
        for menu_item, quantity, line_total, special_requests in lines
    ])

    record_audit(
        tenant=tenant,
        actor=actor,
        action='pos_order_created',
        resource_type='pos_order',
        resource_id=order.id,
        description=f"{order.order_number}: {order.total_amount}",
        metadata={'order_type': order_type, 'items': len(lines)},
    )
    logger.info("Created POS order %s total %s", order.order_number, order.total_amount)
    return order


@transaction.atomic
def update_order_status(*, tenant, order_id: UUID, new_status: str, actor) -> PosOrder:
    """
    Move an order along pending -> accepted -> preparing -> ready -> delivered.

    Cancelling is allowed while pending or accepted.

    Raises:
        OrderNotFoundError, InvalidOrderTransitionError
    """
    order = get_order(tenant=tenant, order_id=order_id)
    if not order.can_transition_to(new_status):
        logger.warning("Rejected order %s status change %s -> %s", order.order_number, order.status, new_status)
        raise InvalidOrderTransitionError(f"Order cannot change from {order.status} to {new_status}")
    if new_status == OrderStatus.CANCELLED and order.is_paid:
        raise InvalidOrderTransitionError("A paid order cannot be cancelled")

    previous = order.status
    order.status = new_status
    stamp = STATUS_STAMPS.get(new_status)
    if stamp:
        setattr(order, stamp, actor)
    if new_status == OrderStatus.DELIVERED:
        order.completed_time = timezone.now()
    order.save()

    record_audit(
        tenant=tenant,
        actor=actor,
        action='pos_order_status_changed',
        resource_type='pos_order',
        resource_id=order.id,
        description=f"{order.order_number}: {previous} -> {new_status}",
        metadata={'from': previous, 'to': new_status},
    )
    return order


def cancel_order(*, tenant, order_id: UUID, actor) -> PosOrder:
    return update_order_status(tenant=tenant, order_id=order_id, new_status=OrderStatus.CANCELLED, actor=actor)


def order_eta(order: PosOrder, items: Optional[list] = None):
    """Order time plus the slowest item's preparation time."""
    items = items if items is not None else list(order.items.select_related('menu_item'))
    minutes = max(
        (line.menu_item.preparation_time for line in items if line.menu_item),
        default=15,
    )
    return order.order_time + timedelta(minutes=minutes)
