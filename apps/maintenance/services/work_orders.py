"""Work order lifecycle."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import record_audit
from apps.maintenance.models import (
    WorkOrder,
    WorkOrderCategory,
    WorkOrderPriority,
    WorkOrderStatus,
    PRIORITY_ESCALATION,
)
from apps.rooms.models import RoomStatus
from apps.rooms.services import apply_room_status, get_locked_room
from apps.tenants.services import generate_document_number

from .exceptions import WorkOrderNotFoundError, InvalidWorkOrderTransitionError

logger = logging.getLogger(__name__)


def get_work_order(*, tenant, work_order_id: UUID) -> WorkOrder:
    try:
        return (
            WorkOrder.objects
            .select_for_update(of=('self',))
            .select_related('room')
            .get(id=work_order_id, tenant=tenant)
        )
    except WorkOrder.DoesNotExist:
        raise WorkOrderNotFoundError(f"Work order with ID {work_order_id} not found")


def _transition(work_order: WorkOrder, new_status: str) -> None:
    if not work_order.can_transition_to(new_status):
        logger.warning(
            "Rejected work order %s status change %s -> %s",
            work_order.work_order_number, work_order.status, new_status,
        )
        raise InvalidWorkOrderTransitionError(
            f"Work order cannot change from {work_order.status} to {new_status}"
        )
    work_order.status = new_status


def _audit(work_order: WorkOrder, actor, action: str, description: str = '', **metadata) -> None:
    record_audit(
        tenant=work_order.tenant,
        actor=actor,
        action=action,
        resource_type='work_order',
        resource_id=work_order.id,
        description=description or f"{work_order.work_order_number}: {work_order.title}",
        metadata=metadata,
    )


@transaction.atomic
def create_work_order(
    *,
    tenant,
    title: str,
    actor=None,
    room=None,
    description: str = '',
    category: str = WorkOrderCategory.GENERAL,
    priority: str = WorkOrderPriority.MEDIUM,
    estimated_hours: Optional[Decimal] = None,
    estimated_cost: Optional[Decimal] = None,
    take_room_offline: bool = False,
    qr_request=None,
) -> WorkOrder:
    """
    Open a work order.

    With take_room_offline the room is moved to maintenance from whatever
    state it is in (a reserved or clean room included) so it cannot be sold
    until the work is done.
    """
    if take_room_offline and room is not None:
        room = get_locked_room(tenant=tenant, room_id=room.id)
        apply_room_status(
            room, RoomStatus.MAINTENANCE, actor=actor, reason=f"Work order: {title}", enforce=False,
        )

    work_order = WorkOrder.objects.create(
        tenant=tenant,
        work_order_number=generate_document_number('WO', model=WorkOrder, field='work_order_number'),
        room=room,
        title=title,
        description=description,
        category=category,
        priority=priority,
        estimated_hours=estimated_hours,
        estimated_cost=estimated_cost,
        qr_request=qr_request,
        created_by=actor,
    )
    _audit(work_order, actor, 'work_order_created', priority=priority, room_offline=take_room_offline)
    logger.info("Created work order %s (%s)", work_order.work_order_number, priority)
    return work_order


@transaction.atomic
def accept_work_order(*, tenant, work_order_id: UUID, actor) -> WorkOrder:
    """Start work; the actor becomes the assignee."""
    work_order = get_work_order(tenant=tenant, work_order_id=work_order_id)
    _transition(work_order, WorkOrderStatus.IN_PROGRESS)

    work_order.assigned_to = actor
    work_order.assigned_at = timezone.now()
    work_order.save(update_fields=['status', 'assigned_to', 'assigned_at', 'updated_at'])
    _audit(work_order, actor, 'work_order_accepted')
    return work_order


@transaction.atomic
def complete_work_order(
    *,
    tenant,
    work_order_id: UUID,
    actor,
    completion_notes: str = '',
    actual_hours: Optional[Decimal] = None,
    actual_cost: Optional[Decimal] = None,
) -> WorkOrder:
    """
    Close a work order.

    A room still in maintenance goes to dirty so housekeeping can turn it
    around before it is sold again.
    """
    work_order = get_work_order(tenant=tenant, work_order_id=work_order_id)
    _transition(work_order, WorkOrderStatus.COMPLETED)

    work_order.completed_at = timezone.now()
    work_order.completion_notes = completion_notes
    work_order.actual_hours = actual_hours
    work_order.actual_cost = actual_cost
    if work_order.assigned_to_id is None:
        work_order.assigned_to = actor
        work_order.assigned_at = work_order.completed_at
    work_order.save()

    if work_order.room_id:
        room = get_locked_room(tenant=tenant, room_id=work_order.room_id)
        if room.status == RoomStatus.MAINTENANCE:
            apply_room_status(
                room, RoomStatus.DIRTY, actor=actor,
                reason=f"Work order {work_order.work_order_number} completed",
            )

    _audit(work_order, actor, 'work_order_completed', actual_cost=str(actual_cost) if actual_cost is not None else None)
    logger.info("Work order %s completed", work_order.work_order_number)
    return work_order


@transaction.atomic
def escalate_work_order(*, tenant, work_order_id: UUID, actor, reason: str) -> WorkOrder:
    work_order = get_work_order(tenant=tenant, work_order_id=work_order_id)
    _transition(work_order, WorkOrderStatus.ESCALATED)

    previous_priority = work_order.priority
    work_order.priority = PRIORITY_ESCALATION[work_order.priority]
    work_order.escalation_reason = reason
    work_order.save(update_fields=['status', 'priority', 'escalation_reason', 'updated_at'])
    _audit(
        work_order, actor, 'work_order_escalated', reason,
        priority_from=previous_priority, priority_to=work_order.priority,
    )
    logger.warning("Work order %s escalated to %s", work_order.work_order_number, work_order.priority)
    return work_order


@transaction.atomic
def cancel_work_order(*, tenant, work_order_id: UUID, actor, reason: str = '') -> WorkOrder:
    work_order = get_work_order(tenant=tenant, work_order_id=work_order_id)
    _transition(work_order, WorkOrderStatus.CANCELLED)
    work_order.completion_notes = reason
    work_order.save(update_fields=['status', 'completion_notes', 'updated_at'])
    _audit(work_order, actor, 'work_order_cancelled', reason)
    return work_order
