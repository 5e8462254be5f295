"""Housekeeping task lifecycle."""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Role
from apps.audit.services import record_audit
from apps.housekeeping.models import (
    HousekeepingTask,
    TaskStatus,
    TaskPriority,
    TaskType,
    CLEANING_TASK_TYPES,
)
from apps.qr.models import OPEN_REQUEST_STATUSES, RequestStatus
from apps.rooms.models import RoomStatus
from apps.rooms.services import apply_room_status, get_locked_room

from .exceptions import TaskNotFoundError, InvalidTaskTransitionError, InvalidAssigneeError

logger = logging.getLogger(__name__)
User = get_user_model()

ASSIGNABLE_ROLES = (Role.HOUSEKEEPING, Role.MANAGER, Role.OWNER)


def get_task(*, tenant, task_id: UUID) -> HousekeepingTask:
    try:
        return (
            HousekeepingTask.objects
            .select_for_update(of=('self',))
            .select_related('room')
            .get(id=task_id, tenant=tenant)
        )
    except HousekeepingTask.DoesNotExist:
        raise TaskNotFoundError(f"Task with ID {task_id} not found")


def _transition(task: HousekeepingTask, new_status: str) -> str:
    if not task.can_transition_to(new_status):
        logger.warning("Rejected task %s status change %s -> %s", task.id, task.status, new_status)
        raise InvalidTaskTransitionError(f"Task cannot change from {task.status} to {new_status}")
    previous = task.status
    task.status = new_status
    return previous


def _audit(task: HousekeepingTask, actor, action: str, description: str = '', **metadata) -> None:
    record_audit(
        tenant=task.tenant,
        actor=actor,
        action=action,
        resource_type='housekeeping_task',
        resource_id=task.id,
        description=description or task.title,
        metadata=metadata,
    )


@transaction.atomic
def create_task(
    *,
    tenant,
    title: str,
    actor=None,
    room=None,
    task_type: str = TaskType.CLEANING,
    priority: str = TaskPriority.MEDIUM,
    description: str = '',
    estimated_minutes: int = 30,
    checklist: Optional[list] = None,
    assigned_to=None,
    qr_request=None,
) -> HousekeepingTask:
    """Queue a housekeeping task, optionally pre-assigned."""
    task = HousekeepingTask.objects.create(
        tenant=tenant,
        room=room,
        title=title,
        description=description,
        task_type=task_type,
        priority=priority,
        estimated_minutes=estimated_minutes,
        checklist=checklist or [],
        assigned_to=assigned_to,
        assigned_at=timezone.now() if assigned_to else None,
        qr_request=qr_request,
        created_by=actor,
    )
    _audit(task, actor, 'housekeeping_task_created', task_type=task_type, priority=priority)
    logger.info("Created housekeeping task %s (%s)", task.id, task_type)
    return task


@transaction.atomic
def assign_task(*, tenant, task_id: UUID, assignee_id: UUID, actor) -> HousekeepingTask:
    """
    Assign a task to a member of the housekeeping team.

    Raises:
        TaskNotFoundError, InvalidTaskTransitionError, InvalidAssigneeError
    """
    task = get_task(tenant=tenant, task_id=task_id)
    if task.status not in (TaskStatus.PENDING, TaskStatus.DELAYED, TaskStatus.IN_PROGRESS):
        raise InvalidTaskTransitionError(f"Cannot assign a {task.status} task")

    assignee = User.objects.filter(id=assignee_id, tenant=tenant, is_active=True).first()
    if assignee is None or assignee.role not in ASSIGNABLE_ROLES:
        raise InvalidAssigneeError("Tasks can only be assigned to active housekeeping staff")

    task.assigned_to = assignee
    task.assigned_at = timezone.now()
    task.save(update_fields=['assigned_to', 'assigned_at', 'updated_at'])
    _audit(task, actor, 'housekeeping_task_assigned', f"Assigned to {assignee.email}")
    return task


@transaction.atomic
def accept_task(*, tenant, task_id: UUID, actor) -> HousekeepingTask:
    """Start work on a task; the actor takes it if nobody was assigned."""
    task = get_task(tenant=tenant, task_id=task_id)
    _transition(task, TaskStatus.IN_PROGRESS)

    task.started_at = timezone.now()
    if task.assigned_to_id is None:
        task.assigned_to = actor
        task.assigned_at = task.started_at
    task.save(update_fields=['status', 'started_at', 'assigned_to', 'assigned_at', 'updated_at'])
    _audit(task, actor, 'housekeeping_task_started')
    logger.info("Housekeeping task %s started by %s", task.id, actor.email)
    return task


def _close_linked_request(task: HousekeepingTask, actor) -> None:
    request = task.qr_request
    if request is None or request.status not in OPEN_REQUEST_STATUSES:
        return
    request.status = RequestStatus.COMPLETED
    request.completed_at = timezone.now()
    request.completed_by = actor
    request.save(update_fields=['status', 'completed_at', 'completed_by', 'updated_at'])


@transaction.atomic
def complete_task(*, tenant, task_id: UUID, actor, notes: str = '') -> HousekeepingTask:
    """
    Finish a task.

    Cleaning tasks turn a dirty room clean. A guest request that spawned the
    task is completed with it.
    """
    task = get_task(tenant=tenant, task_id=task_id)
    _transition(task, TaskStatus.COMPLETED)

    task.completed_at = timezone.now()
    if task.started_at:
        task.actual_minutes = max(int((task.completed_at - task.started_at).total_seconds() // 60), 0)
    if notes:
        task.notes = notes
    task.save(update_fields=['status', 'completed_at', 'actual_minutes', 'notes', 'updated_at'])

    if task.room_id and task.task_type in CLEANING_TASK_TYPES:
        room = get_locked_room(tenant=tenant, room_id=task.room_id)
        if room.status == RoomStatus.DIRTY:
            apply_room_status(room, RoomStatus.CLEAN, actor=actor, reason=f"Cleaned: {task.title}")

    _close_linked_request(task, actor)
    _audit(task, actor, 'housekeeping_task_completed', actual_minutes=task.actual_minutes)
    logger.info("Housekeeping task %s completed in %s min", task.id, task.actual_minutes)
    return task


@transaction.atomic
def delay_task(*, tenant, task_id: UUID, actor, reason: str = '') -> HousekeepingTask:
    task = get_task(tenant=tenant, task_id=task_id)
    _transition(task, TaskStatus.DELAYED)
    if reason:
        task.notes = reason
    task.save(update_fields=['status', 'notes', 'updated_at'])
    _audit(task, actor, 'housekeeping_task_delayed', reason)
    return task


@transaction.atomic
def cancel_task(*, tenant, task_id: UUID, actor, reason: str = '') -> HousekeepingTask:
    task = get_task(tenant=tenant, task_id=task_id)
    _transition(task, TaskStatus.CANCELLED)
    if reason:
        task.notes = reason
    task.save(update_fields=['status', 'notes', 'updated_at'])
    _audit(task, actor, 'housekeeping_task_cancelled', reason)
    return task
