"""Staff side of guest requests: triage, status changes and messages."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Avg, Count, DurationField, ExpressionWrapper, F
from django.utils import timezone

from apps.audit.services import record_audit
from apps.qr.models import (
    ServiceRequest,
    RequestMessage,
    RequestStatus,
    MessageSender,
    OPEN_REQUEST_STATUSES,
)

from .exceptions import ServiceRequestNotFoundError, InvalidRequestTransitionError, InvalidRequestError

logger = logging.getLogger(__name__)
User = get_user_model()


def get_request(*, tenant, request_id: UUID) -> ServiceRequest:
    try:
        return (
            ServiceRequest.objects
            .select_for_update(of=('self',))
            .select_related('room')
            .get(id=request_id, tenant=tenant)
        )
    except ServiceRequest.DoesNotExist:
        raise ServiceRequestNotFoundError(f"Request with ID {request_id} not found")


def _apply_status(service_request: ServiceRequest, new_status: str, actor) -> str:
    if not service_request.can_transition_to(new_status):
        logger.warning(
            "Rejected request %s status change %s -> %s",
            service_request.id, service_request.status, new_status,
        )
        raise InvalidRequestTransitionError(
            f"Request cannot change from {service_request.status} to {new_status}"
        )

    previous = service_request.status
    service_request.status = new_status
    if new_status == RequestStatus.COMPLETED:
        service_request.completed_at = timezone.now()
        service_request.completed_by = actor
    if new_status == RequestStatus.ACCEPTED and service_request.assigned_to_id is None:
        service_request.assigned_to = actor
    return previous


def _audit(service_request: ServiceRequest, actor, action: str, description: str = '', **metadata) -> None:
    record_audit(
        tenant=service_request.tenant,
        actor=actor,
        action=action,
        resource_type='service_request',
        resource_id=service_request.id,
        description=description or service_request.get_service_type_display(),
        metadata=metadata,
    )


@transaction.atomic
def update_request_status(*, tenant, request_id: UUID, new_status: str, actor, notes: str = '') -> ServiceRequest:
    """
    Move a request along its workflow.

    Raises:
        ServiceRequestNotFoundError, InvalidRequestTransitionError
    """
    service_request = get_request(tenant=tenant, request_id=request_id)
    previous = _apply_status(service_request, new_status, actor)
    if notes:
        service_request.notes = notes
    service_request.save()
    _audit(service_request, actor, 'guest_request_status_changed', notes, **{'from': previous, 'to': new_status})
    logger.info("Request %s %s -> %s", service_request.id, previous, new_status)
    return service_request


@transaction.atomic
def assign_request(*, tenant, request_id: UUID, assignee_id: UUID, actor) -> ServiceRequest:
    service_request = get_request(tenant=tenant, request_id=request_id)
    assignee = User.objects.filter(id=assignee_id, tenant=tenant, is_active=True).first()
    if assignee is None:
        raise InvalidRequestError("Requests can only be assigned to active staff of this hotel")

    if service_request.status != RequestStatus.ASSIGNED:
        _apply_status(service_request, RequestStatus.ASSIGNED, actor)
    service_request.assigned_to = assignee
    service_request.save()
    _audit(service_request, actor, 'guest_request_assigned', f"Assigned to {assignee.email}")
    return service_request


def accept_request(*, tenant, request_id: UUID, actor) -> ServiceRequest:
    return update_request_status(tenant=tenant, request_id=request_id, new_status=RequestStatus.ACCEPTED, actor=actor)


def complete_request(*, tenant, request_id: UUID, actor, notes: str = '') -> ServiceRequest:
    return update_request_status(
        tenant=tenant, request_id=request_id, new_status=RequestStatus.COMPLETED, actor=actor, notes=notes
    )


def cancel_request(*, tenant, request_id: UUID, actor, reason: str = '') -> ServiceRequest:
    return update_request_status(
        tenant=tenant, request_id=request_id, new_status=RequestStatus.CANCELLED, actor=actor, notes=reason
    )


@transaction.atomic
def add_staff_message(*, tenant, request_id: UUID, actor, message: str) -> RequestMessage:
    service_request = get_request(tenant=tenant, request_id=request_id)
    entry = RequestMessage.objects.create(
        request=service_request,
        sender=MessageSender.STAFF,
        staff_user=actor,
        message=message,
    )
    service_request.save(update_fields=['updated_at'])
    return entry


def request_analytics(*, tenant, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    """
    Requests per service type and average completion time in minutes.

    Returns:
        dict: total, open, by_service_type (list of {service_type, count}),
        average_completion_minutes (None when nothing completed)
    """
    requests = ServiceRequest.objects.filter(tenant=tenant)
    if start_date:
        requests = requests.filter(created_at__date__gte=start_date)
    if end_date:
        requests = requests.filter(created_at__date__lte=end_date)

    by_type = list(
        requests.values('service_type')
        .annotate(count=Count('id'))
        .order_by('-count', 'service_type')
    )
    average = (
        requests
        .filter(status=RequestStatus.COMPLETED, completed_at__isnull=False)
        .annotate(duration=ExpressionWrapper(F('completed_at') - F('created_at'), output_field=DurationField()))
        .aggregate(average=Avg('duration'))
    )['average']

    return {
        'total': requests.count(),
        'open': requests.filter(status__in=OPEN_REQUEST_STATUSES).count(),
        'by_service_type': by_type,
        'average_completion_minutes': round(average.total_seconds() / 60, 1) if average is not None else None,
    }
