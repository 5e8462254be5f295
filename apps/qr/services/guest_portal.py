"""
Public guest portal.

Guests are anonymous: the QR token scopes every call to one hotel (and
usually one room), and a guest session id ties follow-up calls to the
requests the same guest created.
"""

import logging
import secrets
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.audit.services import record_audit
from apps.billing.models import ChargeType
from apps.billing.services import get_room_open_folio, post_charge, NoOpenFolioError
from apps.housekeeping.models import TaskPriority, TaskType
from apps.housekeeping.services import create_task
from apps.maintenance.models import WorkOrderPriority
from apps.maintenance.services import create_work_order
from apps.qr.models import (
    QRCode,
    ServiceRequest,
    RequestMessage,
    RequestPriority,
    MessageSender,
    ServiceType,
    SERVICE_ENDPOINTS,
    SERVICE_TEAMS,
)

from .exceptions import (
    QRCodeNotFoundError,
    ServiceNotEnabledError,
    ServiceRequestNotFoundError,
    InvalidRequestError,
)

logger = logging.getLogger(__name__)

TASK_PRIORITIES = {
    RequestPriority.LOW: TaskPriority.LOW,
    RequestPriority.NORMAL: TaskPriority.MEDIUM,
    RequestPriority.HIGH: TaskPriority.HIGH,
    RequestPriority.URGENT: TaskPriority.URGENT,
}

WORK_ORDER_PRIORITIES = {
    RequestPriority.LOW: WorkOrderPriority.LOW,
    RequestPriority.NORMAL: WorkOrderPriority.MEDIUM,
    RequestPriority.HIGH: WorkOrderPriority.HIGH,
    RequestPriority.URGENT: WorkOrderPriority.CRITICAL,
}


def generate_session_id() -> str:
    return secrets.token_urlsafe(24)


def get_active_qr_code(token: str) -> QRCode:
    qr_code = (
        QRCode.objects
        .select_related('tenant', 'room')
        .filter(qr_token=token, is_active=True)
        .first()
    )
    if qr_code is None or not qr_code.tenant.is_operational:
        raise QRCodeNotFoundError("This QR code is not valid")
    return qr_code


def portal_info(*, token: str) -> dict:
    """
    Branding and enabled services for a scanned code. Counts the scan.

    Raises:
        QRCodeNotFoundError: If the token is unknown or inactive
    """
    qr_code = get_active_qr_code(token)
    QRCode.objects.filter(id=qr_code.id).update(
        scan_count=F('scan_count') + 1,
        last_scanned_at=timezone.now(),
    )

    tenant = qr_code.tenant
    return {
        'hotel_name': tenant.hotel_name,
        'logo_url': tenant.logo_url,
        'brand_colors': tenant.brand_colors,
        'currency': tenant.currency,
        'label': qr_code.label,
        'scan_type': qr_code.scan_type,
        'room_number': qr_code.room.room_number if qr_code.room else None,
        'services': qr_code.services,
    }


def _spawn_housekeeping_task(service_request: ServiceRequest, details: dict) -> None:
    item = details.get('item') or details.get('request_type') or 'Amenities'
    create_task(
        tenant=service_request.tenant,
        room=service_request.room,
        title=f"Guest request: {item}",
        description=details.get('notes', ''),
        task_type=TaskType.AMENITY_REQUEST,
        priority=TASK_PRIORITIES[service_request.priority],
        estimated_minutes=15,
        qr_request=service_request,
    )


def _spawn_work_order(service_request: ServiceRequest, details: dict) -> None:
    create_work_order(
        tenant=service_request.tenant,
        room=service_request.room,
        title=details.get('issue') or 'Guest reported issue',
        description=details.get('notes', ''),
        priority=WORK_ORDER_PRIORITIES[service_request.priority],
        qr_request=service_request,
    )


def _post_room_service_charge(service_request: ServiceRequest, total_amount) -> None:
    try:
        amount = Decimal(str(total_amount))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidRequestError("total_amount must be a number")
    if amount <= 0:
        raise InvalidRequestError("total_amount must be greater than zero")

    try:
        folio = get_room_open_folio(service_request.room)
    except NoOpenFolioError:
        # No checked-in guest: the order is settled on delivery
        logger.info("Room service request %s not charged to a folio", service_request.id)
        return

    charge = post_charge(
        folio=folio,
        charge_type=ChargeType.ROOM_SERVICE,
        amount=amount,
        description=f"Room service (QR) - Room {service_request.room.room_number}",
        reference_type='service_request',
        reference_id=service_request.id,
    )
    service_request.folio_charge = charge
    service_request.save(update_fields=['folio_charge', 'updated_at'])


@transaction.atomic
def submit_guest_request(
    *,
    token: str,
    service: str,
    details: Optional[dict] = None,
    session_id: str = '',
    priority: str = RequestPriority.NORMAL,
) -> ServiceRequest:
    """
    Create a guest request from a portal endpoint.

    The endpoint slug picks the request type and the team. Housekeeping
    requests also open an amenity task, maintenance requests a work order,
    and room service with a total is charged to the guest's open folio.

    Raises:
        QRCodeNotFoundError: If the token is unknown or inactive
        ServiceNotEnabledError: If the endpoint is unknown or disabled on the code
        InvalidRequestError: If a room service total is not a positive number
    """
    qr_code = get_active_qr_code(token)
    if service not in SERVICE_ENDPOINTS or service not in qr_code.services:
        raise ServiceNotEnabledError(f"Service '{service}' is not available here")

    details = dict(details or {})
    service_type = SERVICE_ENDPOINTS[service]

    service_request = ServiceRequest.objects.create(
        tenant=qr_code.tenant,
        qr_code=qr_code,
        room=qr_code.room,
        guest_session_id=session_id or generate_session_id(),
        service_type=service_type,
        request_details={**details, 'endpoint': service},
        priority=priority,
        assigned_team=SERVICE_TEAMS[service_type],
        created_by_guest=True,
    )

    if service_type == ServiceType.ROOM_SERVICE and details.get('total_amount') and qr_code.room:
        _post_room_service_charge(service_request, details['total_amount'])
    elif service_type == ServiceType.HOUSEKEEPING:
        _spawn_housekeeping_task(service_request, details)
    elif service_type == ServiceType.MAINTENANCE:
        _spawn_work_order(service_request, details)

    record_audit(
        tenant=qr_code.tenant,
        action='guest_request_created',
        resource_type='service_request',
        resource_id=service_request.id,
        description=f"{service_request.get_service_type_display()} from {qr_code.label}",
        metadata={'endpoint': service, 'team': service_request.assigned_team},
    )
    logger.info(
        "Guest request %s (%s) routed to %s",
        service_request.id, service_type, service_request.assigned_team,
    )
    return service_request


def get_guest_request(*, request_id: UUID, session_id: str) -> ServiceRequest:
    """
    Raises:
        ServiceRequestNotFoundError: If the request is unknown or belongs to another session
    """
    service_request = (
        ServiceRequest.objects
        .prefetch_related('messages')
        .filter(id=request_id, guest_session_id=session_id)
        .first()
    )
    if not session_id or service_request is None:
        raise ServiceRequestNotFoundError("Request not found")
    return service_request


@transaction.atomic
def add_guest_message(*, request_id: UUID, session_id: str, message: str) -> RequestMessage:
    service_request = get_guest_request(request_id=request_id, session_id=session_id)
    entry = RequestMessage.objects.create(
        request=service_request,
        sender=MessageSender.GUEST,
        message=message,
    )
    # Touch the request so dashboards polling updated_since see the message
    service_request.save(update_fields=['updated_at'])
    return entry
